"""CLI entry point for whisper-cpp-batch."""

from __future__ import annotations

from collections.abc import Sequence
import logging
import sys

from .arguments import build_help_text, default_flags, parse_invocation, wants_help
from .errors import ModelProvisioningError, UsageError
from .events import EventEmitter
from .logging_utils import setup_logging
from .settings import load_settings
from .worker import run_batch

logger = logging.getLogger("whisper_cpp_batch")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def main(argv: Sequence[str] | None = None) -> int:
    setup_logging()
    raw_args = list(sys.argv[1:] if argv is None else argv)

    if wants_help(raw_args):
        print(build_help_text())
        return EXIT_OK

    settings = load_settings()
    emitter = EventEmitter(enabled=settings.events)

    try:
        invocation = parse_invocation(raw_args, default_flags(settings.models_dir))
        summary = run_batch(invocation, settings, emitter)
    except UsageError as error:
        logger.error("%s", error)
        logger.error("Run with --help for usage.")
        return EXIT_USAGE
    except ModelProvisioningError as error:
        logger.error("Failed to download model: %s", error)
        logger.error("%s", error.manual_download_hint())
        emitter.emit_fatal_error(f"Failed to download model: {error}")
        return EXIT_FAILURE

    return EXIT_OK if summary.ok else EXIT_FAILURE


if __name__ == "__main__":
    raise SystemExit(main())
