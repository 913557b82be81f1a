"""Sequential dispatch of the whisper.cpp engine over the resolved files."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
import logging
from pathlib import Path
import subprocess
import time

import requests

from .arguments import ParsedInvocation
from .errors import EngineInvocationError
from .events import EventEmitter, FailureRecord
from .files import resolve_targets
from .model_manager import ensure_model, model_descriptor
from .settings import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DispatchResult:
    file: Path
    exit_code: int
    duration_seconds: float

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


@dataclass
class RunSummary:
    total: int = 0
    processed: int = 0
    failed: int = 0
    duration_seconds: float = 0.0
    failures: list[FailureRecord] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.failed == 0


def build_command(engine: str, file: Path, canonical_flags: Sequence[str]) -> list[str]:
    return [engine, "-f", str(file), *canonical_flags]


def dispatch(file: Path, canonical_flags: Sequence[str], *, engine: str) -> DispatchResult:
    """Run the engine on one file and wait for it; the engine shares our stdio."""

    command = build_command(engine, file, canonical_flags)
    logger.info("Transcribing %s", file)
    logger.debug("Running: %s", " ".join(command))

    started = time.perf_counter()
    try:
        completed = subprocess.run(command, check=False)
    except OSError as error:
        raise EngineInvocationError(f"Failed to start {engine}: {error}") from error

    return DispatchResult(
        file=file,
        exit_code=completed.returncode,
        duration_seconds=time.perf_counter() - started,
    )


def run_batch(
    invocation: ParsedInvocation,
    settings: Settings,
    emitter: EventEmitter | None = None,
    session: requests.Session | None = None,
) -> RunSummary:
    """Ensure the model, resolve the target and transcribe every file in order.

    Model provisioning errors propagate and abort the run. Engine failures are
    recorded per file and the remaining files are still attempted.
    """

    emitter = emitter or EventEmitter(enabled=False)
    started_at = time.perf_counter()

    descriptor = model_descriptor(invocation, settings.models_dir)
    emitter.emit_start(engine=settings.engine, model=str(descriptor.local_path))

    ensure_model(
        descriptor.local_path,
        descriptor.remote_name,
        base_url=settings.model_base_url,
        max_redirects=settings.max_redirects,
        timeout=settings.download_timeout,
        session=session,
        emitter=emitter,
    )

    files = resolve_targets(invocation.target_path)
    summary = RunSummary(total=len(files))
    if invocation.target_path.is_dir():
        logger.info("Transcribing %d files.", summary.total)
    emitter.emit_scanned(total=summary.total)

    for index, file in enumerate(files):
        emitter.emit_file_started(index=index, total=summary.total, file=str(file))

        try:
            result = dispatch(file, invocation.canonical_flags, engine=settings.engine)
        except EngineInvocationError as error:
            message = str(error)
            logger.error("%s", message)
            summary.failed += 1
            summary.failures.append({"file": str(file), "error": message, "exit_code": None})
            emitter.emit_file_failed(index=index, file=str(file), error=message, exit_code=None)
            continue

        if result.ok:
            summary.processed += 1
            emitter.emit_file_done(
                index=index,
                file=str(file),
                exit_code=result.exit_code,
                processing_seconds=result.duration_seconds,
            )
            continue

        message = f"{settings.engine} exited with status {result.exit_code}"
        logger.error("Failed to transcribe %s: %s", file, message)
        summary.failed += 1
        summary.failures.append({"file": str(file), "error": message, "exit_code": result.exit_code})
        emitter.emit_file_failed(
            index=index, file=str(file), error=message, exit_code=result.exit_code
        )

    summary.duration_seconds = time.perf_counter() - started_at
    logger.info(
        "Finished: %d transcribed, %d failed, %d total.",
        summary.processed,
        summary.failed,
        summary.total,
    )
    emitter.emit_summary(
        total=summary.total,
        processed=summary.processed,
        failed=summary.failed,
        duration_seconds=summary.duration_seconds,
        failures=summary.failures,
    )
    return summary
