"""Translate a raw command line into whisper.cpp flags and a target path."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
import logging
from pathlib import Path

from .errors import UsageError
from .flags import FLAG_SPECS, FlagKind, FlagSpec, lookup

logger = logging.getLogger(__name__)

FlagValue = bool | str

DEFAULT_MODEL_NAME = "ggml-medium.bin"
HELP_TOKENS = ("-h", "--help", "help")


def default_flags(models_dir: Path) -> dict[str, FlagValue]:
    return {
        "--model": str(models_dir / DEFAULT_MODEL_NAME),
        "--language": "en",
        "--temperature": "0.1",
        "--best-of": "2",
        "--beam-size": "2",
        "--word-thold": "0.01",
        "--entropy-thold": "2.4",
        "--logprob-thold": "-1.0",
        "--no-fallback": True,
        "--output-txt": True,
        "--output-srt": True,
    }


@dataclass
class ParsedInvocation:
    target_path: Path
    flags: dict[str, FlagValue]
    canonical_flags: list[str]
    ignored: list[str] = field(default_factory=list)

    @property
    def model_path(self) -> str | None:
        value = self.flags.get("--model")
        return value if isinstance(value, str) else None


def wants_help(raw_args: Sequence[str]) -> bool:
    return any(token in HELP_TOKENS for token in raw_args)


def _find_token(tokens: list[str], spec: FlagSpec) -> int:
    for index, token in enumerate(tokens):
        if lookup(token) is spec:
            return index
    return -1


def _take_value(tokens: list[str], index: int, spec: FlagSpec) -> str:
    if index + 1 >= len(tokens):
        raise UsageError(f"You must provide a value for argument {spec.name}")

    value = tokens[index + 1]
    if value.startswith("-"):
        raise UsageError(f"A value was expected for argument {spec.name}, received {value}")

    if spec.kind is FlagKind.NUMBER:
        try:
            float(value)
        except ValueError:
            raise UsageError(
                f"A numeric value was expected for argument {spec.name}, received {value}"
            ) from None

    del tokens[index : index + 2]
    return value


def flatten_flags(flags: Mapping[str, FlagValue]) -> list[str]:
    """Render a flag mapping as engine tokens, preserving mapping order."""

    canonical: list[str] = []
    for name, value in flags.items():
        if isinstance(value, bool):
            if value:
                canonical.append(name)
            continue
        canonical.extend((name, value))
    return canonical


def parse_invocation(
    raw_args: Sequence[str], defaults: Mapping[str, FlagValue]
) -> ParsedInvocation:
    """Validate ``raw_args`` (program name excluded) and merge them over ``defaults``.

    The last token is the file or directory to transcribe. Every registered flag
    found before it overrides the matching default; anything unrecognised is
    ignored.
    """

    tokens = list(raw_args)
    if not tokens:
        raise UsageError("You must provide a path as the final argument.")

    target_path = Path(tokens.pop()).expanduser().resolve()
    if not target_path.exists():
        raise UsageError(f"The file at {target_path} does not exist.")

    flags: dict[str, FlagValue] = dict(defaults)

    for spec in FLAG_SPECS:
        index = _find_token(tokens, spec)
        if index == -1:
            continue

        if spec.kind is FlagKind.BOOLEAN:
            tokens[:] = [token for token in tokens if lookup(token) is not spec]
            flags[spec.name] = True
            continue

        flags[spec.name] = _take_value(tokens, index, spec)

    for token in tokens:
        logger.debug("Ignoring unrecognised argument: %s", token)

    return ParsedInvocation(
        target_path=target_path,
        flags=flags,
        canonical_flags=flatten_flags(flags),
        ignored=tokens,
    )


def build_help_text(prog: str = "whisper-cpp-batch") -> str:
    lines = [
        f"Usage: {prog} [flags...] <path>",
        "",
        "Transcribe an audio file, or every mp3/ogg/wav/flac file under a directory,",
        "with whisper.cpp. The path must be the last argument.",
        "",
        "Flags are passed through to the engine:",
    ]
    for spec in FLAG_SPECS:
        names = spec.name if spec.alias is None else f"{spec.alias}, {spec.name}"
        suffix = "" if spec.kind is FlagKind.BOOLEAN else f" <{spec.kind.value}>"
        lines.append(f"  {names}{suffix}")
    return "\n".join(lines)
