"""Registry of the whisper.cpp command-line flags understood by the front end."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FlagKind(str, Enum):
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"


@dataclass(frozen=True)
class FlagSpec:
    name: str
    alias: str | None
    kind: FlagKind

    @property
    def takes_value(self) -> bool:
        return self.kind is not FlagKind.BOOLEAN

    def matches(self, token: str) -> bool:
        return token == self.name or (self.alias is not None and token == self.alias)


def _flag(name: str, alias: str | None, kind: FlagKind) -> FlagSpec:
    return FlagSpec(name=name, alias=alias, kind=kind)


_B = FlagKind.BOOLEAN
_N = FlagKind.NUMBER
_S = FlagKind.STRING

FLAG_SPECS: tuple[FlagSpec, ...] = (
    _flag("--threads", "-t", _N),
    _flag("--processors", "-p", _N),
    _flag("--offset-t", "-ot", _N),
    _flag("--offset-n", "-on", _N),
    _flag("--duration", "-d", _N),
    _flag("--max-context", "-mc", _N),
    _flag("--max-len", "-ml", _N),
    _flag("--best-of", "-bo", _N),
    _flag("--beam-size", "-bs", _N),
    _flag("--audio-ctx", "-ac", _N),
    _flag("--word-thold", "-wt", _N),
    _flag("--entropy-thold", "-et", _N),
    _flag("--logprob-thold", "-lpt", _N),
    _flag("--no-speech-thold", "-nth", _N),
    _flag("--temperature", "-tp", _N),
    _flag("--temperature-inc", "-tpi", _N),
    _flag("--vad-threshold", "-vt", _N),
    _flag("--vad-min-speech-duration-ms", "-vspd", _N),
    _flag("--vad-min-silence-duration-ms", "-vsd", _N),
    _flag("--vad-max-speech-duration-s", "-vmsd", _N),
    _flag("--vad-speech-pad-ms", "-vp", _N),
    _flag("--vad-samples-overlap", "-vo", _N),
    _flag("--split-on-word", "-sow", _B),
    _flag("--debug-mode", "-debug", _B),
    _flag("--translate", "-tr", _B),
    _flag("--diarize", "-di", _B),
    _flag("--tinydiarize", "-tdrz", _B),
    _flag("--no-fallback", "-nf", _B),
    _flag("--output-txt", "-otxt", _B),
    _flag("--output-vtt", "-ovtt", _B),
    _flag("--output-srt", "-osrt", _B),
    _flag("--output-lrc", "-olrc", _B),
    _flag("--output-words", "-owts", _B),
    _flag("--output-csv", "-ocsv", _B),
    _flag("--output-json", "-oj", _B),
    _flag("--output-json-full", "-ojf", _B),
    _flag("--no-prints", "-np", _B),
    _flag("--print-special", "-ps", _B),
    _flag("--print-colors", "-pc", _B),
    _flag("--print-progress", "-pp", _B),
    _flag("--no-timestamps", "-nt", _B),
    _flag("--detect-language", "-dl", _B),
    _flag("--log-score", "-ls", _B),
    _flag("--no-gpu", "-ng", _B),
    _flag("--flash-attn", "-fa", _B),
    _flag("--no-flash-attn", "-nfa", _B),
    _flag("--suppress-nst", "-sns", _B),
    _flag("--output-file", "-of", _S),
    _flag("--language", "-l", _S),
    _flag("--font-path", "-fp", _S),
    _flag("--model", "-m", _S),
    _flag("--file", "-f", _S),
    _flag("--vad-model", "-vm", _S),
    _flag("--ov-e-device", "-oved", _S),
    _flag("--dtw", "-dtw", _S),
    _flag("--print-confidence", None, _S),
    _flag("--carry-initial-prompt", None, _S),
    _flag("--vad", None, _S),
    _flag("--prompt", None, _S),
    _flag("--suppress-regex", None, _S),
    _flag("--grammar", None, _S),
    _flag("--grammar-rule", None, _S),
    _flag("--grammar-penalty", None, _N),
)

_BY_TOKEN: dict[str, FlagSpec] = {}
for _spec in FLAG_SPECS:
    _BY_TOKEN[_spec.name] = _spec
    if _spec.alias is not None:
        _BY_TOKEN[_spec.alias] = _spec
del _spec


def lookup(token: str) -> FlagSpec | None:
    """Return the spec whose canonical name or alias equals ``token``."""

    return _BY_TOKEN.get(token)
