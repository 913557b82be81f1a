"""Environment-driven settings for whisper-cpp-batch."""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

DEFAULT_ENGINE = "whisper-cli"
DEFAULT_MODEL_BASE_URL = "https://huggingface.co/ggerganov/whisper.cpp/resolve/main"
DEFAULT_MODELS_DIR = Path(__file__).resolve().parent / "models"
DEFAULT_MAX_REDIRECTS = 5

TRUTHY_VALUES = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    engine: str = DEFAULT_ENGINE
    models_dir: Path = DEFAULT_MODELS_DIR
    model_base_url: str = DEFAULT_MODEL_BASE_URL
    max_redirects: int = DEFAULT_MAX_REDIRECTS
    download_timeout: float | None = None
    events: bool = False


def _parse_str_env(name: str) -> str | None:
    raw = os.getenv(name)
    if raw is None:
        return None

    value = raw.strip()
    return value or None


def _parse_float_env(name: str) -> float | None:
    raw = _parse_str_env(name)
    if raw is None:
        return None

    try:
        value = float(raw)
    except ValueError:
        return None

    if value <= 0:
        return None

    return value


def _parse_int_env(name: str) -> int | None:
    raw = _parse_str_env(name)
    if raw is None:
        return None

    try:
        value = int(raw)
    except ValueError:
        return None

    if value <= 0:
        return None

    return value


def _parse_bool_env(name: str) -> bool:
    raw = _parse_str_env(name)
    return raw is not None and raw.lower() in TRUTHY_VALUES


def load_settings() -> Settings:
    models_dir = _parse_str_env("WHISPER_CPP_MODELS_DIR")
    base_url = _parse_str_env("WHISPER_CPP_MODEL_BASE_URL")

    return Settings(
        engine=_parse_str_env("WHISPER_CPP_ENGINE") or DEFAULT_ENGINE,
        models_dir=Path(models_dir).expanduser() if models_dir else DEFAULT_MODELS_DIR,
        model_base_url=base_url.rstrip("/") if base_url else DEFAULT_MODEL_BASE_URL,
        max_redirects=_parse_int_env("WHISPER_CPP_MAX_REDIRECTS") or DEFAULT_MAX_REDIRECTS,
        download_timeout=_parse_float_env("WHISPER_CPP_TIMEOUT"),
        events=_parse_bool_env("WHISPER_CPP_EVENTS"),
    )
