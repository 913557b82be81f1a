"""Logging configuration for the command-line front end."""

from __future__ import annotations

import logging
import os
import sys

_CONFIGURED = False


def resolve_log_level(level: str | None) -> int:
    name = (level or os.getenv("LOG_LEVEL") or "INFO").strip().upper()
    numeric_level = getattr(logging, name, None)
    if not isinstance(numeric_level, int):
        return logging.INFO
    return numeric_level


def setup_logging(level: str | None = None) -> None:
    """Configure root logging once; messages go to stderr so stdout stays free for events."""

    global _CONFIGURED
    if _CONFIGURED:
        return

    logging.basicConfig(
        level=resolve_log_level(level),
        format="%(message)s",
        stream=sys.stderr,
    )
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    _CONFIGURED = True
