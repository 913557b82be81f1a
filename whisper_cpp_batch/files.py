"""Resolve the target path into the audio files to transcribe."""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

AUDIO_EXTENSIONS = (".mp3", ".ogg", ".wav", ".flac")


def is_supported(path: Path) -> bool:
    return path.suffix.lower() in AUDIO_EXTENSIONS


def find_audio_files(directory: Path) -> list[Path]:
    matches = [
        candidate
        for candidate in directory.rglob("*")
        if candidate.is_file() and is_supported(candidate)
    ]
    return sorted(matches, key=str)


def resolve_targets(target_path: Path) -> list[Path]:
    """Expand a directory into its sorted audio files, or wrap a single file.

    A single file with an unknown extension is still returned; the engine gets
    the final say on whether it can decode it.
    """

    if target_path.is_dir():
        return find_audio_files(target_path)

    if not is_supported(target_path):
        logger.warning("Unsupported filetype: %s", target_path)

    return [target_path]
