"""NDJSON event emitter for machine-readable run progress."""

from __future__ import annotations

import json
import sys
from datetime import datetime, timezone
from typing import TextIO, TypedDict


class FailureRecord(TypedDict):
    file: str
    error: str
    exit_code: int | None


class EventEmitter:
    """Emit newline-delimited JSON events, or nothing when disabled."""

    def __init__(self, enabled: bool = True, stream: TextIO | None = None) -> None:
        self.enabled = enabled
        self._stream = stream

    def emit(self, event_type: str, **payload: object) -> None:
        if not self.enabled:
            return

        timestamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        event = {"event": event_type, "timestamp": timestamp, **payload}
        print(json.dumps(event), file=self._stream or sys.stdout, flush=True)

    def emit_start(self, engine: str, model: str) -> None:
        self.emit("start", engine=engine, model=model)

    def emit_model_download_started(self, url: str, destination: str) -> None:
        self.emit("model_download_started", url=url, destination=destination)

    def emit_model_download_progress(
        self, percent: float, bytes_received: int, total_bytes: int
    ) -> None:
        self.emit(
            "model_download_progress",
            percent=percent,
            bytes_received=bytes_received,
            total_bytes=total_bytes,
        )

    def emit_model_ready(self, path: str, downloaded: bool) -> None:
        self.emit("model_ready", path=path, downloaded=downloaded)

    def emit_scanned(self, total: int) -> None:
        self.emit("scanned", total=total)

    def emit_file_started(self, index: int, total: int, file: str) -> None:
        self.emit("file_started", index=index, total=total, file=file)

    def emit_file_done(
        self, index: int, file: str, exit_code: int, processing_seconds: float
    ) -> None:
        self.emit(
            "file_done",
            index=index,
            file=file,
            exit_code=exit_code,
            processing_seconds=processing_seconds,
        )

    def emit_file_failed(self, index: int, file: str, error: str, exit_code: int | None) -> None:
        self.emit("file_failed", index=index, file=file, error=error, exit_code=exit_code)

    def emit_summary(
        self,
        total: int,
        processed: int,
        failed: int,
        duration_seconds: float,
        failures: list[FailureRecord],
    ) -> None:
        self.emit(
            "summary",
            total=total,
            processed=processed,
            failed=failed,
            duration_seconds=duration_seconds,
            failures=failures,
        )

    def emit_fatal_error(self, error: str) -> None:
        self.emit("fatal_error", error=error)
