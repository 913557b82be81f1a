"""Error taxonomy for whisper-cpp-batch."""

from __future__ import annotations

from pathlib import Path


class WhisperCppBatchError(Exception):
    """Base error for the whisper-cpp-batch front end."""


class UsageError(WhisperCppBatchError):
    """Raised when the command line cannot be turned into an engine invocation."""


class ModelProvisioningError(WhisperCppBatchError):
    """Raised when the model file cannot be downloaded or written."""

    def __init__(self, message: str, url: str = "", model_path: Path | str = "") -> None:
        super().__init__(message)
        self.url = url
        self.model_path = str(model_path)

    def manual_download_hint(self) -> str:
        return (
            f"Please download the model manually from:\n{self.url}\n"
            f"and save it to: {self.model_path}"
        )


class EngineInvocationError(WhisperCppBatchError):
    """Raised when the transcription engine cannot be started."""
