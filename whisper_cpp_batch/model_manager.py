"""Model provisioning for whisper-cpp-batch."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from pathlib import Path
from urllib.parse import urljoin

import requests
from tqdm import tqdm

from .arguments import DEFAULT_MODEL_NAME, ParsedInvocation
from .errors import ModelProvisioningError
from .events import EventEmitter
from .settings import DEFAULT_MAX_REDIRECTS, DEFAULT_MODEL_BASE_URL

logger = logging.getLogger(__name__)

DOWNLOAD_CHUNK_SIZE = 1024 * 256
PARTIAL_SUFFIX = ".part"
REDIRECT_STATUSES = (301, 302)

KNOWN_MODELS = (
    "ggml-tiny.bin",
    "ggml-tiny.en.bin",
    "ggml-base.bin",
    "ggml-base.en.bin",
    "ggml-small.bin",
    "ggml-small.en.bin",
    "ggml-medium.bin",
    "ggml-medium.en.bin",
    "ggml-large-v1.bin",
    "ggml-large-v2.bin",
    "ggml-large-v3.bin",
    "ggml-large-v3-turbo.bin",
)


@dataclass(frozen=True)
class ModelDescriptor:
    local_path: Path
    remote_name: str

    def url(self, base_url: str = DEFAULT_MODEL_BASE_URL) -> str:
        return f"{base_url.rstrip('/')}/{self.remote_name}"


@dataclass
class DownloadSession:
    url: str
    destination: Path
    bytes_received: int = 0
    total_bytes: int | None = None
    redirect_depth: int = 0

    @property
    def percent(self) -> float | None:
        if not self.total_bytes:
            return None
        return round(self.bytes_received / self.total_bytes * 100, 1)


def get_available_models() -> list[str]:
    return list(KNOWN_MODELS)


def model_descriptor(invocation: ParsedInvocation, models_dir: Path) -> ModelDescriptor:
    """Work out which model file the engine will load for this invocation."""

    raw_path = invocation.model_path
    local_path = Path(raw_path) if raw_path else models_dir / DEFAULT_MODEL_NAME
    return ModelDescriptor(local_path=local_path, remote_name=local_path.name)


def _parse_content_length(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        total = int(value)
    except (TypeError, ValueError):
        return None
    return total if total > 0 else None


def _open_stream(
    http: requests.Session,
    download: DownloadSession,
    max_redirects: int,
    timeout: float | None,
) -> requests.Response:
    current_url = download.url
    while True:
        response = http.get(current_url, stream=True, allow_redirects=False, timeout=timeout)
        status = response.status_code

        if status in REDIRECT_STATUSES:
            location = response.headers.get("Location")
            response.close()
            if not location:
                raise ModelProvisioningError("Redirect without location")
            if download.redirect_depth >= max_redirects:
                raise ModelProvisioningError(f"Too many redirects (limit is {max_redirects})")
            download.redirect_depth += 1
            current_url = urljoin(current_url, location)
            logger.debug("Following redirect %d to %s", download.redirect_depth, current_url)
            continue

        if status != 200:
            response.close()
            raise ModelProvisioningError(f"Failed to download: HTTP {status}")

        return response


def _stream_to_file(
    response: requests.Response,
    download: DownloadSession,
    partial_path: Path,
    emitter: EventEmitter,
) -> None:
    download.total_bytes = _parse_content_length(response.headers.get("Content-Length"))
    last_percent = -1

    with partial_path.open("wb") as handle, tqdm(
        total=download.total_bytes,
        unit="B",
        unit_scale=True,
        unit_divisor=1024,
        desc=f"Downloading {download.destination.name}",
        disable=download.total_bytes is None,
        leave=True,
    ) as progress:
        for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
            if not chunk:
                continue
            handle.write(chunk)
            download.bytes_received += len(chunk)
            progress.update(len(chunk))

            percent = download.percent
            if percent is not None and int(percent) != last_percent:
                last_percent = int(percent)
                emitter.emit_model_download_progress(
                    percent=percent,
                    bytes_received=download.bytes_received,
                    total_bytes=download.total_bytes or 0,
                )


def download_model(
    url: str,
    destination: Path,
    *,
    max_redirects: int = DEFAULT_MAX_REDIRECTS,
    timeout: float | None = None,
    session: requests.Session | None = None,
    emitter: EventEmitter | None = None,
) -> DownloadSession:
    """Stream ``url`` into ``destination``, following at most ``max_redirects`` redirects.

    The body is written to a sibling ``.part`` file and moved into place only once
    it is complete, so an interrupted download never leaves a file at
    ``destination``.
    """

    emitter = emitter or EventEmitter(enabled=False)
    download = DownloadSession(url=url, destination=destination)
    partial_path = destination.with_name(destination.name + PARTIAL_SUFFIX)

    logger.info("Downloading from %s...", url)
    emitter.emit_model_download_started(url=url, destination=str(destination))

    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
    except OSError as error:
        raise ModelProvisioningError(str(error), url=url, model_path=destination) from error

    http = session or requests.Session()
    try:
        response = _open_stream(http, download, max_redirects, timeout)
        try:
            _stream_to_file(response, download, partial_path, emitter)
        finally:
            response.close()
        os.replace(partial_path, destination)
    except ModelProvisioningError as error:
        partial_path.unlink(missing_ok=True)
        error.url = url
        error.model_path = str(destination)
        raise
    except (requests.RequestException, OSError) as error:
        partial_path.unlink(missing_ok=True)
        raise ModelProvisioningError(str(error), url=url, model_path=destination) from error
    finally:
        if session is None:
            http.close()

    return download


def ensure_model(
    model_path: Path | str,
    model_name: str | None = None,
    *,
    base_url: str = DEFAULT_MODEL_BASE_URL,
    max_redirects: int = DEFAULT_MAX_REDIRECTS,
    timeout: float | None = None,
    session: requests.Session | None = None,
    emitter: EventEmitter | None = None,
) -> Path:
    """Return ``model_path``, downloading the model first if it is not on disk."""

    emitter = emitter or EventEmitter(enabled=False)
    path = Path(model_path)
    if path.exists():
        emitter.emit_model_ready(path=str(path), downloaded=False)
        return path

    descriptor = ModelDescriptor(local_path=path, remote_name=model_name or path.name)
    if descriptor.remote_name not in get_available_models():
        logger.warning("%s is not a known whisper.cpp model name.", descriptor.remote_name)

    logger.info("Model not found at: %s", path)
    logger.info("Downloading %s...", descriptor.remote_name)
    logger.info("This may take a few minutes depending on your connection.")

    download = download_model(
        descriptor.url(base_url),
        path,
        max_redirects=max_redirects,
        timeout=timeout,
        session=session,
        emitter=emitter,
    )

    logger.info("Download completed! %d bytes saved to: %s", download.bytes_received, path)
    emitter.emit_model_ready(path=str(path), downloaded=True)
    return path
