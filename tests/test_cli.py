from __future__ import annotations

import io
from collections.abc import Iterator
from contextlib import redirect_stdout
from pathlib import Path
import subprocess
import tempfile
import unittest
from unittest.mock import patch

from whisper_cpp_batch.__main__ import main
from whisper_cpp_batch.errors import ModelProvisioningError
from whisper_cpp_batch.settings import DEFAULT_MODEL_BASE_URL, Settings
from whisper_cpp_batch.worker import RunSummary


class FakeResponse:
    status_code = 200

    def __init__(self, body: bytes) -> None:
        self.body = body
        self.headers = {"Content-Length": str(len(body))}

    def iter_content(self, chunk_size: int = 1) -> Iterator[bytes]:
        yield self.body

    def close(self) -> None:
        pass


class RecordingSession:
    def __init__(self, calls: list[str]) -> None:
        self.calls = calls

    def get(self, url: str, **kwargs: object) -> FakeResponse:
        self.calls.append(f"GET {url}")
        return FakeResponse(b"ggml")

    def close(self) -> None:
        pass


class CLITests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name).resolve()
        self.clip = self.root / "clip.wav"
        self.clip.write_bytes(b"fake")
        self.settings = Settings(models_dir=self.root / "models")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_help_short_circuits_processing(self) -> None:
        stream = io.StringIO()
        with (
            patch("whisper_cpp_batch.__main__.run_batch") as run_batch,
            redirect_stdout(stream),
        ):
            exit_code = main(["--help"])

        self.assertEqual(exit_code, 0)
        self.assertIn("Usage:", stream.getvalue())
        run_batch.assert_not_called()

    def test_missing_path_is_a_usage_error(self) -> None:
        with (
            patch("whisper_cpp_batch.__main__.run_batch") as run_batch,
            self.assertLogs("whisper_cpp_batch", level="ERROR") as logs,
        ):
            exit_code = main([])

        self.assertEqual(exit_code, 2)
        run_batch.assert_not_called()
        self.assertIn("must provide a path", logs.output[0])

    def test_passes_defaults_and_overrides_to_batch(self) -> None:
        with (
            patch("whisper_cpp_batch.__main__.load_settings", return_value=self.settings),
            patch("whisper_cpp_batch.__main__.run_batch", return_value=RunSummary(total=1, processed=1)) as run_batch,
        ):
            exit_code = main(["-l", "fr", str(self.clip)])

        self.assertEqual(exit_code, 0)
        invocation, settings, _emitter = run_batch.call_args.args
        self.assertIs(settings, self.settings)
        self.assertEqual(invocation.target_path, self.clip)
        self.assertEqual(invocation.flags["--language"], "fr")
        self.assertEqual(
            invocation.flags["--model"], str(self.root / "models" / "ggml-medium.bin")
        )
        self.assertIn("--no-fallback", invocation.canonical_flags)

    def test_failed_files_give_non_zero_exit(self) -> None:
        summary = RunSummary(total=2, processed=1, failed=1)
        with (
            patch("whisper_cpp_batch.__main__.load_settings", return_value=self.settings),
            patch("whisper_cpp_batch.__main__.run_batch", return_value=summary),
        ):
            exit_code = main([str(self.clip)])

        self.assertEqual(exit_code, 1)

    def test_model_provisioning_error_reports_manual_download(self) -> None:
        error = ModelProvisioningError(
            "Failed to download: HTTP 503",
            url=f"{DEFAULT_MODEL_BASE_URL}/ggml-medium.bin",
            model_path="/models/ggml-medium.bin",
        )
        with (
            patch("whisper_cpp_batch.__main__.load_settings", return_value=self.settings),
            patch("whisper_cpp_batch.__main__.run_batch", side_effect=error),
            self.assertLogs("whisper_cpp_batch", level="ERROR") as logs,
        ):
            exit_code = main([str(self.clip)])

        self.assertEqual(exit_code, 1)
        output = "\n".join(logs.output)
        self.assertIn("HTTP 503", output)
        self.assertIn(f"{DEFAULT_MODEL_BASE_URL}/ggml-medium.bin", output)
        self.assertIn("/models/ggml-medium.bin", output)

    def test_default_model_is_downloaded_before_dispatch(self) -> None:
        calls: list[str] = []

        def fake_run(command: list[str], check: bool) -> subprocess.CompletedProcess[bytes]:
            calls.append("RUN " + " ".join(command[:3]))
            return subprocess.CompletedProcess(command, 0)

        with (
            patch("whisper_cpp_batch.__main__.load_settings", return_value=self.settings),
            patch(
                "whisper_cpp_batch.model_manager.requests.Session",
                return_value=RecordingSession(calls),
            ),
            patch("whisper_cpp_batch.worker.subprocess.run", side_effect=fake_run),
        ):
            exit_code = main([str(self.clip)])

        self.assertEqual(exit_code, 0)
        self.assertEqual(
            calls,
            [
                f"GET {DEFAULT_MODEL_BASE_URL}/ggml-medium.bin",
                f"RUN whisper-cli -f {self.clip}",
            ],
        )
        self.assertEqual((self.root / "models" / "ggml-medium.bin").read_bytes(), b"ggml")

    def test_empty_directory_completes_successfully(self) -> None:
        empty = self.root / "empty"
        empty.mkdir()
        model = self.root / "models" / "ggml-medium.bin"
        model.parent.mkdir()
        model.write_bytes(b"ggml")

        with (
            patch("whisper_cpp_batch.__main__.load_settings", return_value=self.settings),
            patch("whisper_cpp_batch.model_manager.requests.Session") as session_cls,
            patch("whisper_cpp_batch.worker.subprocess.run") as run,
        ):
            exit_code = main([str(empty)])

        self.assertEqual(exit_code, 0)
        session_cls.assert_not_called()
        run.assert_not_called()


if __name__ == "__main__":
    unittest.main()
