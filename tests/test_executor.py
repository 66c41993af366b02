# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Tests for s3curl/executor.py."""

import logging
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from s3curl.executor import (
    CurlExecutor,
    ExecutionResult,
    TransportError,
    TransportTimeoutError,
    curl_version,
    format_command,
)
from s3curl.planner import Operation, RequestConfig, SignedRequest, plan
from s3curl.signing import Credentials
from tests.vectors import FIXED_DATE, GET_SIGNATURE, RESOURCE


@pytest.fixture
def request_(credentials: Credentials) -> SignedRequest:
    """Signed download of the shared test resource."""
    config = RequestConfig(
        url=RESOURCE, local_file="/tmp/puppy.jpg", http_date=FIXED_DATE
    )
    return plan(Operation.DOWNLOAD, credentials, config)


class TestFormatCommand:
    """Tests for format_command."""

    def test_shell_quoting(self, request_: SignedRequest) -> None:
        """Header arguments containing spaces are quoted."""
        command = format_command(request_)
        assert command.startswith(f"curl -H 'Date: {FIXED_DATE}' ")
        assert "-H 'content-type: ' -L -f " in command
        assert command.endswith(
            f"http://s3.amazonaws.com{RESOURCE} -o /tmp/puppy.jpg"
        )


class TestCurlExecutor:
    """Tests for CurlExecutor.execute."""

    @patch("s3curl.executor.subprocess.run")
    def test_success(
        self, mock_run: MagicMock, request_: SignedRequest
    ) -> None:
        """Zero exit returns the captured output."""
        mock_run.return_value = MagicMock(
            returncode=0, stdout="", stderr="progress"
        )
        result = CurlExecutor().execute(request_)

        assert isinstance(result, ExecutionResult)
        assert result.exit_code == 0
        assert result.stderr == "progress"
        mock_run.assert_called_once_with(
            list(request_.args),
            capture_output=True,
            text=True,
            timeout=None,
        )

    @patch("s3curl.executor.subprocess.run")
    def test_timeout_passed_through(
        self, mock_run: MagicMock, request_: SignedRequest
    ) -> None:
        mock_run.return_value = MagicMock(returncode=0, stdout="", stderr="")
        CurlExecutor(timeout=30).execute(request_)
        assert mock_run.call_args.kwargs["timeout"] == 30

    @patch("s3curl.executor.subprocess.run")
    def test_nonzero_exit_raises(
        self, mock_run: MagicMock, request_: SignedRequest
    ) -> None:
        """curl -f exits 22 on HTTP errors such as 403."""
        mock_run.return_value = MagicMock(
            returncode=22,
            stdout="",
            stderr="curl: (22) The requested URL returned error: 403\n",
        )
        with pytest.raises(TransportError, match="exit code 22") as exc_info:
            CurlExecutor().execute(request_)

        assert exc_info.value.exit_code == 22
        assert exc_info.value.stderr.endswith("error: 403")

    @patch("s3curl.executor.subprocess.run", side_effect=FileNotFoundError)
    def test_missing_binary(
        self, _run: MagicMock, request_: SignedRequest
    ) -> None:
        with pytest.raises(TransportError, match="not found: curl") as exc_info:
            CurlExecutor().execute(request_)
        assert exc_info.value.exit_code is None

    @patch("s3curl.executor.subprocess.run", side_effect=PermissionError)
    def test_binary_not_executable(
        self, _run: MagicMock, request_: SignedRequest
    ) -> None:
        with pytest.raises(TransportError, match="not executable"):
            CurlExecutor().execute(request_)

    @patch(
        "s3curl.executor.subprocess.run",
        side_effect=subprocess.TimeoutExpired(cmd="curl", timeout=5),
    )
    def test_timeout(self, _run: MagicMock, request_: SignedRequest) -> None:
        with pytest.raises(TransportTimeoutError, match="timed out"):
            CurlExecutor(timeout=5).execute(request_)

    @patch(
        "s3curl.executor.subprocess.run",
        side_effect=OSError(8, "Exec format error"),
    )
    def test_binary_not_runnable(
        self, _run: MagicMock, request_: SignedRequest
    ) -> None:
        """A curl path pointing at a non-program file."""
        with pytest.raises(TransportError, match="Exec format error"):
            CurlExecutor().execute(request_)

    def test_nul_byte_in_argument(self, credentials: Credentials) -> None:
        """subprocess rejects NUL bytes before anything is started."""
        config = RequestConfig(
            url=RESOURCE, local_file="/tmp/a\x00b", http_date=FIXED_DATE
        )
        request = plan(Operation.DOWNLOAD, credentials, config)
        with pytest.raises(TransportError, match="null byte") as exc_info:
            CurlExecutor().execute(request)
        assert isinstance(exc_info.value.__cause__, ValueError)

    @patch("s3curl.executor.subprocess.run")
    def test_failure_logged_at_debug(
        self, mock_run: MagicMock, request_: SignedRequest
    ) -> None:
        """Reporting a failed transfer is left to the caller."""
        mock_run.return_value = MagicMock(returncode=22, stdout="", stderr="")
        log = MagicMock(spec=logging.Logger)
        with pytest.raises(TransportError):
            CurlExecutor(log=log).execute(request_)
        log.error.assert_not_called()
        assert log.debug.call_args.args[0].endswith("exit code %d: %s")

    @patch("s3curl.executor.subprocess.run")
    def test_no_retry(
        self, mock_run: MagicMock, request_: SignedRequest
    ) -> None:
        mock_run.return_value = MagicMock(returncode=7, stdout="", stderr="")
        with pytest.raises(TransportError):
            CurlExecutor().execute(request_)
        assert mock_run.call_count == 1

    @patch("s3curl.executor.subprocess.run")
    def test_logs_masked_command(
        self, mock_run: MagicMock, request_: SignedRequest
    ) -> None:
        """The injected logger sees the command with the signature hidden."""
        mock_run.return_value = MagicMock(returncode=0, stdout="", stderr="")
        log = MagicMock(spec=logging.Logger)
        CurlExecutor(log=log).execute(request_)

        fmt, command = log.info.call_args.args
        assert fmt == "running %s"
        assert GET_SIGNATURE not in command
        assert "Authorization: AWS AKIDEXAMPLE:***" in command


class TestCurlVersion:
    """Tests for curl_version."""

    @patch("s3curl.executor.subprocess.run")
    def test_first_line(self, mock_run: MagicMock) -> None:
        mock_run.return_value = MagicMock(
            returncode=0,
            stdout="curl 8.5.0 (x86_64-pc-linux-gnu)\nRelease-Date: x\n",
        )
        assert curl_version() == "curl 8.5.0 (x86_64-pc-linux-gnu)"
        assert mock_run.call_args.args[0] == ["curl", "--version"]

    @patch("s3curl.executor.subprocess.run", side_effect=FileNotFoundError)
    def test_missing(self, _run: MagicMock) -> None:
        assert curl_version("/nope/curl") is None

    @patch(
        "s3curl.executor.subprocess.run",
        side_effect=OSError(8, "Exec format error"),
    )
    def test_not_runnable(self, _run: MagicMock) -> None:
        assert curl_version("/tmp/not-a-program") is None

    @patch("s3curl.executor.subprocess.run")
    def test_nonzero_exit(self, mock_run: MagicMock) -> None:
        mock_run.return_value = MagicMock(returncode=2, stdout="")
        assert curl_version() is None
