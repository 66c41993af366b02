# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Run signed requests through curl.

The executor takes a ``SignedRequest`` from the planner, runs its
argument list and waits for curl to exit. A request either completes
with exit code 0 or raises ``TransportError``; there is no retry.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
import time
from dataclasses import dataclass

from s3curl.logging import SecretFilter
from s3curl.planner import SignedRequest


logger = logging.getLogger(__name__)


class TransportError(Exception):
    """Raised when curl is missing or exits non-zero.

    Attributes:
        exit_code: curl's exit code, or None if it never ran.
        stderr: Captured stderr, possibly empty.
    """

    def __init__(
        self, message: str, exit_code: int | None = None, stderr: str = ""
    ) -> None:
        super().__init__(message)
        self.exit_code = exit_code
        self.stderr = stderr


class TransportTimeoutError(TransportError):
    """Raised when curl does not finish within the timeout."""


@dataclass
class ExecutionResult:
    """Outcome of a successful curl run.

    Attributes:
        exit_code: Always 0 for results that are returned.
        stdout: Captured stdout.
        stderr: Captured stderr (curl progress output).
        duration_ms: Wall time spent waiting for curl.
    """

    exit_code: int
    stdout: str
    stderr: str
    duration_ms: int


def format_command(request: SignedRequest) -> str:
    """Render a request as a copy-pasteable shell command."""
    return shlex.join(request.args)


class CurlExecutor:
    """Executes signed requests with curl.

    Stateless apart from its settings; safe to share between threads.
    """

    def __init__(
        self,
        log: logging.Logger | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize executor.

        Args:
            log: Logger for invocation messages. Defaults to this
                module's logger.
            timeout: Seconds to wait for curl, or None to wait forever.
        """
        self._logger = log or logger
        self.timeout = timeout

    def execute(self, request: SignedRequest) -> ExecutionResult:
        """Run *request* and wait for it to finish.

        Args:
            request: Signed request from ``s3curl.planner.plan()``.

        Returns:
            ExecutionResult for a zero exit.

        Raises:
            TransportTimeoutError: If curl runs past the timeout.
            TransportError: If curl cannot be started or exits non-zero.
                Failures are logged at DEBUG only; reporting them is up
                to the caller.
        """
        self._logger.info(
            "running %s", SecretFilter.redact(format_command(request))
        )

        start = time.monotonic()
        try:
            result = subprocess.run(
                request.argv(),
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise TransportError(
                f"Transport binary not found: {request.args[0]}"
            ) from e
        except PermissionError as e:
            raise TransportError(
                f"Transport binary not executable: {request.args[0]}"
            ) from e
        except subprocess.TimeoutExpired as e:
            raise TransportTimeoutError(
                f"{request.method} {request.url} timed out "
                f"after {self.timeout}s"
            ) from e
        except (OSError, ValueError) as e:
            # ValueError: an argument contains a NUL byte.
            raise TransportError(f"Cannot run {request.args[0]}: {e}") from e
        duration_ms = int((time.monotonic() - start) * 1000)

        if result.returncode != 0:
            stderr = result.stderr.strip()
            self._logger.debug(
                "%s %s failed with exit code %d: %s",
                request.method,
                request.url,
                result.returncode,
                stderr,
            )
            raise TransportError(
                f"{request.method} {request.url} failed "
                f"(curl exit code {result.returncode})",
                exit_code=result.returncode,
                stderr=stderr,
            )

        self._logger.debug(
            "%s %s completed in %dms", request.method, request.url, duration_ms
        )
        return ExecutionResult(
            exit_code=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
            duration_ms=duration_ms,
        )


def curl_version(curl: str = "curl") -> str | None:
    """Return the first line of ``curl --version``, or None if unavailable."""
    try:
        result = subprocess.run(
            [curl, "--version"],
            capture_output=True,
            text=True,
            timeout=10,
        )
    except (OSError, subprocess.TimeoutExpired):
        return None
    if result.returncode != 0:
        return None
    lines = result.stdout.strip().splitlines()
    return lines[0] if lines else None
