# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""High-level download/upload/delete client.

Usage:
    from s3curl.client import S3Curl
    from s3curl.planner import RequestConfig
    from s3curl.signing import Credentials

    s3 = S3Curl(
        Credentials(access_key="AKID...", secret_key="..."),
        RequestConfig(url="/my-bucket/myapp.tgz", local_file="/tmp/app.tgz"),
    )
    s3.download()

    # Or only build the command:
    argv = s3.download_cmd()
    subprocess.run(argv, check=True)
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from s3curl.config import Settings
from s3curl.executor import CurlExecutor, ExecutionResult
from s3curl.logging import SecretFilter
from s3curl.planner import Operation, RequestConfig, SignedRequest, plan
from s3curl.signing import Credentials, utc_now


class S3Curl:
    """Signs and runs S3 requests for one resource.

    Each call re-plans the request so the Date header and signature are
    always fresh (unless ``config.http_date`` pins the date).

    Attributes:
        credentials: Key pair used for signing.
        config: Resource and transport settings.
    """

    def __init__(
        self,
        credentials: Credentials,
        config: RequestConfig,
        executor: CurlExecutor | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.credentials = credentials
        self.config = config
        self._executor = executor or CurlExecutor()
        self._clock = clock
        SecretFilter.register_secret(credentials.secret_key)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        url: str,
        local_file: str | None = None,
        http_date: str | None = None,
    ) -> S3Curl:
        """Build a client from loaded settings.

        Raises:
            ConfigurationError: If credentials are not configured.
        """
        config = RequestConfig(
            url=url,
            local_file=local_file,
            http_date=http_date,
            curl=settings.curl,
            endpoint=settings.endpoint,
        )
        return cls(
            settings.credentials(),
            config,
            executor=CurlExecutor(timeout=settings.timeout),
        )

    def plan(self, operation: Operation) -> SignedRequest:
        """Sign *operation* against the configured resource."""
        return plan(
            operation, self.credentials, self.config, clock=self._clock
        )

    def download_cmd(self) -> list[str]:
        """Command that downloads ``url`` to ``local_file``."""
        return self.plan(Operation.DOWNLOAD).argv()

    def upload_cmd(self) -> list[str]:
        """Command that uploads ``local_file`` to ``url``."""
        return self.plan(Operation.UPLOAD).argv()

    def delete_cmd(self) -> list[str]:
        """Command that deletes ``url``."""
        return self.plan(Operation.DELETE).argv()

    def run(self, operation: Operation) -> ExecutionResult:
        """Plan and execute *operation*.

        Raises:
            ConfigurationError: If the operation's preconditions fail.
            TransportError: If curl fails.
        """
        return self._executor.execute(self.plan(operation))

    def download(self) -> ExecutionResult:
        return self.run(Operation.DOWNLOAD)

    def upload(self) -> ExecutionResult:
        return self.run(Operation.UPLOAD)

    def delete(self) -> ExecutionResult:
        return self.run(Operation.DELETE)
