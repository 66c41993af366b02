# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Turn an S3 operation into a signed curl invocation.

``plan()`` maps download/upload/delete onto method, resource and curl
flags, signs the request and returns the full argument list. Nothing is
executed here; see ``s3curl.executor`` for that.

Every plan has the same prefix::

    curl -H "Date: ..." -H "Authorization: AWS key:sig" -H "content-type: "
         -L -f <endpoint><resource>

followed by ``-o FILE`` (download), ``-T FILE`` (upload) or
``-X DELETE`` (delete). The Date header has one-second granularity and
S3 rejects stale dates, so plans are rebuilt for every request.
"""

from __future__ import annotations

import os.path
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from s3curl.config import DEFAULT_CURL, DEFAULT_ENDPOINT, ConfigurationError
from s3curl.signing import (
    Credentials,
    authorization_header,
    format_http_date,
    sign,
    string_to_sign,
    utc_now,
)


class Operation(Enum):
    """Supported S3 operations, valued by HTTP method."""

    DOWNLOAD = "GET"
    UPLOAD = "PUT"
    DELETE = "DELETE"

    @property
    def method(self) -> str:
        return self.value

    @property
    def needs_local_file(self) -> bool:
        return self is not Operation.DELETE


@dataclass(frozen=True)
class RequestConfig:
    """What to transfer and where.

    Attributes:
        url: Resource path including the bucket, e.g.
            ``/mybucket/releases/app.tgz``. For uploads, a trailing ``/``
            means "append the local file name".
        local_file: File to download to or upload from. Not used by
            delete.
        http_date: Fixed Date header value. When None, the clock is read
            on every plan.
        curl: Transport binary name or path.
        endpoint: Scheme and host prepended to ``url``.
    """

    url: str
    local_file: str | None = None
    http_date: str | None = None
    curl: str = DEFAULT_CURL
    endpoint: str = DEFAULT_ENDPOINT


@dataclass(frozen=True)
class SignedRequest:
    """A fully signed curl invocation.

    Only valid around the moment it was created: the signature covers
    ``http_date``.
    """

    operation: Operation
    resource: str
    url: str
    http_date: str
    string_to_sign: str
    authorization: str
    local_file: str | None
    args: tuple[str, ...]

    @property
    def method(self) -> str:
        return self.operation.method

    def argv(self) -> list[str]:
        """Return the invocation as a fresh list for ``subprocess``."""
        return list(self.args)


def effective_resource(operation: Operation, config: RequestConfig) -> str:
    """Resolve the resource path that gets signed and requested.

    A trailing slash on an upload would make curl append the file name
    itself, after signing, so the name is appended here instead.
    """
    resource = config.url
    if (
        operation is Operation.UPLOAD
        and resource.endswith("/")
        and config.local_file
    ):
        resource += os.path.basename(config.local_file)
    return resource


def _check_preconditions(operation: Operation, config: RequestConfig) -> None:
    if not config.url:
        raise ConfigurationError("Required config 'url' is missing")
    if operation.needs_local_file and not config.local_file:
        raise ConfigurationError(
            f"parameter local_file required for {operation.name.lower()}"
        )


def plan(
    operation: Operation,
    credentials: Credentials,
    config: RequestConfig,
    *,
    clock: Callable[[], datetime] = utc_now,
) -> SignedRequest:
    """Build the signed curl invocation for *operation*.

    Args:
        operation: What to do with the resource.
        credentials: Key pair to sign with.
        config: Resource, local file and transport settings.
        clock: Source of the signing time, used when ``config.http_date``
            is unset.

    Returns:
        The signed request, ready for ``CurlExecutor.execute()``.

    Raises:
        ConfigurationError: If the URL is empty, or the operation needs a
            local file and none is set. Raised before signing.
    """
    _check_preconditions(operation, config)

    resource = effective_resource(operation, config)
    http_date = config.http_date or format_http_date(clock())
    to_sign = string_to_sign(operation.method, http_date, resource)
    authorization = authorization_header(
        credentials.access_key, sign(credentials.secret_key, to_sign)
    )
    url = config.endpoint.rstrip("/") + resource

    args = [
        config.curl,
        "-H",
        f"Date: {http_date}",
        "-H",
        f"Authorization: {authorization}",
        "-H",
        "content-type: ",
        "-L",
        "-f",
        url,
    ]
    if operation is Operation.DOWNLOAD:
        args += ["-o", config.local_file]
    elif operation is Operation.UPLOAD:
        args += ["-T", config.local_file]
    else:
        args += ["-X", "DELETE"]

    return SignedRequest(
        operation=operation,
        resource=resource,
        url=url,
        http_date=http_date,
        string_to_sign=to_sign,
        authorization=authorization,
        local_file=config.local_file,
        args=tuple(args),
    )
