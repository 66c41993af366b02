# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""AWS Signature Version 2 signing for S3 requests.

Builds the string-to-sign, computes the HMAC-SHA1 signature and formats
the ``Authorization`` header value. Supports only what curl-driven
GET/PUT/DELETE requests need:

- Content-MD5 and Content-Type are always empty
- No ``x-amz-*`` headers are canonicalized
- The resource is signed exactly as given

Everything here is pure; the current time is only read through the
``utc_now`` clock passed in by callers.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
from dataclasses import dataclass, field
from datetime import UTC, datetime


# Day and month names for the HTTP date; strftime's %a/%b follow the locale
_WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_MONTHS = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)

AUTH_SCHEME = "AWS"


class SigningError(Exception):
    """Raised when a request cannot be signed."""


@dataclass(frozen=True)
class Credentials:
    """S3 access key pair.

    Attributes:
        access_key: Access key ID, sent in clear in the Authorization
            header.
        secret_key: Secret access key, used only as the HMAC key.
    """

    access_key: str
    secret_key: str = field(repr=False)

    def __post_init__(self) -> None:
        # Imported here to keep signing free of config/yaml imports
        from s3curl.config import ConfigurationError

        if not self.access_key:
            raise ConfigurationError("Required config 'access_key' is missing")
        if not self.secret_key:
            raise ConfigurationError("Required config 'secret_key' is missing")


def utc_now() -> datetime:
    """Default clock: the current time in UTC."""
    return datetime.now(UTC)


def format_http_date(moment: datetime) -> str:
    """Format a timestamp as the Date header value S3 expects.

    Naive datetimes are taken to be UTC already.

    Args:
        moment: Time of signing.

    Returns:
        Date string such as ``Tue, 01 Jan 2030 00:00:00 +0000``.
    """
    if moment.tzinfo is not None:
        moment = moment.astimezone(UTC)
    return (
        f"{_WEEKDAYS[moment.weekday()]}, {moment.day:02d} "
        f"{_MONTHS[moment.month - 1]} {moment.year:04d} "
        f"{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d} +0000"
    )


def string_to_sign(
    method: str,
    http_date: str,
    resource: str,
    content_md5: str = "",
    content_type: str = "",
    amz_headers: str = "",
) -> str:
    """Build the SigV2 string-to-sign.

    Layout::

        METHOD\\n
        Content-MD5\\n
        Content-Type\\n
        Date\\n
        CanonicalizedAmzHeaders + CanonicalizedResource

    Empty fields keep their line, so a plain GET produces three
    consecutive newlines after the method.

    Args:
        method: HTTP method (``GET``, ``PUT``, ``DELETE``).
        http_date: Value of the Date header sent with the request.
        resource: Canonicalized resource, e.g. ``/bucket/key``. Used
            verbatim.
        content_md5: Content-MD5 header value.
        content_type: Content-Type header value.
        amz_headers: Already canonicalized ``x-amz-*`` header block.

    Returns:
        The exact string to feed into the HMAC.
    """
    return "\n".join(
        (method, content_md5, content_type, http_date, amz_headers + resource)
    )


def sign(secret_key: str, message: str) -> str:
    """Compute the Base64 HMAC-SHA1 signature of *message*.

    Args:
        secret_key: Secret access key (HMAC key).
        message: String-to-sign.

    Returns:
        Base64-encoded digest, padding included, no line breaks.

    Raises:
        SigningError: If the key is empty.
    """
    if not secret_key:
        raise SigningError("Cannot sign with an empty secret key")
    digest = hmac.new(
        secret_key.encode("utf-8"), message.encode("utf-8"), hashlib.sha1
    ).digest()
    return base64.b64encode(digest).decode("ascii")


def authorization_header(access_key: str, signature: str) -> str:
    """Format the Authorization header value (``AWS key:signature``)."""
    return f"{AUTH_SCHEME} {access_key}:{signature}"
