# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Logging setup with credential redaction.

Library modules log through ``logging.getLogger(__name__)`` and never
configure handlers. Entry points call ``configure_logging()`` once,
which installs a stderr handler carrying ``SecretFilter``: registered
secret keys are replaced with ``[REDACTED]`` and the signature part of
any ``Authorization: AWS key:signature`` text is masked.

Usage:
    from s3curl.logging import SecretFilter, configure_logging

    configure_logging(level=logging.DEBUG)
    SecretFilter.register_secret(secret_key)
"""

import logging
import re
from typing import ClassVar


_SIGNATURE_RE = re.compile(r"(\bAWS [A-Za-z0-9_\-]+:)[A-Za-z0-9+/=]+")


class SecretFilter(logging.Filter):
    """Redacts secret keys and request signatures from log records.

    The secret registry is class-level so that a key registered anywhere
    (e.g. by ``S3Curl``) is hidden by every handler using this filter.
    """

    _secrets: ClassVar[set[str]] = set()
    _pattern: ClassVar[re.Pattern[str] | None] = None

    def filter(self, record: logging.LogRecord) -> bool:
        """Rewrite the record in place. Never drops it."""
        record.msg = self.redact(str(record.msg))
        if record.args:
            if isinstance(record.args, dict):
                record.args = {
                    k: self.redact(v) if isinstance(v, str) else v
                    for k, v in record.args.items()
                }
            else:
                record.args = tuple(
                    self.redact(arg) if isinstance(arg, str) else arg
                    for arg in record.args
                )
        return True

    @classmethod
    def redact(cls, text: str) -> str:
        """Apply secret and signature redaction to *text*."""
        if cls._pattern is not None:
            text = cls._pattern.sub("[REDACTED]", text)
        return _SIGNATURE_RE.sub(r"\1***", text)

    @classmethod
    def register_secret(cls, secret: str) -> None:
        """Hide *secret* from all subsequent log output. Empty is ignored."""
        if secret and secret not in cls._secrets:
            cls._secrets.add(secret)
            # Longest first so overlapping secrets are fully replaced
            escaped = sorted(
                (re.escape(s) for s in cls._secrets), key=len, reverse=True
            )
            cls._pattern = re.compile("|".join(escaped))

    @classmethod
    def clear_secrets(cls) -> None:
        """Forget all registered secrets. For testing."""
        cls._secrets.clear()
        cls._pattern = None


def configure_logging(
    level: int = logging.INFO,
    format_string: str | None = None,
) -> None:
    """Configure the root logger for command-line use.

    Replaces any existing root handlers with a single stderr handler.

    Args:
        level: Root log level.
        format_string: Custom format; defaults to
            ``"%(asctime)s [%(levelname)s] %(name)s: %(message)s"``.
    """
    if format_string is None:
        format_string = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter(format_string, datefmt="%Y-%m-%d %H:%M:%S")
    )
    handler.addFilter(SecretFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for existing_handler in root_logger.handlers[:]:
        root_logger.removeHandler(existing_handler)
    root_logger.addHandler(handler)
