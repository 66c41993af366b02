# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Configuration for the s3curl client.

Settings are read from an optional YAML file whose default location
follows the XDG Base Directory Specification:

    ``$XDG_CONFIG_HOME/s3curl/s3curl.yaml``
    (typically ``~/.config/s3curl/s3curl.yaml``)

``!env`` tags resolve values from environment variables, so the file can
point at credentials without containing them::

    credentials:
      access_key: !env AWS_ACCESS_KEY
      secret_key: !env AWS_SECRET_KEY
    endpoint: http://s3.amazonaws.com
    curl: curl
    timeout: 600

When the file is absent or leaves credentials unset, the environment is
consulted directly (``AWS_ACCESS_KEY``/``AWS_SECRET_KEY`` first, then
``AWS_ACCESS_KEY_ID``/``AWS_SECRET_ACCESS_KEY``). ``.env`` files are
loaded once before any lookup.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from platformdirs import user_config_path

from s3curl.dotenv_loader import load_dotenv_once


if TYPE_CHECKING:
    from s3curl.signing import Credentials


logger = logging.getLogger(__name__)

#: Application name for XDG path resolution.
_APP_NAME = "s3curl"

#: Host every resource path is appended to.
DEFAULT_ENDPOINT = "http://s3.amazonaws.com"

#: Transport binary, resolved through PATH.
DEFAULT_CURL = "curl"

# Environment variables checked for credentials, in priority order
_ACCESS_KEY_VARS = ("AWS_ACCESS_KEY", "AWS_ACCESS_KEY_ID")
_SECRET_KEY_VARS = ("AWS_SECRET_KEY", "AWS_SECRET_ACCESS_KEY")


class ConfigurationError(Exception):
    """Raised when required configuration is missing or malformed."""


def get_config_path() -> Path:
    """Return the default config file path.

    Uses XDG: ``$XDG_CONFIG_HOME/s3curl/s3curl.yaml``.
    """
    return user_config_path(_APP_NAME) / "s3curl.yaml"


def get_dotenv_path() -> Path:
    """Return the ``.env`` file path inside the XDG config directory."""
    return user_config_path(_APP_NAME) / ".env"


# ---------------------------------------------------------------------------
# YAML loading
# ---------------------------------------------------------------------------


class _EnvVar:
    """Placeholder for an unresolved ``!env VAR_NAME`` tag."""

    def __init__(self, var_name: str) -> None:
        self.var_name = var_name


def _env_constructor(loader: yaml.SafeLoader, node: yaml.Node) -> _EnvVar:
    """Handle ``!env VAR_NAME`` in YAML."""
    value = loader.construct_scalar(node)
    return _EnvVar(str(value))


def _make_loader() -> type[yaml.SafeLoader]:
    """Create a YAML loader that understands ``!env``."""

    class EnvLoader(yaml.SafeLoader):
        pass

    EnvLoader.add_constructor("!env", _env_constructor)
    return EnvLoader


def _resolve(value: object, *, name: str = "") -> str | None:
    """Resolve a YAML scalar to a string.

    ``_EnvVar`` placeholders are looked up in the environment. Unset or
    empty values become None.

    Raises:
        ConfigurationError: If the value is a mapping or list.
    """
    if isinstance(value, _EnvVar):
        return os.environ.get(value.var_name) or None
    if value is None:
        return None
    if isinstance(value, (dict, list)):
        raise ConfigurationError(
            f"Config '{name}' must be a scalar, got {type(value).__name__}"
        )
    return str(value) or None


def _first_env(names: tuple[str, ...]) -> str | None:
    """Return the first non-empty environment variable among *names*."""
    for var in names:
        value = os.environ.get(var)
        if value:
            return value
    return None


def _load_yaml(config_path: Path) -> dict[str, Any]:
    """Read a config file and check that it is a mapping."""
    try:
        with open(config_path) as f:
            raw = yaml.load(f, Loader=_make_loader())
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Invalid YAML in {config_path}: {e}"
        ) from e

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigurationError(
            f"Config file must be a YAML mapping: {config_path}"
        )
    return raw


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Settings:
    """Resolved client settings.

    Attributes:
        access_key: Access key ID, or None if not configured.
        secret_key: Secret access key, or None if not configured.
        endpoint: Scheme and host the resource path is appended to.
        curl: Transport binary name or path.
        timeout: Seconds to wait for curl, or None for no limit.
        source: Config file the values came from, if any.
    """

    access_key: str | None = None
    secret_key: str | None = field(default=None, repr=False)
    endpoint: str = DEFAULT_ENDPOINT
    curl: str = DEFAULT_CURL
    timeout: float | None = None
    source: Path | None = None

    def __post_init__(self) -> None:
        if self.timeout is not None and self.timeout <= 0:
            raise ConfigurationError(
                f"Config 'timeout' must be positive, got {self.timeout}"
            )

    @classmethod
    def load(cls, config_path: Path | None = None) -> Settings:
        """Load settings from YAML and the environment.

        Args:
            config_path: Explicit config file. When given it must exist.
                When None, the XDG default is used if present.

        Returns:
            Settings instance. Credentials may still be None; call
            ``credentials()`` to enforce them.

        Raises:
            ConfigurationError: If an explicit file is missing or any
                file is malformed.
        """
        load_dotenv_once()

        raw: dict[str, Any] = {}
        source: Path | None = None
        if config_path is not None:
            if not config_path.exists():
                raise ConfigurationError(
                    f"Config file not found: {config_path}"
                )
            raw = _load_yaml(config_path)
            source = config_path
        else:
            default_path = get_config_path()
            if default_path.exists():
                raw = _load_yaml(default_path)
                source = default_path

        if source is not None:
            logger.debug("Loaded config from %s", source)

        creds = raw.get("credentials") or {}
        if not isinstance(creds, dict):
            raise ConfigurationError("Config 'credentials' must be a mapping")

        access_key = _resolve(
            creds.get("access_key"), name="credentials.access_key"
        ) or _first_env(_ACCESS_KEY_VARS)
        secret_key = _resolve(
            creds.get("secret_key"), name="credentials.secret_key"
        ) or _first_env(_SECRET_KEY_VARS)

        timeout_raw = _resolve(raw.get("timeout"), name="timeout")
        try:
            timeout = None if timeout_raw is None else float(timeout_raw)
        except ValueError as e:
            raise ConfigurationError(
                f"Config 'timeout' must be a number, got {timeout_raw!r}"
            ) from e

        return cls(
            access_key=access_key,
            secret_key=secret_key,
            endpoint=_resolve(raw.get("endpoint"), name="endpoint")
            or DEFAULT_ENDPOINT,
            curl=_resolve(raw.get("curl"), name="curl") or DEFAULT_CURL,
            timeout=timeout,
            source=source,
        )

    def credentials(self) -> Credentials:
        """Return the configured key pair.

        Raises:
            ConfigurationError: If either key is missing.
        """
        from s3curl.signing import Credentials

        return Credentials(
            access_key=self.access_key or "",
            secret_key=self.secret_key or "",
        )
