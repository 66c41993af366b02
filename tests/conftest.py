# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Shared pytest fixtures."""

from collections.abc import Callable, Iterator
from datetime import UTC, datetime
from pathlib import Path

import pytest

from s3curl.dotenv_loader import reset_dotenv_state
from s3curl.logging import SecretFilter
from s3curl.signing import Credentials
from tests.vectors import ACCESS_KEY, SECRET_KEY


_CREDENTIAL_VARS = (
    "AWS_ACCESS_KEY",
    "AWS_SECRET_KEY",
    "AWS_ACCESS_KEY_ID",
    "AWS_SECRET_ACCESS_KEY",
)


@pytest.fixture(autouse=True)
def isolated_env(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Iterator[Path]:
    """Keep tests away from the real config dir, env and cwd.

    Yields:
        The directory standing in for ``$XDG_CONFIG_HOME``.
    """
    xdg = tmp_path / "xdg"
    monkeypatch.setattr(
        "s3curl.config.user_config_path", lambda app: xdg / app
    )
    for var in _CREDENTIAL_VARS:
        # setenv first so the original state is restored on teardown even
        # when python-dotenv writes the variable behind monkeypatch's back
        monkeypatch.setenv(var, "placeholder")
        monkeypatch.delenv(var)
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)

    reset_dotenv_state()
    SecretFilter.clear_secrets()
    yield xdg
    reset_dotenv_state()
    SecretFilter.clear_secrets()


@pytest.fixture
def credentials() -> Credentials:
    """Key pair matching the shared test vectors."""
    return Credentials(access_key=ACCESS_KEY, secret_key=SECRET_KEY)


@pytest.fixture
def ticking_clock() -> Callable[[], datetime]:
    """Clock that advances one second per call, from 2030-01-01T00:00Z."""
    state = {"calls": 0}

    def clock() -> datetime:
        moment = datetime(2030, 1, 1, 0, 0, state["calls"], tzinfo=UTC)
        state["calls"] += 1
        return moment

    return clock
