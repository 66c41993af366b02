# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""One-shot ``.env`` loading for credential lookup.

Environment variables are read from two files, in order:

1. ``~/.config/s3curl/.env`` (XDG config directory)
2. ``.env`` in the current working directory

Neither file overrides variables that are already set, so the real
environment wins over both and the XDG file wins over the local one.
"""

import logging
from pathlib import Path

from dotenv import load_dotenv


logger = logging.getLogger(__name__)

_dotenv_loaded = False


def load_dotenv_once() -> None:
    """Load the ``.env`` files unless that already happened."""
    global _dotenv_loaded
    if _dotenv_loaded:
        return

    from s3curl.config import get_dotenv_path

    for env_path in (get_dotenv_path(), Path.cwd() / ".env"):
        if env_path.exists():
            load_dotenv(env_path, override=False)
            logger.debug("Loaded .env from %s", env_path)

    _dotenv_loaded = True


def reset_dotenv_state() -> None:
    """Forget that ``.env`` files were loaded. For testing only."""
    global _dotenv_loaded
    _dotenv_loaded = False
