# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""s3curl CLI — multi-command entry point.

Subcommands:

* ``download`` — fetch an object to a local file
* ``upload``   — store a local file as an object
* ``delete``   — remove an object
* ``init``     — create a stub config file
* ``check``    — verify config, credentials and curl

Transfer commands accept ``--dry-run`` to print the signed curl command
instead of running it.
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import os
import sys
from pathlib import Path

from s3curl.client import S3Curl
from s3curl.config import ConfigurationError, Settings, get_config_path
from s3curl.executor import TransportError, curl_version, format_command
from s3curl.logging import configure_logging
from s3curl.planner import Operation


logger = logging.getLogger(__name__)

# Exit codes
EXIT_OK = 0
EXIT_CONFIG_ERROR = 1
EXIT_USAGE = 2
EXIT_TRANSPORT_ERROR = 3

_SUBCOMMANDS = frozenset({"download", "upload", "delete", "init", "check"})

_USAGE = """\
usage: s3curl <command> [args]

commands:
  download URL LOCAL_FILE   Download an object to a local file
  upload LOCAL_FILE URL     Upload a local file (URL ending in / keeps
                            the file name)
  delete URL                Delete an object
  init                      Create a stub config file
  check                     Verify config, credentials and curl

URL is the resource path including the bucket, e.g. /my-bucket/app.tgz.
Run 's3curl <command> --help' for command-specific help.\
"""


# ── Terminal colors ─────────────────────────────────────────────────


def _use_color() -> bool:
    """Color when stdout is a TTY, unless ``NO_COLOR`` or ``TERM=dumb``."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("TERM") == "dumb":
        return False
    return sys.stdout.isatty()


class _Style:
    """ANSI escape helpers.  All methods return plain text when color is off."""

    def __init__(self, color: bool) -> None:
        self._on = color

    def _wrap(self, code: str, text: str) -> str:
        if not self._on:
            return text
        return f"\033[{code}m{text}\033[0m"

    def bold(self, text: str) -> str:
        return self._wrap("1", text)

    def green(self, text: str) -> str:
        return self._wrap("32", text)

    def red(self, text: str) -> str:
        return self._wrap("31", text)

    def dim(self, text: str) -> str:
        return self._wrap("2", text)


# ── Transfer subcommands ────────────────────────────────────────────


def _transfer_parser(
    command: str, description: str
) -> argparse.ArgumentParser:
    """Parser with the options shared by download/upload/delete."""
    parser = argparse.ArgumentParser(
        prog=f"s3curl {command}", description=description
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        metavar="PATH",
        help="Config file (default: ~/.config/s3curl/s3curl.yaml)",
    )
    parser.add_argument(
        "--endpoint",
        default=None,
        help="Scheme and host to send the request to",
    )
    parser.add_argument(
        "--curl",
        default=None,
        metavar="BINARY",
        help="curl binary name or path",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Give up if curl has not finished after this long",
    )
    parser.add_argument(
        "--date",
        default=None,
        metavar="HTTP_DATE",
        help="Sign with this fixed Date header instead of the current time",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the signed curl command instead of running it",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def _run_transfer(
    operation: Operation,
    args: argparse.Namespace,
    url: str,
    local_file: str | None,
) -> int:
    """Load settings, then plan and either print or run *operation*."""
    configure_logging(level=logging.DEBUG if args.debug else logging.INFO)

    try:
        settings = Settings.load(args.config)
        overrides = {
            name: value
            for name, value in (
                ("endpoint", args.endpoint),
                ("curl", args.curl),
                ("timeout", args.timeout),
            )
            if value is not None
        }
        settings = dataclasses.replace(settings, **overrides)
        client = S3Curl.from_settings(
            settings, url=url, local_file=local_file, http_date=args.date
        )
        if args.dry_run:
            print(format_command(client.plan(operation)))
            return EXIT_OK
        client.run(operation)
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        return EXIT_CONFIG_ERROR
    except TransportError as e:
        if e.stderr:
            logger.error("%s: %s", e, e.stderr)
        else:
            logger.error("%s", e)
        return EXIT_TRANSPORT_ERROR

    logger.info("%s %s: done", operation.name.lower(), url)
    return EXIT_OK


def cmd_download(argv: list[str]) -> int:
    """Download an object to a local file."""
    parser = _transfer_parser("download", "Download an object from S3.")
    parser.add_argument("url", help="Resource path, e.g. /bucket/key")
    parser.add_argument("local_file", help="Where to write the object")
    args = parser.parse_args(argv)
    return _run_transfer(Operation.DOWNLOAD, args, args.url, args.local_file)


def cmd_upload(argv: list[str]) -> int:
    """Upload a local file."""
    parser = _transfer_parser("upload", "Upload a file to S3.")
    parser.add_argument("local_file", help="File to upload")
    parser.add_argument(
        "url",
        help="Resource path; a trailing / appends the local file name",
    )
    args = parser.parse_args(argv)
    return _run_transfer(Operation.UPLOAD, args, args.url, args.local_file)


def cmd_delete(argv: list[str]) -> int:
    """Delete an object."""
    parser = _transfer_parser("delete", "Delete an object from S3.")
    parser.add_argument("url", help="Resource path, e.g. /bucket/key")
    args = parser.parse_args(argv)
    return _run_transfer(Operation.DELETE, args, args.url, None)


# ── init subcommand ─────────────────────────────────────────────────


def cmd_init(argv: list[str]) -> int:
    """Create a stub config file if none exists.

    Returns:
        Exit code (always 0).
    """
    config_path = get_config_path()

    if config_path.exists():
        print(f"Config already exists: {config_path}")
        return EXIT_OK

    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(_STUB_CONFIG)
    print(f"Created stub config: {config_path}")
    return EXIT_OK


# ── check subcommand ────────────────────────────────────────────────


def cmd_check(argv: list[str]) -> int:
    """Report config, credential and curl status.

    Returns:
        0 if everything needed for a transfer is in place, 1 otherwise.
    """
    parser = argparse.ArgumentParser(
        prog="s3curl check", description="Verify s3curl setup."
    )
    parser.add_argument("--config", type=Path, default=None, metavar="PATH")
    args = parser.parse_args(argv)

    s = _Style(_use_color())
    all_ok = True

    print(s.bold("Configuration"))
    try:
        settings = Settings.load(args.config)
    except ConfigurationError as e:
        print(f"  {s.red('✗')} {e}")
        return EXIT_CONFIG_ERROR

    source = str(settings.source) if settings.source else "none (env only)"
    print(f"  Config file: {s.dim(source)}")
    print(f"  Endpoint:    {settings.endpoint}")

    try:
        credentials = settings.credentials()
        print(f"  {s.green('✓')} credentials: {credentials.access_key}")
    except ConfigurationError as e:
        print(f"  {s.red('✗')} credentials: {e}")
        all_ok = False
    print()

    print(s.bold("Dependencies"))
    version = curl_version(settings.curl)
    if version:
        print(f"  {s.green('✓')} {version}")
    else:
        print(f"  {s.red('✗')} {settings.curl}: not found")
        all_ok = False
    print()

    if all_ok:
        print(s.green("All checks passed."))
        return EXIT_OK
    print(s.red("Some checks failed."))
    return EXIT_CONFIG_ERROR


# ── CLI plumbing ────────────────────────────────────────────────────


_DISPATCH: dict[str, str] = {
    "download": "cmd_download",
    "upload": "cmd_upload",
    "delete": "cmd_delete",
    "init": "cmd_init",
    "check": "cmd_check",
}


def cli() -> None:
    """Entry point for ``s3curl``."""
    argv = sys.argv[1:]

    if not argv or argv[0] in ("-h", "--help"):
        print(_USAGE)
        sys.exit(EXIT_OK)

    if argv[0] not in _SUBCOMMANDS:
        print(f"s3curl: unknown command '{argv[0]}'", file=sys.stderr)
        print(_USAGE, file=sys.stderr)
        sys.exit(EXIT_USAGE)

    # Look up handler by name so tests can mock individual commands.
    import s3curl.cli as _self

    handler = getattr(_self, _DISPATCH[argv[0]])
    sys.exit(handler(argv[1:]))


#: Stub configuration template written by ``s3curl init``.
_STUB_CONFIG = """\
# s3curl configuration

credentials:
  access_key: !env AWS_ACCESS_KEY
  secret_key: !env AWS_SECRET_KEY

# endpoint: http://s3.amazonaws.com
# curl: curl
# timeout: 600
"""
