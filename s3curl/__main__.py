# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Allow ``python -m s3curl``."""

from s3curl.cli import cli


if __name__ == "__main__":
    cli()
