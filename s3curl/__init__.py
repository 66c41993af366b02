# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Sign S3 requests with AWS Signature Version 2 and run them via curl."""
