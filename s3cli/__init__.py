"""s3cli: a command-line client for S3-compatible object storage.

Bucket and object commands, multipart uploads with concurrent part
dispatch, and legacy (HMAC-SHA1) presigned URLs.
"""

__version__ = "1.2.3"

from s3cli.cli import main

__all__ = ["main", "__version__"]
