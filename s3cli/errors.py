"""Error types raised by the signing and multipart layers.

Every failure surfaces as one of these types (or as the botocore error
itself when the storage client reports something we do not translate).
The CLI decides how to present them; nothing here exits the process.
"""

from typing import Optional


class S3CliError(Exception):
    """Base class for all s3cli errors."""


class InvalidArgument(S3CliError):
    """Malformed caller input: bucket/key, method, ACL or status string."""


class InvalidEndpoint(S3CliError):
    """The endpoint string could not be parsed as an absolute URL."""


class CredentialsUnavailable(S3CliError):
    """Access/secret key retrieval failed."""


class PartUploadFailed(S3CliError):
    """A single multipart part could not be uploaded.

    Recorded on the part's result rather than raised out of dispatch, so
    sibling parts are unaffected.
    """

    def __init__(self, part_number: int, cause: Exception):
        super().__init__(f"part {part_number}: {cause}")
        self.part_number = part_number
        self.cause = cause


class _ServiceRejected(S3CliError):
    """Storage service rejected a request; keeps its code and message."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


class IncompleteUpload(_ServiceRejected):
    """Finalizing a multipart upload was rejected by the storage service."""


class AbortFailed(_ServiceRejected):
    """Aborting a multipart upload was rejected by the storage service."""
