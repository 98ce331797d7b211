"""Data models for the s3cli client."""

from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Optional, Type, TypeVar

from s3cli.errors import InvalidArgument

E = TypeVar("E", bound=Enum)


class HttpMethod(Enum):
    """Verbs accepted by the legacy presign scheme."""

    GET = "GET"
    HEAD = "HEAD"
    PUT = "PUT"
    POST = "POST"
    DELETE = "DELETE"


class PathStyle(Enum):
    """How the object path is embedded in a presigned URL.

    ESCAPED percent-encodes the bucket/key; RAW keeps the key bytes as
    they appear after parsing endpoint + "/" + bucket/key.
    """

    ESCAPED = "escaped"
    RAW = "raw"


class BucketCannedACL(Enum):
    PRIVATE = "private"
    PUBLIC_READ = "public-read"
    PUBLIC_READ_WRITE = "public-read-write"
    AUTHENTICATED_READ = "authenticated-read"


class ObjectCannedACL(Enum):
    PRIVATE = "private"
    PUBLIC_READ = "public-read"
    PUBLIC_READ_WRITE = "public-read-write"
    AUTHENTICATED_READ = "authenticated-read"
    AWS_EXEC_READ = "aws-exec-read"
    BUCKET_OWNER_READ = "bucket-owner-read"
    BUCKET_OWNER_FULL_CONTROL = "bucket-owner-full-control"


class VersioningStatus(Enum):
    ENABLED = "Enabled"
    SUSPENDED = "Suspended"


class UploadState(Enum):
    """Lifecycle of a multipart upload session."""

    CREATED = "created"
    UPLOADING = "uploading"
    COMPLETED = "completed"
    ABORTED = "aborted"


def parse_choice(enum_cls: Type[E], value: str, what: str) -> E:
    """Map a user-supplied string onto a closed enum.

    Raises:
        InvalidArgument: If value is not one of the enum's values.
    """
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise InvalidArgument(
            f"invalid {what}: {value!r} (expected one of: {allowed})"
        ) from None


@dataclass
class ClientConfig:
    """Resolved settings for one s3cli invocation."""

    endpoint: Optional[str] = None
    access_key: Optional[str] = None
    secret_key: Optional[str] = field(default=None, repr=False)
    profile: Optional[str] = None
    region: str = "cn-north-1"
    addressing_style: str = "auto"
    presign: bool = False
    presign_expiry: timedelta = timedelta(hours=24)
    verbose: bool = False
    debug: bool = False


@dataclass(frozen=True)
class Credentials:
    """An access/secret key pair, retrieved on demand and never stored."""

    access_key_id: str
    secret_access_key: str = field(repr=False)


@dataclass
class PresignRequest:
    """What a legacy-signature presigned URL should authorize."""

    method: HttpMethod
    bucket_key: str
    content_type: str = ""
    expires_in: timedelta = timedelta(hours=24)


@dataclass
class MultipartUploadSession:
    """Client-side reference to a multipart upload owned by the service."""

    bucket: str
    key: str
    upload_id: str
    state: UploadState = UploadState.CREATED


@dataclass
class PartResult:
    """Outcome of uploading one part: an ETag or an error, never both."""

    part_number: int
    etag: Optional[str] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class CompletedPart:
    part_number: int
    etag: str

    def to_dict(self) -> dict:
        return {"PartNumber": self.part_number, "ETag": self.etag}
