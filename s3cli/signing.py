"""Legacy query-string presigning (HMAC-SHA1, "signature version 2").

A presigned URL carries three query parameters on top of the target URL:

    AWSAccessKeyId  the access key id
    Expires         Unix epoch seconds after which the URL is refused
    Signature       base64(HMAC-SHA1(secret_key, string_to_sign))

The string to sign is, byte for byte:

    METHOD \\n Content-MD5 \\n Content-Type \\n Expires \\n Path

Content-MD5 is always empty here since no request body is hashed.

Two path conventions exist because S3-compatible backends disagree about
escaping. ESCAPED percent-encodes the bucket/key (spaces, "+", ...) before
signing; RAW signs the path exactly as parsed from endpoint + "/" +
bucket/key. The same convention drives both the signed string and the
path of the returned URL, otherwise the server-side check fails. In a RAW
URL, bytes that cannot appear in a URL at all (spaces, control and
non-ASCII characters) are percent-encoded on output; the signature still
covers the literal path, which is what the server sees once it decodes
those bytes.
"""

import base64
import hashlib
import hmac
import logging
import time
from typing import Callable, Optional, Union
from urllib.parse import SplitResult, parse_qs, quote, urlencode, urlsplit, urlunsplit

from s3cli.credentials import CredentialProvider
from s3cli.errors import InvalidArgument, InvalidEndpoint
from s3cli.models import HttpMethod, PathStyle, PresignRequest, parse_choice

logger = logging.getLogger(__name__)

# Header Content-MD5, never set for presigned URLs
CONTENT_MD5 = ""

ACCESS_KEY_PARAM = "AWSAccessKeyId"
EXPIRES_PARAM = "Expires"
SIGNATURE_PARAM = "Signature"

# Characters left as-is when a RAW path is placed in the URL
_RAW_URL_SAFE = "/!$&'()*+,;=:@~"


def validate_bucket_key(bucket_key: str) -> None:
    """Reject an empty bucket/key or one starting with a path separator."""
    if not bucket_key or bucket_key.startswith("/"):
        raise InvalidArgument(f"invalid bucket/key: {bucket_key!r}")


def parse_endpoint(endpoint: Optional[str]) -> SplitResult:
    """Parse an absolute endpoint URL.

    Raises:
        InvalidEndpoint: If the value is empty, malformed, or lacks a
                         scheme or host.
    """
    if not endpoint:
        raise InvalidEndpoint("endpoint is required for presigning")

    try:
        parts = urlsplit(endpoint)
        # Accessing port validates it
        parts.port
    except ValueError as e:
        raise InvalidEndpoint(f"invalid endpoint {endpoint!r}: {e}") from e

    if not parts.scheme or not parts.netloc:
        raise InvalidEndpoint(
            f"invalid endpoint {endpoint!r}: expected scheme://host[:port]"
        )
    return parts


def canonical_path(
    bucket_key: str,
    path_style: PathStyle = PathStyle.ESCAPED,
    endpoint: str = "",
) -> str:
    """Return the path component that is signed and requested.

    Args:
        bucket_key: "bucket/key" without a leading slash.
        path_style: ESCAPED or RAW convention.
        endpoint: Only used by RAW, whose path keeps any endpoint prefix.
    """
    validate_bucket_key(bucket_key)
    if path_style is PathStyle.RAW:
        prefix = urlsplit(endpoint or "").path.rstrip("/")
        return urlsplit(f"{prefix}/{bucket_key}").path
    return "/" + quote(bucket_key, safe="/")


def string_to_sign(
    method: HttpMethod,
    content_type: str,
    expires: int,
    path: str,
) -> str:
    return "\n".join([method.value, CONTENT_MD5, content_type, str(expires), path])


def build_canonical_string(
    method: Union[HttpMethod, str],
    bucket_key: str,
    content_type: str,
    expires: int,
    path_style: PathStyle = PathStyle.ESCAPED,
    endpoint: str = "",
) -> str:
    """Build the exact string the storage service recomputes to verify.

    Args:
        method: One of GET, HEAD, PUT, POST, DELETE.
        bucket_key: "bucket/key" without a leading slash.
        content_type: Content-Type the request will carry (may be empty).
        expires: Absolute expiry in Unix epoch seconds.
        path_style: ESCAPED or RAW path convention.
        endpoint: Endpoint URL, needed for the RAW convention.

    Raises:
        InvalidArgument: If bucket_key or method is invalid.
    """
    path = canonical_path(bucket_key, path_style, endpoint)
    return string_to_sign(coerce_method(method), content_type, expires, path)


def sign(secret_key: str, canonical: str) -> str:
    """HMAC-SHA1 the canonical string and return the base64 digest."""
    digest = hmac.new(
        secret_key.encode("utf-8"),
        canonical.encode("utf-8"),
        hashlib.sha1,
    ).digest()
    return base64.b64encode(digest).decode("ascii")


def coerce_method(method: Union[HttpMethod, str]) -> HttpMethod:
    if isinstance(method, HttpMethod):
        return method
    return parse_choice(HttpMethod, str(method).upper(), "method")


def _target_url(
    endpoint: str,
    bucket_key: str,
    path_style: PathStyle,
) -> tuple[SplitResult, str]:
    """Return the URL to print and the path to sign."""
    path = canonical_path(bucket_key, path_style, endpoint or "")
    parts = parse_endpoint(endpoint)
    if path_style is PathStyle.RAW:
        return parts._replace(path=quote(path, safe=_RAW_URL_SAFE)), path
    return parts._replace(path=path), path


def presign_url(
    endpoint: str,
    request: PresignRequest,
    credentials: CredentialProvider,
    path_style: PathStyle = PathStyle.ESCAPED,
    clock: Callable[[], float] = time.time,
) -> str:
    """Produce a self-authenticating URL for one request.

    Purely local: no network call is made. Query parameters already on
    the endpoint are kept; the three signature parameters replace any of
    the same name.

    Raises:
        InvalidArgument: Bad bucket/key or method.
        InvalidEndpoint: Endpoint is not an absolute URL.
        CredentialsUnavailable: The provider could not supply keys.
    """
    method = coerce_method(request.method)
    target, path = _target_url(endpoint, request.bucket_key, path_style)
    expires = int(clock()) + int(request.expires_in.total_seconds())

    secret = credentials.retrieve()
    canonical = string_to_sign(method, request.content_type, expires, path)
    logger.debug("string to sign: %r", canonical)

    query = parse_qs(target.query, keep_blank_values=True)
    query[ACCESS_KEY_PARAM] = [secret.access_key_id]
    query[EXPIRES_PARAM] = [str(expires)]
    query[SIGNATURE_PARAM] = [sign(secret.secret_access_key, canonical)]

    return urlunsplit(target._replace(query=urlencode(sorted(query.items()), doseq=True)))


class Presigner:
    """Binds an endpoint, a credential provider and a clock for presigning.

    Args:
        endpoint: Absolute endpoint URL (scheme://host[:port][/prefix]).
        credentials: Provider consulted on every presign call.
        clock: Returns the current Unix time; injectable for tests.
    """

    def __init__(
        self,
        endpoint: str,
        credentials: CredentialProvider,
        clock: Callable[[], float] = time.time,
    ):
        self.endpoint = endpoint
        self.credentials = credentials
        self.clock = clock

    def presign(
        self,
        request: PresignRequest,
        path_style: PathStyle = PathStyle.ESCAPED,
    ) -> str:
        return presign_url(
            self.endpoint,
            request,
            self.credentials,
            path_style=path_style,
            clock=self.clock,
        )
