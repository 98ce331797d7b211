"""Retry logic with backoff for transient storage failures.

The multipart coordinator never retries on its own; the CLI uses this
module to re-submit individual failed parts when asked to.

Transient (Retryable):
- Connection errors and timeouts
- Server errors (5xx)
- Throttling (429, SlowDown)

Permanent (Not Retryable):
- Local file errors (missing part file)
- Client errors (4xx except 429), including signature mismatches
"""

import time
from typing import Any, Callable, Optional, Sequence

from botocore.exceptions import (
    ClientError,
    ConnectionClosedError,
    ConnectTimeoutError,
    EndpointConnectionError,
    ReadTimeoutError,
)

from s3cli.errors import PartUploadFailed

# HTTP status codes that indicate transient server issues
RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}

# Error codes some S3-compatible services return with a 200/400 status
RETRYABLE_ERROR_CODES = {"SlowDown", "RequestTimeout", "InternalError", "ServiceUnavailable"}


class RetryExhausted(Exception):
    """Raised when all retry attempts have been exhausted."""

    def __init__(
        self,
        message: str,
        attempts: int,
        last_error: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.attempts = attempts
        self.last_error = last_error


def is_retryable_error(error: Exception) -> bool:
    """Determine if an error is transient and worth retrying.

    A PartUploadFailed is judged by the error that caused it.
    """
    if isinstance(error, PartUploadFailed):
        return is_retryable_error(error.cause)

    if isinstance(
        error,
        (EndpointConnectionError, ConnectTimeoutError, ReadTimeoutError, ConnectionClosedError),
    ):
        return True

    if isinstance(error, ClientError):
        details = error.response.get("Error", {})
        if details.get("Code") in RETRYABLE_ERROR_CODES:
            return True
        status_code = error.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
        return status_code in RETRYABLE_STATUS_CODES

    return False


def retry_with_backoff(
    func: Callable[..., Any],
    max_attempts: int = 3,
    delays: Sequence[float] = (1.0, 2.0, 4.0),
    args: tuple = (),
    kwargs: Optional[dict] = None,
) -> Any:
    """Execute a function, retrying transient failures.

    Args:
        func: The function to execute.
        max_attempts: Maximum number of attempts (including first try).
        delays: Delay (seconds) before each retry; delays[0] follows the
                first failure, the last value is reused once exhausted.
        args: Positional arguments to pass to func.
        kwargs: Keyword arguments to pass to func.

    Returns:
        The return value of func if successful.

    Raises:
        RetryExhausted: If all attempts fail with retryable errors.
        Exception: A non-retryable error is raised immediately.
    """
    if kwargs is None:
        kwargs = {}

    last_error: Optional[Exception] = None

    for attempt in range(1, max_attempts + 1):
        try:
            return func(*args, **kwargs)
        except Exception as e:
            last_error = e

            if not is_retryable_error(e):
                raise

            if attempt >= max_attempts:
                break

            delay_index = min(attempt - 1, len(delays) - 1)
            time.sleep(delays[delay_index])

    raise RetryExhausted(
        f"Operation failed after {max_attempts} attempts",
        attempts=max_attempts,
        last_error=last_error,
    ) from last_error
