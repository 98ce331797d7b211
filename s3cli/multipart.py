"""Multipart upload lifecycle management.

Handles the lifecycle of S3 multipart uploads:
- Create an upload session
- Upload parts concurrently, one worker per part
- Complete or abort the session

The coordinator never moves a session to a terminal state on its own and
never retries. A failed part is recorded on its PartResult; siblings keep
running and the caller decides whether to re-submit or abort.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Mapping, Optional, Sequence

from botocore.exceptions import ClientError

from s3cli.errors import AbortFailed, IncompleteUpload, InvalidArgument, PartUploadFailed
from s3cli.models import (
    CompletedPart,
    MultipartUploadSession,
    PartResult,
    UploadState,
)

logger = logging.getLogger(__name__)

# S3 accepts part numbers 1..10000
MAX_PART_NUMBER = 10000


def _rejection(error: ClientError) -> tuple[str, Optional[str]]:
    """Extract the service's message and error code from a ClientError."""
    details = error.response.get("Error", {})
    return str(error), details.get("Code")


def validate_part_numbers(part_numbers: Sequence[int]) -> None:
    """Ensure every part number is an integer within 1..MAX_PART_NUMBER."""
    for number in part_numbers:
        if isinstance(number, bool) or not isinstance(number, int):
            raise InvalidArgument(f"part number must be an integer: {number!r}")
        if not 1 <= number <= MAX_PART_NUMBER:
            raise InvalidArgument(
                f"part number {number} out of range 1..{MAX_PART_NUMBER}"
            )


class MultipartUploadCoordinator:
    """Drives multipart uploads against a boto3 S3 client.

    Args:
        s3_client: boto3 S3 client (thread-safe, shared by all workers).
        max_workers: Optional cap on concurrent part uploads. None starts
                     one worker per part.
    """

    def __init__(self, s3_client: Any, max_workers: Optional[int] = None):
        if max_workers is not None and max_workers < 1:
            raise InvalidArgument(f"max_workers must be positive: {max_workers}")
        self.s3_client = s3_client
        self.max_workers = max_workers

    def create(self, bucket: str, key: str) -> MultipartUploadSession:
        """Create a new multipart upload session.

        Raises:
            botocore.exceptions.ClientError: If the service refuses.
        """
        response = self.s3_client.create_multipart_upload(Bucket=bucket, Key=key)
        session = MultipartUploadSession(bucket, key, response["UploadId"])
        logger.info("created multipart upload %s for %s/%s", session.upload_id, bucket, key)
        return session

    def upload_part(
        self,
        session: MultipartUploadSession,
        part_number: int,
        file_path: str,
    ) -> str:
        """Upload one local file as one part and return its ETag.

        The file handle is opened and closed inside this call.

        Raises:
            PartUploadFailed: If the file cannot be opened or the upload
                              call fails.
        """
        try:
            with open(file_path, "rb") as body:
                response = self.s3_client.upload_part(
                    Body=body,
                    Bucket=session.bucket,
                    Key=session.key,
                    PartNumber=part_number,
                    UploadId=session.upload_id,
                )
        except Exception as e:
            raise PartUploadFailed(part_number, e) from e
        return response["ETag"]

    def _upload_one(
        self,
        session: MultipartUploadSession,
        part_number: int,
        file_path: str,
    ) -> PartResult:
        try:
            etag = self.upload_part(session, part_number, file_path)
        except PartUploadFailed as e:
            logger.warning("part %d failed: %s", part_number, e.cause)
            return PartResult(part_number, error=e)
        logger.debug("part %d uploaded, etag %s", part_number, etag)
        return PartResult(part_number, etag=etag)

    def dispatch(
        self,
        session: MultipartUploadSession,
        parts: Mapping[int, str],
    ) -> list[PartResult]:
        """Upload every part concurrently and wait for all of them.

        Args:
            session: The upload session the parts belong to.
            parts: Mapping of part number to local file path.

        Returns:
            One PartResult per submitted part, ordered by part number.

        Raises:
            InvalidArgument: If a part number is not a valid S3 part number.
        """
        numbers = sorted(parts)
        validate_part_numbers(numbers)
        if not numbers:
            return []

        session.state = UploadState.UPLOADING
        workers = self.max_workers or len(numbers)
        logger.info(
            "uploading %d part(s) to %s with %d worker(s)",
            len(numbers), session.upload_id, workers,
        )

        # One future per part; leaving the executor joins all of them
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="mpu-part") as executor:
            futures = [
                executor.submit(self._upload_one, session, number, parts[number])
                for number in numbers
            ]

        return [future.result() for future in futures]

    def complete(
        self,
        session: MultipartUploadSession,
        etags: Sequence[str],
    ) -> dict:
        """Finalize the upload from ETags given in assembly order.

        The i-th ETag is submitted as part number i + 1.

        Raises:
            InvalidArgument: If no ETags are given.
            IncompleteUpload: If the service rejects the part list.
        """
        if not etags:
            raise InvalidArgument("at least one part ETag is required")

        parts = [CompletedPart(index + 1, etag) for index, etag in enumerate(etags)]
        logger.info("completing %s with %d part(s)", session.upload_id, len(parts))
        try:
            response = self.s3_client.complete_multipart_upload(
                Bucket=session.bucket,
                Key=session.key,
                UploadId=session.upload_id,
                MultipartUpload={"Parts": [part.to_dict() for part in parts]},
            )
        except ClientError as e:
            message, code = _rejection(e)
            raise IncompleteUpload(message, code=code) from e

        session.state = UploadState.COMPLETED
        return response

    def abort(self, session: MultipartUploadSession) -> dict:
        """Abort the upload.

        Repeated aborts are passed through to the service; whatever it
        reports comes back as AbortFailed, the same as for a first call.

        Raises:
            AbortFailed: If the service rejects the abort.
        """
        logger.info("aborting %s", session.upload_id)
        try:
            response = self.s3_client.abort_multipart_upload(
                Bucket=session.bucket,
                Key=session.key,
                UploadId=session.upload_id,
            )
        except ClientError as e:
            message, code = _rejection(e)
            raise AbortFailed(message, code=code) from e

        session.state = UploadState.ABORTED
        return response

    def list_uploads(self, bucket: str, prefix: str = "") -> dict:
        """List in-progress multipart uploads in a bucket."""
        params = {"Bucket": bucket}
        if prefix:
            params["Prefix"] = prefix
        return self.s3_client.list_multipart_uploads(**params)
