"""Bucket and object operations.

Each method maps one CLI sub-command onto one (occasionally a few) boto3
calls and returns the response document. When the configuration asks for
presigning, the request is not sent; a presigned URL for it is returned
instead.
"""

import logging
from typing import Any, BinaryIO, Iterator, Optional, Union

from s3cli.errors import InvalidArgument
from s3cli.models import (
    BucketCannedACL,
    ClientConfig,
    ObjectCannedACL,
    VersioningStatus,
)

logger = logging.getLogger(__name__)

# Regions where CreateBucket must not carry a LocationConstraint
_NO_LOCATION_CONSTRAINT = {"us-east-1"}

# DeleteObjects accepts at most 1000 keys per request
DELETE_BATCH_SIZE = 1000

Result = Union[dict, str]


def split_bucket_key(bucket_key: str) -> tuple[str, str]:
    """Split "bucket/dir/key" into ("bucket", "dir/key").

    A value without "/" is a bucket with an empty key.
    """
    bucket, _, key = bucket_key.partition("/")
    return bucket, key


class S3Operations:
    """Thin wrappers over a boto3 S3 client.

    Args:
        s3_client: boto3 S3 client
        config: Client configuration (presign mode and expiry)
    """

    def __init__(self, s3_client: Any, config: ClientConfig):
        self.s3_client = s3_client
        self.config = config

    def send(self, operation: str, **params: Any) -> Result:
        if self.config.presign:
            return self.s3_client.generate_presigned_url(
                ClientMethod=operation,
                Params=params,
                ExpiresIn=int(self.config.presign_expiry.total_seconds()),
            )
        logger.debug("%s %s", operation, {k: v for k, v in params.items() if k != "Body"})
        return getattr(self.s3_client, operation)(**params)

    # Buckets

    def create_buckets(self, buckets: list[str]) -> list[Result]:
        results = []
        for bucket in buckets:
            params: dict[str, Any] = {"Bucket": bucket}
            if self.config.region not in _NO_LOCATION_CONSTRAINT:
                params["CreateBucketConfiguration"] = {
                    "LocationConstraint": self.config.region,
                }
            results.append(self.send("create_bucket", **params))
        return results

    def list_buckets(self) -> Result:
        return self.send("list_buckets")

    def head_bucket(self, bucket: str) -> Result:
        return self.send("head_bucket", Bucket=bucket)

    def get_bucket_acl(self, bucket: str) -> Result:
        return self.send("get_bucket_acl", Bucket=bucket)

    def put_bucket_acl(self, bucket: str, acl: BucketCannedACL) -> Result:
        return self.send("put_bucket_acl", Bucket=bucket, ACL=acl.value)

    def get_bucket_policy(self, bucket: str) -> Result:
        return self.send("get_bucket_policy", Bucket=bucket)

    def put_bucket_policy(self, bucket: str, policy: str) -> Result:
        if not policy:
            raise InvalidArgument("empty policy")
        return self.send("put_bucket_policy", Bucket=bucket, Policy=policy)

    def get_bucket_versioning(self, bucket: str) -> Result:
        return self.send("get_bucket_versioning", Bucket=bucket)

    def put_bucket_versioning(self, bucket: str, status: VersioningStatus) -> Result:
        return self.send(
            "put_bucket_versioning",
            Bucket=bucket,
            VersioningConfiguration={"Status": status.value},
        )

    def delete_bucket(self, bucket: str) -> Result:
        return self.send("delete_bucket", Bucket=bucket)

    def delete_bucket_and_objects(self, bucket: str, force: bool = False) -> Result:
        """Delete a bucket, first emptying it when force is set."""
        if force:
            self.delete_objects(bucket, "")
        return self.delete_bucket(bucket)

    # Objects

    def put_object(self, bucket: str, key: str, body: Optional[BinaryIO] = None) -> Result:
        params: dict[str, Any] = {"Bucket": bucket, "Key": key}
        if body is not None:
            params["Body"] = body
        return self.send("put_object", **params)

    def head_object(self, bucket: str, key: str) -> Result:
        return self.send("head_object", Bucket=bucket, Key=key)

    def get_object(
        self,
        bucket: str,
        key: str,
        byte_range: str = "",
        version: str = "",
    ) -> Result:
        """Fetch an object; byte_range "0-64" means bytes 0 through 64."""
        params: dict[str, Any] = {"Bucket": bucket, "Key": key}
        if byte_range:
            params["Range"] = f"bytes={byte_range}"
        if version:
            params["VersionId"] = version
        return self.send("get_object", **params)

    def get_object_acl(self, bucket: str, key: str) -> Result:
        return self.send("get_object_acl", Bucket=bucket, Key=key)

    def put_object_acl(self, bucket: str, key: str, acl: ObjectCannedACL) -> Result:
        return self.send("put_object_acl", Bucket=bucket, Key=key, ACL=acl.value)

    def copy_object(self, source: str, bucket: str, key: str) -> Result:
        """Copy "bucket/key" source to bucket/key."""
        return self.send("copy_object", CopySource=source, Bucket=bucket, Key=key)

    def delete_object(self, bucket: str, key: str, version: str = "") -> Result:
        params: dict[str, Any] = {"Bucket": bucket, "Key": key}
        if version:
            params["VersionId"] = version
        return self.send("delete_object", **params)

    def delete_objects(self, bucket: str, prefix: str) -> int:
        """Delete every object under prefix and return how many went.

        Always sends the requests, even in presign mode.
        """
        deleted = 0
        params: dict[str, Any] = {"Bucket": bucket, "Prefix": prefix}

        while True:
            page = self.s3_client.list_objects(**params)
            contents = page.get("Contents", [])
            if not contents:
                break

            identifiers = [{"Key": obj["Key"]} for obj in contents]
            for start in range(0, len(identifiers), DELETE_BATCH_SIZE):
                batch = identifiers[start:start + DELETE_BATCH_SIZE]
                response = self.s3_client.delete_objects(
                    Bucket=bucket,
                    Delete={"Objects": batch, "Quiet": True},
                )
                errors = response.get("Errors", [])
                for error in errors:
                    logger.warning(
                        "delete %s failed: %s", error.get("Key"), error.get("Message")
                    )
                deleted += len(batch) - len(errors)
            logger.info("%d object(s) deleted from %s", deleted, bucket)

            if page.get("NextMarker"):
                params["Marker"] = page["NextMarker"]
            elif page.get("IsTruncated"):
                params["Marker"] = contents[-1]["Key"]
            else:
                break

        return deleted

    # Listing

    def list_objects(
        self,
        bucket: str,
        prefix: str = "",
        delimiter: str = "",
        marker: str = "",
        max_keys: int = 1000,
    ) -> Result:
        """List one page of objects."""
        params: dict[str, Any] = {"Bucket": bucket, "MaxKeys": max_keys}
        if prefix:
            params["Prefix"] = prefix
        if delimiter:
            params["Delimiter"] = delimiter
        if marker:
            params["Marker"] = marker
        return self.send("list_objects", **params)

    def iter_all_objects(
        self,
        bucket: str,
        prefix: str = "",
        delimiter: str = "",
    ) -> Iterator[dict]:
        """Yield every object under prefix, following pagination."""
        params: dict[str, Any] = {"Bucket": bucket}
        if prefix:
            params["Prefix"] = prefix
        if delimiter:
            params["Delimiter"] = delimiter

        paginator = self.s3_client.get_paginator("list_objects")
        for page in paginator.paginate(**params):
            yield from page.get("Contents", [])

    def list_object_versions(self, bucket: str, prefix: str = "") -> Result:
        params: dict[str, Any] = {"Bucket": bucket}
        if prefix:
            params["Prefix"] = prefix
        return self.send("list_object_versions", **params)
