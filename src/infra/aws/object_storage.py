"""S3 bucket teardown operations."""

from __future__ import annotations

from typing import Any

from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from .errors import error_code, wrap

_MISSING_CODES = {"404", "NoSuchBucket", "NotFound"}
_DELETE_BATCH = 1000


class ObjectStorage:
    """Bucket existence checks, emptying and deletion against S3."""

    def __init__(self, client: Any) -> None:
        self._client = client

    @classmethod
    def from_session(cls, session: Any) -> ObjectStorage:
        return cls(session.client("s3"))

    def bucket_exists(self, bucket: str) -> bool:
        try:
            self._client.head_bucket(Bucket=bucket)
        except ClientError as exc:
            if error_code(exc) in _MISSING_CODES:
                return False
            raise wrap("s3", "HeadBucket", exc) from exc
        except BotoCoreError as exc:
            raise wrap("s3", "HeadBucket", exc) from exc
        return True

    def empty_bucket(self, bucket: str) -> int:
        """Delete every object and object version in a bucket.

        Returns:
            Number of keys (including versions and delete markers) removed
        """
        removed = 0
        try:
            paginator = self._client.get_paginator("list_object_versions")
            for page in paginator.paginate(Bucket=bucket):
                targets = [
                    {"Key": item["Key"], "VersionId": item["VersionId"]}
                    for item in page.get("Versions", []) + page.get("DeleteMarkers", [])
                ]
                removed += self._delete_keys(bucket, targets)

            # Unversioned buckets report objects without version ids
            paginator = self._client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=bucket):
                targets = [{"Key": item["Key"]} for item in page.get("Contents", [])]
                removed += self._delete_keys(bucket, targets)
        except (BotoCoreError, ClientError) as exc:
            raise wrap("s3", "EmptyBucket", exc) from exc

        logger.debug("Removed {} object(s) from {}", removed, bucket)
        return removed

    def _delete_keys(self, bucket: str, targets: list[dict[str, str]]) -> int:
        for start in range(0, len(targets), _DELETE_BATCH):
            batch = targets[start : start + _DELETE_BATCH]
            self._client.delete_objects(
                Bucket=bucket, Delete={"Objects": batch, "Quiet": True}
            )
        return len(targets)

    def delete_bucket(self, bucket: str) -> None:
        try:
            self._client.delete_bucket(Bucket=bucket)
        except (BotoCoreError, ClientError) as exc:
            raise wrap("s3", "DeleteBucket", exc) from exc
        logger.info("Deleted bucket {}", bucket)
