"""MinIO Object Storage Implementation

Wraps the blocking minio client; calls run in a worker thread so the event
loop is not held during transfers.
"""

import asyncio
import logging
from io import BytesIO
from typing import Dict, Optional

from minio import Minio
from minio.error import S3Error

from src.app.services.object_storage import ObjectStorage, ObjectStorageError

logger = logging.getLogger(__name__)

MISSING_OBJECT_CODES = {"NoSuchKey", "NoSuchObject", "ResourceNotFound"}


class MinioObjectStorage(ObjectStorage):
    """
    MinIO / S3 implementation of ObjectStorage

    Buckets are created on first upload when missing.
    """

    def __init__(self, client: Minio):
        self.client = client
        self._known_buckets = set()

    @classmethod
    def from_config(cls, config) -> "MinioObjectStorage":
        return cls(
            Minio(
                endpoint=config.MINIO_ENDPOINT,
                access_key=config.MINIO_ACCESS_KEY,
                secret_key=config.MINIO_SECRET_KEY,
                secure=bool(config.MINIO_SECURE),
            )
        )

    def _ensure_bucket(self, bucket: str) -> None:
        if bucket in self._known_buckets:
            return
        if not self.client.bucket_exists(bucket_name=bucket):
            self.client.make_bucket(bucket_name=bucket)
            logger.info(f"Created bucket {bucket}")
        self._known_buckets.add(bucket)

    def _upload(self, bucket, path, data, content_type, metadata):
        self._ensure_bucket(bucket)
        self.client.put_object(
            bucket_name=bucket,
            object_name=path,
            data=BytesIO(data),
            length=len(data),
            content_type=content_type,
            metadata=metadata,
        )

    def _download(self, bucket, path) -> bytes:
        response = self.client.get_object(bucket_name=bucket, object_name=path)
        try:
            return response.read()
        finally:
            response.close()
            response.release_conn()

    def _exists(self, bucket, path) -> bool:
        try:
            self.client.stat_object(bucket_name=bucket, object_name=path)
            return True
        except S3Error as e:
            if e.code in MISSING_OBJECT_CODES or e.code == "NoSuchBucket":
                return False
            raise

    async def upload(
        self,
        bucket: str,
        path: str,
        data: bytes,
        content_type: str,
        metadata: Optional[Dict[str, str]] = None,
    ) -> None:
        try:
            await asyncio.to_thread(self._upload, bucket, path, data, content_type, metadata)
        except Exception as e:
            raise ObjectStorageError(f"Upload of {bucket}/{path} failed: {e}") from e

    async def download(self, bucket: str, path: str) -> bytes:
        try:
            return await asyncio.to_thread(self._download, bucket, path)
        except Exception as e:
            raise ObjectStorageError(f"Download of {bucket}/{path} failed: {e}") from e

    async def exists(self, bucket: str, path: str) -> bool:
        try:
            return await asyncio.to_thread(self._exists, bucket, path)
        except Exception as e:
            raise ObjectStorageError(f"Existence check of {bucket}/{path} failed: {e}") from e

    async def remove(self, bucket: str, path: str) -> None:
        try:
            await asyncio.to_thread(
                self.client.remove_object, bucket_name=bucket, object_name=path
            )
        except Exception as e:
            raise ObjectStorageError(f"Removal of {bucket}/{path} failed: {e}") from e
