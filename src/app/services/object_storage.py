"""Object Storage Interface

Blob storage keyed by (bucket, object path). Used to keep generated
invoice artifacts.
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional


class ObjectStorageError(Exception):
    """Raised when the object store rejects or fails an operation"""


class ObjectStorage(ABC):
    """
    Service interface for object storage

    Implementations raise ObjectStorageError on any backend failure.
    """

    @abstractmethod
    async def upload(
        self,
        bucket: str,
        path: str,
        data: bytes,
        content_type: str,
        metadata: Optional[Dict[str, str]] = None,
    ) -> None:
        """
        Store a buffer, replacing any object already at this path

        Args:
            bucket: Bucket name
            path: Object path inside the bucket
            data: Object content
            content_type: MIME type of the content
            metadata: Headers stored with the object
        """
        pass

    @abstractmethod
    async def download(self, bucket: str, path: str) -> bytes:
        """
        Fetch an object and return its full content

        Raises:
            ObjectStorageError: object missing or backend failure
        """
        pass

    @abstractmethod
    async def exists(self, bucket: str, path: str) -> bool:
        pass

    @abstractmethod
    async def remove(self, bucket: str, path: str) -> None:
        pass
