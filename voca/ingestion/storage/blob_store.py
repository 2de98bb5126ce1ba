"""Blob store backends for source-file backups.

Backends:
- MemoryBlobStore: dict-backed, used in tests and LITE mode
- S3BlobStore: AWS S3 via boto3 (calls run in the default executor)
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import boto3
from botocore.exceptions import ClientError

from voca.ingestion.errors import BlobNotFoundError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class BlobMetadata:
    """Metadata of a stored object."""

    key: str
    size: int
    updated_at: str | None = None
    content_type: str | None = None


class BaseBlobStore(ABC):
    """Abstract blob store interface."""

    @property
    @abstractmethod
    def backend(self) -> str:
        pass

    @abstractmethod
    async def get_metadata(self, key: str) -> BlobMetadata:
        """Get object metadata.

        Raises:
            BlobNotFoundError: If no object exists at key.
        """
        pass

    @abstractmethod
    async def upload_bytes(
        self,
        key: str,
        data: bytes,
        content_type: str = "text/csv",
    ) -> BlobMetadata:
        """Store (or overwrite) an object."""
        pass

    async def exists(self, key: str) -> bool:
        try:
            await self.get_metadata(key)
            return True
        except BlobNotFoundError:
            return False


class MemoryBlobStore(BaseBlobStore):
    """In-memory blob store."""

    __slots__ = ("_objects",)

    def __init__(self):
        self._objects: dict[str, tuple[bytes, BlobMetadata]] = {}

    @property
    def backend(self) -> str:
        return "memory"

    async def get_metadata(self, key: str) -> BlobMetadata:
        if key not in self._objects:
            raise BlobNotFoundError(key)
        return self._objects[key][1]

    async def upload_bytes(
        self,
        key: str,
        data: bytes,
        content_type: str = "text/csv",
    ) -> BlobMetadata:
        metadata = BlobMetadata(
            key=key,
            size=len(data),
            updated_at=datetime.now(timezone.utc).isoformat(),
            content_type=content_type,
        )
        self._objects[key] = (bytes(data), metadata)
        return metadata

    def read(self, key: str) -> bytes:
        if key not in self._objects:
            raise BlobNotFoundError(key)
        return self._objects[key][0]


# S3 error codes meaning "no such object"
_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}


class S3BlobStore(BaseBlobStore):
    """S3-backed blob store.

    Usage:
        store = S3BlobStore(bucket="voca-uploads", region="us-east-1")
        await store.upload_bytes("csv/TOEIC/Day1.csv", data)
    """

    __slots__ = ("client", "bucket", "prefix")

    def __init__(
        self,
        bucket: str,
        region: str = "us-east-1",
        prefix: str = "",
        client: Any = None,
    ):
        """Initialize S3 store.

        Args:
            bucket: Bucket name.
            region: AWS region.
            prefix: Key prefix prepended to every key.
            client: Existing boto3 S3 client.
        """
        self.bucket = bucket
        self.prefix = prefix.strip("/")
        self.client = client or boto3.client("s3", region_name=region)

    @property
    def backend(self) -> str:
        return "s3"

    def _key(self, key: str) -> str:
        return f"{self.prefix}/{key}" if self.prefix else key

    async def get_metadata(self, key: str) -> BlobMetadata:
        loop = asyncio.get_running_loop()

        def _head():
            return self.client.head_object(Bucket=self.bucket, Key=self._key(key))

        try:
            response = await loop.run_in_executor(None, _head)
        except ClientError as e:
            error_code = str(e.response.get("Error", {}).get("Code", ""))
            if error_code in _NOT_FOUND_CODES:
                raise BlobNotFoundError(key) from e
            raise

        last_modified = response.get("LastModified")
        return BlobMetadata(
            key=key,
            size=int(response.get("ContentLength", 0)),
            updated_at=last_modified.isoformat() if last_modified else None,
            content_type=response.get("ContentType"),
        )

    async def upload_bytes(
        self,
        key: str,
        data: bytes,
        content_type: str = "text/csv",
    ) -> BlobMetadata:
        loop = asyncio.get_running_loop()

        def _put():
            return self.client.put_object(
                Bucket=self.bucket,
                Key=self._key(key),
                Body=data,
                ContentType=content_type,
            )

        await loop.run_in_executor(None, _put)
        logger.debug(f"BlobStore: uploaded s3://{self.bucket}/{self._key(key)} ({len(data)} bytes)")
        return BlobMetadata(
            key=key,
            size=len(data),
            updated_at=datetime.now(timezone.utc).isoformat(),
            content_type=content_type,
        )
