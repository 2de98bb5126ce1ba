"""Existing-data detection for a day slot.

Checks the blob store for a prior source backup and the document store
for prior records. Both checks fail open: an unreachable store is
reported as holding no data.
"""

from __future__ import annotations

import logging

from voca.ingestion.config import CourseConfig
from voca.ingestion.errors import BlobNotFoundError
from voca.ingestion.pipeline.ingestion_models import ConflictReport
from voca.ingestion.storage import BaseBlobStore, BaseDocumentStore

logger = logging.getLogger(__name__)


class ConflictDetector:
    """Checks both stores for data already present in a day slot."""

    __slots__ = ("documents", "blobs")

    def __init__(self, documents: BaseDocumentStore, blobs: BaseBlobStore):
        self.documents = documents
        self.blobs = blobs

    async def detect(self, course: CourseConfig, day: int) -> ConflictReport:
        """Check both stores.

        Args:
            course: Course configuration (must have a storage path).
            day: Day number.

        Returns:
            ConflictReport with one flag per store.
        """
        return ConflictReport(
            blob_exists=await self._blob_exists(course, day),
            documents_exist=await self._documents_exist(course, day),
        )

    async def _blob_exists(self, course: CourseConfig, day: int) -> bool:
        key = course.blob_key(day)
        try:
            await self.blobs.get_metadata(key)
            return True
        except BlobNotFoundError:
            return False
        except Exception as e:
            logger.warning(f"ConflictDetector: blob check failed for {key}, assuming none: {e}")
            return False

    async def _documents_exist(self, course: CourseConfig, day: int) -> bool:
        path = course.day_path(day)
        try:
            documents = await self.documents.list_documents(path)
        except Exception as e:
            logger.warning(f"ConflictDetector: document check failed for {path}, assuming none: {e}")
            return False
        return len(documents) > 0
