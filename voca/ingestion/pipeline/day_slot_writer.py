"""Day slot persistence.

Replaces the contents of one (course, day) slot: clear everything,
then insert records one document at a time. Nothing is rolled back if
an insert fails midway.
"""

from __future__ import annotations

import logging

from voca.ingestion.config import CourseConfig
from voca.ingestion.errors import ClearFailedError, InsertError
from voca.ingestion.pipeline.ingestion_models import CanonicalRecord
from voca.ingestion.storage import BaseBlobStore, BaseDocumentStore

logger = logging.getLogger(__name__)


class DaySlotWriter:
    """Writes canonical records into a day slot.

    Usage:
        writer = DaySlotWriter(documents, blobs)
        await writer.clear(course, 3)
        for record in records:
            await writer.insert(course, 3, record)
    """

    __slots__ = ("documents", "blobs", "_inserted", "_cleared")

    def __init__(self, documents: BaseDocumentStore, blobs: BaseBlobStore):
        self.documents = documents
        self.blobs = blobs
        self._inserted = 0
        self._cleared = 0

    async def clear(self, course: CourseConfig, day: int) -> int:
        """Delete every document in the slot.

        Returns:
            Number of documents deleted.

        Raises:
            ClearFailedError: If listing or any deletion fails.
        """
        path = course.day_path(day)
        try:
            existing = await self.documents.list_documents(path)
            for snapshot in existing:
                await self.documents.delete_document(path, snapshot.id)
        except Exception as e:
            logger.error(f"Writer: clear failed for {path}: {e}")
            raise ClearFailedError(course.name, day, str(e)) from e

        self._cleared += len(existing)
        logger.info(f"Writer: cleared {len(existing)} document(s) from {path}")
        return len(existing)

    async def insert(self, course: CourseConfig, day: int, record: CanonicalRecord) -> str:
        """Add one record as a new document.

        Returns:
            The new document id.

        Raises:
            InsertError: If the store rejects the write.
        """
        path = course.day_path(day)
        try:
            doc_id = await self.documents.add_document(path, record.to_document())
        except Exception as e:
            raise InsertError(f"Failed to insert '{record.key}' into {path}: {e}") from e

        self._inserted += 1
        return doc_id

    async def backup_source(self, course: CourseConfig, day: int, blob: bytes) -> bool:
        """Store the raw source file. Failures are logged, never raised."""
        key = course.blob_key(day)
        try:
            await self.blobs.upload_bytes(key, blob, content_type="text/csv")
        except Exception as e:
            logger.error(f"Writer: source backup failed for {key}: {e}")
            return False

        logger.info(f"Writer: backed up source to {key} ({len(blob)} bytes)")
        return True

    def get_stats(self) -> dict[str, int]:
        return {"inserted": self._inserted, "cleared": self._cleared}
