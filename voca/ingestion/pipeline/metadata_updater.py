"""Course metadata maintenance.

Keeps courseMetadata/{courseId}.totalDays equal to the highest day ever
ingested for the course. The counter never decreases.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from voca.ingestion.config import IngestionConfig
from voca.ingestion.errors import NoPathConfiguredError
from voca.ingestion.pipeline.ingestion_models import CourseMetadata
from voca.ingestion.storage import BaseDocumentStore

logger = logging.getLogger(__name__)


class MetadataUpdater:
    """Monotonic totalDays counter per course."""

    __slots__ = ("documents", "config")

    def __init__(self, documents: BaseDocumentStore, config: IngestionConfig):
        self.documents = documents
        self.config = config

    def _document_path(self, course_id: str) -> str:
        return f"{self.config.storage.metadata_collection}/{course_id}"

    async def update(self, course: str, day: int) -> int | None:
        """Raise totalDays to day if it is higher.

        Args:
            course: Course name or course id.
            day: Day just ingested.

        Returns:
            totalDays after the update, or None for an unknown course.

        Raises:
            Any store error, unchanged.
        """
        config = self.config.get_course(course)
        if config is None or not config.has_path:
            logger.warning(str(NoPathConfiguredError(course)))
            return None

        path = self._document_path(config.course_id)
        now = datetime.now(timezone.utc).isoformat()
        snapshot = await self.documents.get_document(path)

        if not snapshot.exists:
            metadata = CourseMetadata(course_id=config.course_id, total_days=day, last_updated=now)
            await self.documents.set_document(path, metadata.to_document())
            logger.info(f"Metadata: created {path} with totalDays={day}")
            return day

        current = CourseMetadata.from_document(config.course_id, snapshot.data)
        if day > current.total_days:
            await self.documents.set_document(
                path,
                {"totalDays": day, "lastUpdated": now},
                merge=True,
            )
            logger.info(f"Metadata: {path} totalDays {current.total_days} -> {day}")
            return day

        return current.total_days

    async def get_metadata(self, course: str) -> CourseMetadata | None:
        """Read a course's metadata. None if unknown or never written."""
        config = self.config.get_course(course)
        if config is None:
            return None
        snapshot = await self.documents.get_document(self._document_path(config.course_id))
        if not snapshot.exists:
            return None
        return CourseMetadata.from_document(config.course_id, snapshot.data)

    async def get_total_days(self, course: str) -> int:
        metadata = await self.get_metadata(course)
        return metadata.total_days if metadata else 0
