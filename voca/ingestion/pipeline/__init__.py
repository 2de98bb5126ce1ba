"""Ingestion pipeline components.

Contains the main orchestrator, its per-slot stages, and progress
tracking for vocabulary ingestion.
"""

from voca.ingestion.pipeline.ingestion_models import (
    BatchOutcome,
    ConflictReport,
    CourseKind,
    CourseMetadata,
    IngestionEvent,
    IngestionEventData,
    IngestionItem,
    PhraseRecord,
    SlotResult,
    SlotStatus,
    WordRecord,
)

__all__ = [
    "BatchOutcome",
    "ConflictReport",
    "CourseKind",
    "CourseMetadata",
    "IngestionEvent",
    "IngestionEventData",
    "IngestionItem",
    "PhraseRecord",
    "SlotResult",
    "SlotStatus",
    "WordRecord",
]
