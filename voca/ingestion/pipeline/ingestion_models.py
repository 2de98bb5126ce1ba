"""Ingestion pipeline data models.

Core data structures for the vocabulary ingestion system including
canonical records, slot statuses, batch outcomes, and progress events.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Union


RawRow = dict[str, str]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CourseKind(str, Enum):
    """Canonical record variant produced for a course."""

    WORD = "word"      # Single headwords, enrichment eligible
    PHRASE = "phrase"  # Collocations / multi-word expressions


class SlotStatus(str, Enum):
    """State of one day slot as it moves through the pipeline."""

    PENDING = "pending"
    CHECKING_CONFLICTS = "checking_conflicts"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    SKIPPED = "skipped"                  # Overwrite declined
    CLEARING = "clearing"
    WRITING = "writing"                  # Enrich + insert per record
    UPDATING_METADATA = "updating_metadata"
    DONE = "done"
    FAILED = "failed"                    # EmptySourceError / ClearFailedError

    @property
    def is_terminal(self) -> bool:
        return self in (SlotStatus.DONE, SlotStatus.SKIPPED, SlotStatus.FAILED)


class IngestionEvent(str, Enum):
    """Events emitted during ingestion processing."""

    BATCH_STARTED = "batch_started"
    BATCH_COMPLETED = "batch_completed"
    SLOT_STARTED = "slot_started"
    SLOT_STAGE = "slot_stage"
    SLOT_PROGRESS = "slot_progress"
    SLOT_SKIPPED = "slot_skipped"
    SLOT_COMPLETED = "slot_completed"
    SLOT_FAILED = "slot_failed"


@dataclass(slots=True)
class WordRecord:
    """Canonical record for word-based courses.

    Attributes:
        headword: The vocabulary word.
        meaning: Definition supplied by the source.
        translation: Optional translation.
        pronunciation: IPA transcription, from the source or phonetic lookup.
        example: Example sentence.
        part_of_speech: Generated part of speech.
        synonyms: Generated synonyms.
        antonyms: Generated antonyms.
        related_words: Generated related words.
        word_forms: Generated word forms keyed by form name.
        created_at: When the record was built.
    """

    headword: str
    meaning: str = ""
    translation: str = ""
    pronunciation: str = ""
    example: str = ""
    part_of_speech: str = ""
    synonyms: list[str] = field(default_factory=list)
    antonyms: list[str] = field(default_factory=list)
    related_words: list[str] = field(default_factory=list)
    word_forms: dict[str, str] | None = None
    created_at: datetime = field(default_factory=_utcnow)

    @property
    def key(self) -> str:
        return self.headword

    @property
    def is_single_token(self) -> bool:
        """Check if headword is a single whitespace-free token."""
        return bool(self.headword) and not any(c.isspace() for c in self.headword)

    @property
    def has_linguistic_data(self) -> bool:
        return bool(
            self.part_of_speech
            or self.synonyms
            or self.antonyms
            or self.related_words
            or self.word_forms
        )

    def to_document(self) -> dict[str, Any]:
        """Convert to the stored document shape."""
        doc: dict[str, Any] = {
            "word": self.headword,
            "meaning": self.meaning,
            "translation": self.translation,
            "pronunciation": self.pronunciation,
            "example": self.example,
            "createdAt": self.created_at,
        }
        if self.part_of_speech:
            doc["partOfSpeech"] = self.part_of_speech
        if self.synonyms:
            doc["synonyms"] = list(self.synonyms)
        if self.antonyms:
            doc["antonyms"] = list(self.antonyms)
        if self.related_words:
            doc["relatedWords"] = list(self.related_words)
        if self.word_forms:
            doc["wordForms"] = dict(self.word_forms)
        return doc

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "headword": self.headword,
            "meaning": self.meaning,
            "translation": self.translation,
            "pronunciation": self.pronunciation,
            "example": self.example,
            "part_of_speech": self.part_of_speech,
            "synonyms": self.synonyms,
            "antonyms": self.antonyms,
            "related_words": self.related_words,
            "word_forms": self.word_forms,
            "created_at": self.created_at.isoformat(),
        }


@dataclass(slots=True)
class PhraseRecord:
    """Canonical record for collocation courses. Never enriched."""

    phrase: str
    meaning: str = ""
    explanation: str = ""
    example: str = ""
    translation: str = ""
    created_at: datetime = field(default_factory=_utcnow)

    @property
    def key(self) -> str:
        return self.phrase

    def to_document(self) -> dict[str, Any]:
        """Convert to the stored document shape."""
        return {
            "collocation": self.phrase,
            "meaning": self.meaning,
            "explanation": self.explanation,
            "example": self.example,
            "translation": self.translation,
            "createdAt": self.created_at,
        }

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "phrase": self.phrase,
            "meaning": self.meaning,
            "explanation": self.explanation,
            "example": self.example,
            "translation": self.translation,
            "created_at": self.created_at.isoformat(),
        }


CanonicalRecord = Union[WordRecord, PhraseRecord]


@dataclass(slots=True)
class CourseMetadata:
    """Per-course counter of the highest day holding data."""

    course_id: str
    total_days: int = 0
    last_updated: str | None = None

    @classmethod
    def from_document(cls, course_id: str, data: dict[str, Any]) -> CourseMetadata:
        return cls(
            course_id=data.get("courseId", course_id),
            total_days=int(data.get("totalDays", 0) or 0),
            last_updated=data.get("lastUpdated"),
        )

    def to_document(self) -> dict[str, Any]:
        return {
            "courseId": self.course_id,
            "totalDays": self.total_days,
            "lastUpdated": self.last_updated,
        }


@dataclass(slots=True)
class ConflictReport:
    """Result of probing both stores for an existing day slot."""

    blob_exists: bool = False
    documents_exist: bool = False

    @property
    def has_conflict(self) -> bool:
        return self.blob_exists or self.documents_exist

    @property
    def description(self) -> str:
        """Human-readable name of the store(s) holding data."""
        if self.blob_exists and self.documents_exist:
            return "both blob store and document store"
        if self.blob_exists:
            return "blob store"
        if self.documents_exist:
            return "document store"
        return "no store"

    def to_dict(self) -> dict[str, Any]:
        return {
            "blob_exists": self.blob_exists,
            "documents_exist": self.documents_exist,
            "has_conflict": self.has_conflict,
        }


@dataclass(slots=True)
class BatchOutcome:
    """Counters for one day slot's processing.

    fail_count covers persistence failures only. A record missing
    enrichment is still a persisted record and is counted in
    enrichment_fail_count instead.
    """

    success_count: int = 0
    fail_count: int = 0
    enriched_count: int = 0
    enrichment_fail_count: int = 0
    skipped_rows: int = 0

    @property
    def total(self) -> int:
        return self.success_count + self.fail_count

    @property
    def summary(self) -> str:
        return f"Successfully uploaded: {self.success_count}, Failed: {self.fail_count}"

    def merge(self, other: BatchOutcome) -> None:
        """Accumulate another outcome into this one."""
        self.success_count += other.success_count
        self.fail_count += other.fail_count
        self.enriched_count += other.enriched_count
        self.enrichment_fail_count += other.enrichment_fail_count
        self.skipped_rows += other.skipped_rows

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "success_count": self.success_count,
            "fail_count": self.fail_count,
            "enriched_count": self.enriched_count,
            "enrichment_fail_count": self.enrichment_fail_count,
            "skipped_rows": self.skipped_rows,
        }


@dataclass(slots=True)
class SlotResult:
    """Terminal result of one batch item."""

    course: str
    day: int
    status: SlotStatus = SlotStatus.PENDING
    outcome: BatchOutcome = field(default_factory=BatchOutcome)
    conflict: ConflictReport | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "course": self.course,
            "day": self.day,
            "status": self.status.value,
            "outcome": self.outcome.to_dict(),
            "conflict": self.conflict.to_dict() if self.conflict else None,
            "error": self.error,
        }


@dataclass(slots=True)
class IngestionItem:
    """One day slot of a caller-supplied batch.

    Exactly one source should be set: pre-parsed rows, delimited text,
    a value grid, or a spreadsheet id.
    """

    day: int
    rows: list[RawRow] | None = None
    csv_text: str | bytes | None = None
    grid: list[list[str]] | None = None
    sheet_id: str | None = None
    sheet_range: str | None = None  # None = config.default_sheet_range
    source_blob: bytes | None = None


@dataclass(slots=True)
class IngestionEventData:
    """Data payload for ingestion progress events.

    Used by ProgressTracker to emit events to registered listeners.
    """

    event: IngestionEvent
    course: str | None = None
    day: int | None = None
    stage: SlotStatus | None = None
    detail: str = ""
    item_index: int = 1
    item_total: int = 1
    records_processed: int = 0
    records_total: int = 0
    details: dict[str, Any] = field(default_factory=dict)
    timestamp: str = field(default_factory=lambda: _utcnow().isoformat())

    @property
    def message(self) -> str:
        """Progress line in the form "[1/3] Day 5: Clearing existing data..."."""
        prefix = f"[{self.item_index}/{self.item_total}] Day {self.day}: "
        return f"{prefix}{self.detail}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "event": self.event.value,
            "course": self.course,
            "day": self.day,
            "stage": self.stage.value if self.stage else None,
            "detail": self.detail,
            "message": self.message,
            "item_index": self.item_index,
            "item_total": self.item_total,
            "records_processed": self.records_processed,
            "records_total": self.records_total,
            "details": self.details,
            "timestamp": self.timestamp,
        }
