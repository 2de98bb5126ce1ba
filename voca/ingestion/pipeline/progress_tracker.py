"""Progress tracking for ingestion pipeline.

Emits events for display layers and other downstream consumers.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from voca.ingestion.pipeline.ingestion_models import (
    BatchOutcome,
    IngestionEvent,
    IngestionEventData,
    SlotStatus,
)

logger = logging.getLogger(__name__)


EventCallback = Callable[[IngestionEventData], None]


class ProgressTracker:
    """Tracks progress and emits events during ingestion.

    Features:
    - Event emission to registered listeners
    - Stage messages per day slot ("[2/5] Day 3: Clearing existing data...")
    - Insert progress every N records
    - Batch statistics
    """

    __slots__ = (
        "_course",
        "_item_index",
        "_item_total",
        "_day",
        "_records_total",
        "_processed",
        "_completed",
        "_skipped",
        "_failed",
        "_listeners",
        "_emit_interval",
    )

    def __init__(
        self,
        emit_interval: int = 10,
    ):
        """Initialize progress tracker.

        Args:
            emit_interval: Emit insert progress every N records.
        """
        self._course: str | None = None
        self._item_index = 1
        self._item_total = 1
        self._day: int | None = None
        self._records_total = 0
        self._processed = 0
        self._completed = 0
        self._skipped = 0
        self._failed = 0
        self._listeners: list[EventCallback] = []
        self._emit_interval = max(1, emit_interval)

    def add_listener(self, callback: EventCallback) -> None:
        """Register event listener.

        Args:
            callback: Function to call with event data.
        """
        self._listeners.append(callback)

    def remove_listener(self, callback: EventCallback) -> None:
        """Remove event listener.

        Args:
            callback: Listener to remove.
        """
        if callback in self._listeners:
            self._listeners.remove(callback)

    def start_batch(self, course: str, total_items: int) -> None:
        """Start tracking a new batch of day slots.

        Args:
            course: Course name.
            total_items: Number of day slots in the batch.
        """
        self._course = course
        self._item_total = max(1, total_items)
        self._item_index = 1
        self._completed = 0
        self._skipped = 0
        self._failed = 0

        self._emit(
            IngestionEvent.BATCH_STARTED,
            detail=f"Starting {total_items} item(s)",
            details={"total_items": total_items},
        )

        logger.info(f"Started batch for {course} with {total_items} item(s)")

    def start_slot(self, day: int, item_index: int = 1) -> None:
        """Start tracking one day slot."""
        self._day = day
        self._item_index = item_index
        self._records_total = 0
        self._processed = 0

        self._emit(IngestionEvent.SLOT_STARTED, stage=SlotStatus.PENDING)

    def stage(self, status: SlotStatus, detail: str) -> None:
        """Report a stage transition for the current slot."""
        self._emit(IngestionEvent.SLOT_STAGE, stage=status, detail=detail)
        logger.info(self._message(detail))

    def start_writing(self, total_records: int) -> None:
        self._records_total = total_records
        self._processed = 0
        self.stage(SlotStatus.WRITING, f"Uploading {total_records} records...")

    def record_processed(self) -> None:
        """Record that one record was handled (inserted or failed)."""
        self._processed += 1

        if self._processed % self._emit_interval == 0:
            self._emit(
                IngestionEvent.SLOT_PROGRESS,
                stage=SlotStatus.WRITING,
                detail=f"Uploading {self._processed}/{self._records_total}...",
            )

    def slot_skipped(self) -> None:
        self._skipped += 1
        self._emit(IngestionEvent.SLOT_SKIPPED, stage=SlotStatus.SKIPPED, detail="Skipped by user")
        logger.info(self._message("Skipped by user"))

    def slot_completed(self, outcome: BatchOutcome) -> None:
        self._completed += 1
        self._emit(
            IngestionEvent.SLOT_COMPLETED,
            stage=SlotStatus.DONE,
            detail=outcome.summary,
            details=outcome.to_dict(),
        )
        logger.info(self._message(outcome.summary))

    def slot_failed(self, error: str) -> None:
        self._failed += 1
        self._emit(
            IngestionEvent.SLOT_FAILED,
            stage=SlotStatus.FAILED,
            detail=f"Failed: {error}",
            details={"error": error},
        )
        logger.error(self._message(f"Failed: {error}"))

    def complete_batch(self, outcome: BatchOutcome) -> None:
        """Complete the current batch."""
        self._emit(
            IngestionEvent.BATCH_COMPLETED,
            detail=outcome.summary,
            details={
                **outcome.to_dict(),
                "completed": self._completed,
                "skipped": self._skipped,
                "failed": self._failed,
            },
        )

        logger.info(
            f"Completed batch for {self._course}: {outcome.summary} "
            f"({self._completed} done, {self._skipped} skipped, {self._failed} failed)"
        )

    @property
    def progress(self) -> float:
        """Get insert progress of the current slot as fraction (0.0-1.0)."""
        if self._records_total == 0:
            return 0.0
        return self._processed / self._records_total

    def get_stats(self) -> dict[str, Any]:
        """Get current statistics."""
        return {
            "course": self._course,
            "day": self._day,
            "item_index": self._item_index,
            "item_total": self._item_total,
            "records_total": self._records_total,
            "processed": self._processed,
            "progress": self.progress,
            "completed": self._completed,
            "skipped": self._skipped,
            "failed": self._failed,
        }

    def _message(self, detail: str) -> str:
        return f"[{self._item_index}/{self._item_total}] Day {self._day}: {detail}"

    def _emit(
        self,
        event: IngestionEvent,
        stage: SlotStatus | None = None,
        detail: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        """Emit event to all listeners.

        Args:
            event: Event type.
            stage: Slot stage, if the event concerns a slot.
            detail: Display text.
            details: Additional details.
        """
        event_data = IngestionEventData(
            event=event,
            course=self._course,
            day=self._day,
            stage=stage,
            detail=detail,
            item_index=self._item_index,
            item_total=self._item_total,
            records_processed=self._processed,
            records_total=self._records_total,
            details=details or {},
        )

        for listener in self._listeners:
            try:
                listener(event_data)
            except Exception as e:
                logger.warning(f"Event listener error: {e}")
