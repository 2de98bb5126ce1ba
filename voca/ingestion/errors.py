"""Ingestion error taxonomy.

Fatal errors stop processing of a single day slot and propagate to the
caller. Non-fatal errors are caught at the call site, logged, and counted
in the slot's BatchOutcome.
"""

from __future__ import annotations


class IngestionError(Exception):
    """Base class for all ingestion errors."""


class EmptySourceError(IngestionError):
    """Source has no data rows (header only or nothing at all).

    Callers treat this as "nothing to import", not as a per-row failure.
    """


class SourceFormatError(IngestionError):
    """Source bytes could not be decoded or parsed as delimited text."""


class ClearFailedError(IngestionError):
    """Deleting the previous contents of a day slot failed.

    Raised before any new document is written so a slot never mixes
    records from two ingestion runs.
    """

    def __init__(self, course: str, day: int, reason: str = ""):
        self.course = course
        self.day = day
        self.reason = reason
        message = f"Failed to clear existing data for {course} Day {day}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class NoPathConfiguredError(IngestionError):
    """Course identifier has no known storage path.

    Logged and degraded to a no-op; never raised across the public API.
    """

    def __init__(self, course: str):
        self.course = course
        super().__init__(f"No path configuration for course: {course}")


class InsertError(IngestionError):
    """A single record could not be persisted. Counted in fail_count."""


class EnrichmentError(IngestionError):
    """Phonetic lookup or linguistic generation failed for one record."""


class SheetFetchError(IngestionError):
    """Remote spreadsheet retrieval returned an error payload."""


class BlobNotFoundError(IngestionError):
    """Blob store has no object at the requested key."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Blob not found: {key}")
