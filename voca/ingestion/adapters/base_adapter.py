"""Base adapter interface for tabular sources.

Abstract base class for all source adapters with a consistent
interface for connecting, reading rows, and tracking statistics.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, AsyncIterator

from voca.ingestion.pipeline.ingestion_models import RawRow


class AdapterType(str, Enum):
    """Types of source adapters."""

    DELIMITED_TEXT = "delimited_text"  # Uploaded CSV / TSV blob
    SHEET_GRID = "sheet_grid"          # 2-D value grid (spreadsheet API)
    MEMORY = "memory"                  # Pre-parsed rows


@dataclass(slots=True)
class AdapterStats:
    """Statistics for adapter operations."""

    rows_read: int = 0
    rows_padded: int = 0
    blank_rows_skipped: int = 0
    errors: int = 0
    bytes_read: int = 0
    last_read_time: str | None = None
    last_error: str | None = None

    def record_read(self, padded: bool = False) -> None:
        """Record a successful row read."""
        self.rows_read += 1
        if padded:
            self.rows_padded += 1
        self.last_read_time = datetime.now(timezone.utc).isoformat()

    def record_blank(self) -> None:
        self.blank_rows_skipped += 1

    def record_error(self, error: str) -> None:
        """Record an error."""
        self.errors += 1
        self.last_error = error
        self.last_read_time = datetime.now(timezone.utc).isoformat()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "rows_read": self.rows_read,
            "rows_padded": self.rows_padded,
            "blank_rows_skipped": self.blank_rows_skipped,
            "errors": self.errors,
            "bytes_read": self.bytes_read,
            "last_read_time": self.last_read_time,
            "last_error": self.last_error,
        }


class BaseSourceAdapter(ABC):
    """Abstract base class for tabular source adapters.

    Adapters handle:
    - Turning a raw source into ordered RawRow dictionaries
    - Header handling (first row = column labels)
    - Leniency for ragged rows
    - Statistics

    Implementations must:
    - read_stream(): Yield RawRows in source order
    - adapter_type: Report adapter type
    """

    __slots__ = ("_name", "_stats", "_connected")

    def __init__(self, name: str):
        """Initialize adapter.

        Args:
            name: Adapter name for identification.
        """
        self._name = name
        self._stats = AdapterStats()
        self._connected = False

    @property
    def name(self) -> str:
        """Get adapter name."""
        return self._name

    @property
    @abstractmethod
    def adapter_type(self) -> AdapterType:
        """Return adapter type identifier."""
        pass

    @property
    def stats(self) -> AdapterStats:
        """Get adapter statistics."""
        return self._stats

    @property
    def connected(self) -> bool:
        return self._connected

    async def connect(self) -> bool:
        """Prepare the source. In-memory sources always succeed."""
        self._connected = True
        return True

    async def disconnect(self) -> None:
        """Release source resources."""
        self._connected = False

    @abstractmethod
    def read_stream(self) -> AsyncIterator[RawRow]:
        """Yield rows from the source in order.

        Raises:
            EmptySourceError: If the source holds no data rows.
        """
        pass

    async def read_all(self) -> list[RawRow]:
        """Read every row into a list."""
        return [row async for row in self.read_stream()]

    async def count_rows(self) -> int:
        """Count data rows. Default implementation reads the stream."""
        count = 0
        async for _ in self.read_stream():
            count += 1
        return count

    def get_info(self) -> dict[str, Any]:
        """Get adapter information."""
        return {
            "name": self._name,
            "type": self.adapter_type.value,
            "connected": self._connected,
            "stats": self._stats.to_dict(),
        }


class MemoryAdapter(BaseSourceAdapter):
    """Adapter over rows that were already parsed by the caller."""

    __slots__ = ("_rows",)

    def __init__(self, rows: list[RawRow] | None = None):
        super().__init__("memory_adapter")
        self._rows = list(rows or [])

    @property
    def adapter_type(self) -> AdapterType:
        return AdapterType.MEMORY

    async def read_stream(self) -> AsyncIterator[RawRow]:
        """Yield rows from memory."""
        for row in self._rows:
            self._stats.record_read()
            yield row

    def add_rows(self, rows: list[RawRow]) -> None:
        self._rows.extend(rows)

    async def count_rows(self) -> int:
        return len(self._rows)
