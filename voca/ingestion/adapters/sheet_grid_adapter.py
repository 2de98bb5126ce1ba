"""Adapter for 2-D value grids.

Spreadsheet APIs return a list of rows where trailing empty cells are
omitted, so rows are often shorter than the header row.
"""

from __future__ import annotations

import csv
import io
import logging
from typing import Any, AsyncIterator, Sequence

from voca.ingestion.adapters.base_adapter import AdapterType, BaseSourceAdapter
from voca.ingestion.errors import EmptySourceError
from voca.ingestion.pipeline.ingestion_models import RawRow

logger = logging.getLogger(__name__)


def parse_sheet_values(values: Sequence[Sequence[Any]] | None) -> list[RawRow]:
    """Convert a value grid into rows keyed by the first row's headers.

    Missing trailing cells (and None cells) become "". Cells beyond the
    header width are ignored.

    Args:
        values: Grid of cell values, first row = headers.

    Returns:
        One RawRow per data row, in order.

    Raises:
        EmptySourceError: If the grid has fewer than two rows.
    """
    if not values or len(values) < 2:
        raise EmptySourceError("No data found or only header row exists.")

    headers = [str(h).strip() if h is not None else "" for h in values[0]]
    rows: list[RawRow] = []

    for raw in values[1:]:
        row: RawRow = {}
        for index, header in enumerate(headers):
            cell = raw[index] if index < len(raw) else None
            row[header] = "" if cell is None else str(cell)
        rows.append(row)

    return rows


class SheetGridAdapter(BaseSourceAdapter):
    """Adapter for a rectangular (or ragged) grid of cell values.

    Features:
    - First row is the header row
    - Short rows padded with empty strings
    - EmptySourceError for header-only grids
    """

    __slots__ = ("_values", "_source_name")

    def __init__(
        self,
        values: Sequence[Sequence[Any]] | None,
        source_name: str = "sheet",
    ):
        """Initialize grid adapter.

        Args:
            values: Grid of cell values.
            source_name: Label for logging (e.g. spreadsheet id).
        """
        super().__init__("sheet_grid")
        self._values = values or []
        self._source_name = source_name

    @property
    def adapter_type(self) -> AdapterType:
        return AdapterType.SHEET_GRID

    @property
    def header(self) -> list[str]:
        if not self._values:
            return []
        return [str(h).strip() for h in self._values[0]]

    async def read_stream(self) -> AsyncIterator[RawRow]:
        """Yield grid rows as RawRows.

        Raises:
            EmptySourceError: If the grid has fewer than two rows.
        """
        try:
            rows = parse_sheet_values(self._values)
        except EmptySourceError as e:
            self._stats.record_error(str(e))
            raise

        width = len(self.header)
        for raw, row in zip(self._values[1:], rows):
            self._stats.record_read(padded=len(raw) < width)
            yield row

        logger.debug(f"Read {len(rows)} rows from grid {self._source_name}")

    async def count_rows(self) -> int:
        return max(len(self._values) - 1, 0)

    def to_csv_bytes(self) -> bytes:
        """Render the grid as CSV for source backups."""
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        for raw in self._values:
            writer.writerow(["" if cell is None else cell for cell in raw])
        return buffer.getvalue().encode("utf-8")
