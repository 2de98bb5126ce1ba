"""Adapter for uploaded delimited-text files (CSV / TSV).

Quoting and multi-line fields are handled by the csv module. Header
labels are made unique the same way spreadsheet CSV exports are usually
parsed, so a blank header row yields "", "_1", "_2", ... and positional
aliases keep working.
"""

from __future__ import annotations

import csv
import io
import logging
from typing import AsyncIterator

from voca.ingestion.adapters.base_adapter import AdapterType, BaseSourceAdapter
from voca.ingestion.errors import EmptySourceError, SourceFormatError
from voca.ingestion.pipeline.ingestion_models import RawRow

logger = logging.getLogger(__name__)


def dedupe_headers(headers: list[str]) -> list[str]:
    """Rename repeated header labels to label_1, label_2, ...

    Args:
        headers: Trimmed header labels in column order.

    Returns:
        Unique labels, first occurrence unchanged.
    """
    seen: set[str] = set()
    counts: dict[str, int] = {}
    result: list[str] = []

    for header in headers:
        name = header
        if name in seen:
            count = counts.get(header, 0)
            while name in seen:
                count += 1
                name = f"{header}_{count}"
            counts[header] = count
        seen.add(name)
        result.append(name)

    return result


def parse_delimited_text(text: str, delimiter: str = ",") -> tuple[list[str], list[RawRow], int]:
    """Parse delimited text into header labels and rows.

    Args:
        text: Raw file contents.
        delimiter: Field delimiter.

    Returns:
        Tuple of (headers, rows, blank_rows_skipped).

    Raises:
        SourceFormatError: If the csv module rejects the text.
    """
    if text.startswith("\ufeff"):
        text = text[1:]

    reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter)

    headers: list[str] | None = None
    rows: list[RawRow] = []
    blank = 0

    try:
        for raw in reader:
            if headers is None:
                if not raw:
                    continue
                headers = dedupe_headers([h.strip() for h in raw])
                continue

            if not raw or all(not cell.strip() for cell in raw):
                blank += 1
                continue

            row: RawRow = {}
            for index, header in enumerate(headers):
                row[header] = raw[index] if index < len(raw) else ""
            rows.append(row)
    except csv.Error as e:
        raise SourceFormatError(f"Malformed delimited text at line {reader.line_num}: {e}") from e

    return headers or [], rows, blank


class DelimitedTextAdapter(BaseSourceAdapter):
    """Adapter for a delimited-text blob.

    Features:
    - Standard quoting via the csv module
    - Blank lines skipped
    - Duplicate / empty headers made unique
    - Original bytes kept for source backups
    """

    __slots__ = ("_text", "_delimiter", "_source_name", "_headers")

    def __init__(
        self,
        text: str | bytes,
        delimiter: str = ",",
        source_name: str = "upload.csv",
    ):
        """Initialize delimited text adapter.

        Args:
            text: File contents (bytes are decoded as UTF-8).
            delimiter: Field delimiter.
            source_name: Label for logging.

        Raises:
            SourceFormatError: If bytes are not valid UTF-8.
        """
        super().__init__("delimited_text")
        if isinstance(text, bytes):
            self._stats.bytes_read = len(text)
            try:
                text = text.decode("utf-8-sig")
            except UnicodeDecodeError as e:
                raise SourceFormatError(f"{source_name} is not valid UTF-8: {e}") from e
        else:
            self._stats.bytes_read = len(text.encode("utf-8"))
        self._text = text
        self._delimiter = delimiter
        self._source_name = source_name
        self._headers: list[str] = []

    @property
    def adapter_type(self) -> AdapterType:
        return AdapterType.DELIMITED_TEXT

    @property
    def headers(self) -> list[str]:
        """Header labels from the last read."""
        return list(self._headers)

    @property
    def source_bytes(self) -> bytes:
        return self._text.encode("utf-8")

    async def read_stream(self) -> AsyncIterator[RawRow]:
        """Yield parsed rows.

        Raises:
            EmptySourceError: If the text holds no data rows.
        """
        headers, rows, blank = parse_delimited_text(self._text, self._delimiter)
        self._headers = headers

        for _ in range(blank):
            self._stats.record_blank()

        if not rows:
            message = f"No data rows found in {self._source_name}"
            self._stats.record_error(message)
            raise EmptySourceError(message)

        for row in rows:
            self._stats.record_read()
            yield row

        logger.debug(
            f"Parsed {len(rows)} rows from {self._source_name} "
            f"({blank} blank lines skipped)"
        )
