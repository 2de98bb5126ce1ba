"""Source adapters for vocabulary ingestion.

Adapters turn a raw tabular source into ordered RawRow dictionaries.

Supported adapters:
- DelimitedTextAdapter: Uploaded CSV/TSV text
- SheetGridAdapter: 2-D value grids from spreadsheet APIs
- MemoryAdapter: Rows already parsed by the caller
"""

from voca.ingestion.adapters.base_adapter import (
    AdapterStats,
    AdapterType,
    BaseSourceAdapter,
    MemoryAdapter,
)
from voca.ingestion.adapters.delimited_text_adapter import (
    DelimitedTextAdapter,
    dedupe_headers,
    parse_delimited_text,
)
from voca.ingestion.adapters.sheet_grid_adapter import (
    SheetGridAdapter,
    parse_sheet_values,
)
from voca.ingestion.adapters.google_sheets_client import GoogleSheetsClient

__all__ = [
    # Base
    "AdapterStats",
    "AdapterType",
    "BaseSourceAdapter",
    "MemoryAdapter",
    # Delimited text
    "DelimitedTextAdapter",
    "dedupe_headers",
    "parse_delimited_text",
    # Grid
    "SheetGridAdapter",
    "parse_sheet_values",
    "GoogleSheetsClient",
]
