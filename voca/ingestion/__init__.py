"""Vocabulary Batch Ingestion System.

Imports vocabulary spreadsheets (uploaded CSV files or Google Sheets
ranges) into per-course day slots, enriching each word with IPA
transcriptions and generated linguistic data.

Key Components:
- Adapters: Read CSV text, value grids and Google Sheets ranges
- Schema: Column-alias mapping onto word / phrase records
- Storage: Document store (Redis) and blob store (S3) backends
- Enrichment: Wiktionary IPA lookup and OpenAI linguistic data
- Pipeline: Conflict check, overwrite confirmation, slot replacement,
  course metadata

Example:
    from voca.ingestion import IngestionPipeline, IngestionConfig

    config = IngestionConfig.from_env()
    pipeline = IngestionPipeline(config)
    await pipeline.initialize()

    outcome = await pipeline.ingest_csv("TOEIC", 3, csv_text, confirm_overwrite=ask_user)
"""

from voca.ingestion.errors import (
    ClearFailedError,
    EmptySourceError,
    EnrichmentError,
    IngestionError,
    InsertError,
    NoPathConfiguredError,
    SheetFetchError,
    SourceFormatError,
)
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
from voca.ingestion.config.ingestion_config import (
    CourseConfig,
    EnrichmentConfig,
    IngestionConfig,
    StorageConfig,
)
from voca.ingestion.pipeline.ingestion_pipeline import IngestionPipeline
from voca.ingestion.pipeline.progress_tracker import ProgressTracker
from voca.ingestion.adapters.base_adapter import BaseSourceAdapter
from voca.ingestion.adapters.delimited_text_adapter import DelimitedTextAdapter
from voca.ingestion.adapters.sheet_grid_adapter import SheetGridAdapter
from voca.ingestion.adapters.google_sheets_client import GoogleSheetsClient

__all__ = [
    # Errors
    "ClearFailedError",
    "EmptySourceError",
    "EnrichmentError",
    "IngestionError",
    "InsertError",
    "NoPathConfiguredError",
    "SheetFetchError",
    "SourceFormatError",
    # Models
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
    # Config
    "CourseConfig",
    "EnrichmentConfig",
    "IngestionConfig",
    "StorageConfig",
    # Pipeline
    "IngestionPipeline",
    "ProgressTracker",
    # Adapters
    "BaseSourceAdapter",
    "DelimitedTextAdapter",
    "SheetGridAdapter",
    "GoogleSheetsClient",
]
