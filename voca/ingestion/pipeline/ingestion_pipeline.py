"""Main ingestion pipeline.

Orchestrates the vocabulary import flow for one course:
Source Adapter -> Field Normalizer -> Conflict Detector -> Overwrite Gate
-> Writer.clear -> (Enrichment -> Writer.insert) per record -> Metadata Updater
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

from voca.ingestion.adapters import (
    DelimitedTextAdapter,
    GoogleSheetsClient,
    MemoryAdapter,
    SheetGridAdapter,
)
from voca.ingestion.config import CourseConfig, IngestionConfig
from voca.ingestion.enrichment import (
    BaseLinguisticService,
    BasePhoneticService,
    EnrichmentStage,
    OpenAILinguisticService,
    WiktionaryPhoneticService,
)
from voca.ingestion.errors import (
    EmptySourceError,
    IngestionError,
    InsertError,
    NoPathConfiguredError,
)
from voca.ingestion.pipeline.conflict_detector import ConflictDetector
from voca.ingestion.pipeline.day_slot_writer import DaySlotWriter
from voca.ingestion.pipeline.ingestion_models import (
    BatchOutcome,
    IngestionItem,
    RawRow,
    SlotResult,
    SlotStatus,
)
from voca.ingestion.pipeline.metadata_updater import MetadataUpdater
from voca.ingestion.pipeline.overwrite_gate import OverwriteConfirmer, OverwriteGate
from voca.ingestion.pipeline.progress_tracker import EventCallback, ProgressTracker
from voca.ingestion.schema import FieldNormalizer
from voca.ingestion.storage import (
    BaseBlobStore,
    BaseDocumentStore,
    MemoryBlobStore,
    MemoryDocumentStore,
    RedisDocumentStore,
    S3BlobStore,
)

logger = logging.getLogger(__name__)


class IngestionPipeline:
    """Main ingestion pipeline orchestrator.

    Coordinates all ingestion components:
    - Source adapters (CSV text, value grids, Google Sheets)
    - Column-alias normalization
    - Conflict detection across blob and document stores
    - Overwrite confirmation
    - Per-record enrichment (Wiktionary IPA, OpenAI linguistic data)
    - Day slot replacement and course metadata

    Day slots are processed one at a time, records one at a time.

    Usage:
        config = IngestionConfig.from_env()
        pipeline = IngestionPipeline(config)
        await pipeline.initialize()

        outcome = await pipeline.ingest_csv("TOEIC", 3, csv_text, confirm_overwrite=ask_user)
        print(outcome.summary)
    """

    __slots__ = (
        "_config",
        "_initialized",
        "_documents",
        "_blobs",
        "_phonetic",
        "_linguistic",
        "_sheets",
        "_normalizer",
        "_detector",
        "_gate",
        "_writer",
        "_metadata",
        "_enrichment",
        "_progress_tracker",
        "_stats",
    )

    def __init__(
        self,
        config: IngestionConfig | None = None,
        document_store: BaseDocumentStore | None = None,
        blob_store: BaseBlobStore | None = None,
        phonetic_service: BasePhoneticService | None = None,
        linguistic_service: BaseLinguisticService | None = None,
        sheets_client: GoogleSheetsClient | None = None,
    ):
        """Initialize ingestion pipeline.

        Args:
            config: Pipeline configuration.
            document_store: Store for day slots and course metadata.
            blob_store: Store for source backups.
            phonetic_service: IPA lookup service.
            linguistic_service: Linguistic-data generation service.
            sheets_client: Client for Google Sheets sources.

        Components not supplied are built from config in initialize().
        """
        self._config = config or IngestionConfig()
        self._initialized = False

        self._documents = document_store
        self._blobs = blob_store
        self._phonetic = phonetic_service
        self._linguistic = linguistic_service
        self._sheets = sheets_client

        # Will be initialized in initialize()
        self._normalizer: FieldNormalizer | None = None
        self._detector: ConflictDetector | None = None
        self._gate: OverwriteGate | None = None
        self._writer: DaySlotWriter | None = None
        self._metadata: MetadataUpdater | None = None
        self._enrichment: EnrichmentStage | None = None
        self._progress_tracker = ProgressTracker(emit_interval=self._config.progress_interval)

        # Stats
        self._stats = {
            "slots_processed": 0,
            "slots_skipped": 0,
            "slots_failed": 0,
            "records_written": 0,
            "records_failed": 0,
            "records_enriched": 0,
            "enrichment_failures": 0,
            "rows_skipped": 0,
        }

    async def initialize(self) -> bool:
        """Initialize all pipeline components.

        Returns:
            True if initialization successful.
        """
        if self._initialized:
            return True

        if self._config.debug_mode:
            logging.getLogger("voca.ingestion").setLevel(logging.DEBUG)

        logger.info("Initializing ingestion pipeline...")
        storage = self._config.storage
        enrichment = self._config.enrichment

        # 1. Document store
        if self._documents is None:
            if storage.redis_url:
                store = RedisDocumentStore(prefix=storage.redis_prefix)
                await store.connect(storage.redis_url)
                self._documents = store
            else:
                logger.info("No REDIS_URL configured, using in-memory document store")
                self._documents = MemoryDocumentStore()

        # 2. Blob store
        if self._blobs is None:
            if storage.blob_bucket:
                self._blobs = S3BlobStore(
                    bucket=storage.blob_bucket,
                    region=storage.aws_region,
                    prefix=storage.blob_prefix,
                )
            else:
                logger.info("No BLOB_BUCKET configured, using in-memory blob store")
                self._blobs = MemoryBlobStore()

        # 3. Enrichment services (injected services are always used)
        if enrichment.enabled:
            if self._phonetic is None and enrichment.phonetic_enabled:
                self._phonetic = WiktionaryPhoneticService(
                    timeout=enrichment.phonetic_timeout,
                    cache_size=enrichment.phonetic_cache_size,
                )
            if self._linguistic is None and enrichment.linguistic_enabled:
                self._linguistic = OpenAILinguisticService(
                    api_key=enrichment.openai_api_key,
                    model=enrichment.linguistic_model,
                    temperature=enrichment.linguistic_temperature,
                    max_tokens=enrichment.linguistic_max_tokens,
                )
        self._enrichment = EnrichmentStage(self._phonetic, self._linguistic)

        # 4. Stages
        self._normalizer = FieldNormalizer()
        self._detector = ConflictDetector(self._documents, self._blobs)
        self._gate = OverwriteGate()
        self._writer = DaySlotWriter(self._documents, self._blobs)
        self._metadata = MetadataUpdater(self._documents, self._config)

        self._initialized = True
        logger.info(
            f"Ingestion pipeline initialized "
            f"(documents={self._documents.backend}, blobs={self._blobs.backend}, "
            f"enrichment={self._enrichment.enabled})"
        )

        return True

    async def close(self) -> None:
        """Release service and store connections."""
        if self._enrichment:
            await self._enrichment.close()
        if self._sheets:
            await self._sheets.close()
        if self._documents:
            await self._documents.close()

    def _resolve_course(self, course: str) -> CourseConfig | None:
        config = self._config.get_course(course)
        if config is None or not config.has_path:
            logger.error(str(NoPathConfiguredError(course)))
            return None
        return config

    async def ingest(
        self,
        course: str,
        day: int,
        source_rows: Sequence[RawRow],
        confirm_overwrite: OverwriteConfirmer | None = None,
        source_blob: bytes | None = None,
        on_progress: EventCallback | None = None,
    ) -> BatchOutcome:
        """Import one day slot from pre-parsed rows.

        Args:
            course: Course name or course id.
            day: Day number (1-based).
            source_rows: Header-keyed rows in source order.
            confirm_overwrite: Asked before replacing existing data.
            source_blob: Original file bytes to back up.
            on_progress: Listener for this call only.

        Returns:
            BatchOutcome for the slot (all zero if skipped or the course
            is unknown).

        Raises:
            EmptySourceError: If there is nothing to import.
            ClearFailedError: If existing data could not be removed.
        """
        if not self._initialized:
            await self.initialize()

        config = self._resolve_course(course)
        if config is None:
            return BatchOutcome()
        rows = await self._load_rows(source_rows)

        tracker = self._progress_tracker
        if on_progress:
            tracker.add_listener(on_progress)

        outcome = BatchOutcome()
        try:
            tracker.start_batch(config.name, 1)
            result = await self._process_slot(
                config, day, rows, confirm_overwrite, source_blob, item_index=1
            )
            outcome = result.outcome
        finally:
            tracker.complete_batch(outcome)
            if on_progress:
                tracker.remove_listener(on_progress)

        return outcome

    async def ingest_csv(
        self,
        course: str,
        day: int,
        text: str | bytes,
        confirm_overwrite: OverwriteConfirmer | None = None,
        delimiter: str = ",",
        on_progress: EventCallback | None = None,
    ) -> BatchOutcome:
        """Import one day slot from delimited text. The text is backed up as-is."""
        rows, blob = await self._load_csv(text, delimiter)
        return await self.ingest(
            course, day, rows, confirm_overwrite, source_blob=blob, on_progress=on_progress
        )

    async def ingest_grid(
        self,
        course: str,
        day: int,
        grid: Sequence[Sequence[Any]],
        confirm_overwrite: OverwriteConfirmer | None = None,
        on_progress: EventCallback | None = None,
    ) -> BatchOutcome:
        """Import one day slot from a value grid (first row = headers)."""
        rows, blob = await self._load_grid(grid)
        return await self.ingest(
            course, day, rows, confirm_overwrite, source_blob=blob, on_progress=on_progress
        )

    async def ingest_sheet(
        self,
        course: str,
        day: int,
        sheet_id: str,
        sheet_range: str | None = None,
        token: str = "",
        confirm_overwrite: OverwriteConfirmer | None = None,
        on_progress: EventCallback | None = None,
    ) -> BatchOutcome:
        """Import one day slot from a Google Sheets range.

        Raises:
            SheetFetchError: If the Sheets API reports an error.
            EmptySourceError: If the range has no data rows.
        """
        grid = await self._fetch_sheet(sheet_id, sheet_range, token)
        return await self.ingest_grid(course, day, grid, confirm_overwrite, on_progress)

    async def ingest_batch(
        self,
        course: str,
        items: Sequence[IngestionItem],
        confirm_overwrite: OverwriteConfirmer | None = None,
        on_progress: EventCallback | None = None,
        continue_on_error: bool | None = None,
        token: str = "",
    ) -> list[SlotResult]:
        """Import several day slots of one course, strictly in order.

        Args:
            course: Course name or course id.
            items: Day slots with their sources.
            confirm_overwrite: Asked once per occupied slot.
            on_progress: Listener for this call only.
            continue_on_error: Record fatal slot errors and keep going
                (defaults to config.continue_on_error).
            token: OAuth token for sheet-backed items.

        Returns:
            One SlotResult per processed item.

        Raises:
            IngestionError: First fatal slot error, unless continue_on_error.
        """
        if not self._initialized:
            await self.initialize()

        config = self._resolve_course(course)
        if config is None:
            return []

        if continue_on_error is None:
            continue_on_error = self._config.continue_on_error

        tracker = self._progress_tracker
        if on_progress:
            tracker.add_listener(on_progress)

        results: list[SlotResult] = []
        total = BatchOutcome()
        try:
            tracker.start_batch(config.name, len(items))

            for index, item in enumerate(items, start=1):
                try:
                    rows, blob = await self._load_item(item, token)
                    result = await self._process_slot(
                        config, item.day, rows, confirm_overwrite, blob, item_index=index
                    )
                except IngestionError as e:
                    if not continue_on_error:
                        raise
                    result = SlotResult(
                        course=config.name,
                        day=item.day,
                        status=SlotStatus.FAILED,
                        error=str(e),
                    )

                results.append(result)
                total.merge(result.outcome)

        finally:
            tracker.complete_batch(total)
            if on_progress:
                tracker.remove_listener(on_progress)

        return results

    async def _load_item(self, item: IngestionItem, token: str) -> tuple[list[RawRow], bytes | None]:
        """Turn a batch item's source into rows plus backup bytes."""
        if item.rows is not None:
            return await self._load_rows(item.rows), item.source_blob
        if item.csv_text is not None:
            rows, blob = await self._load_csv(item.csv_text)
            return rows, item.source_blob or blob
        if item.grid is not None:
            rows, blob = await self._load_grid(item.grid)
            return rows, item.source_blob or blob
        if item.sheet_id is not None:
            grid = await self._fetch_sheet(item.sheet_id, item.sheet_range, token)
            rows, blob = await self._load_grid(grid)
            return rows, item.source_blob or blob
        raise EmptySourceError(f"No source given for Day {item.day}")

    async def _load_rows(self, rows: Sequence[RawRow]) -> list[RawRow]:
        return await MemoryAdapter(list(rows)).read_all()

    async def _load_csv(self, text: str | bytes, delimiter: str = ",") -> tuple[list[RawRow], bytes]:
        adapter = DelimitedTextAdapter(text, delimiter=delimiter)
        rows = await adapter.read_all()
        blob = text if isinstance(text, bytes) else adapter.source_bytes
        return rows, blob

    async def _load_grid(self, grid: Sequence[Sequence[Any]]) -> tuple[list[RawRow], bytes]:
        adapter = SheetGridAdapter(grid)
        rows = await adapter.read_all()
        return rows, adapter.to_csv_bytes()

    async def _fetch_sheet(self, sheet_id: str, sheet_range: str | None, token: str) -> list[list[str]]:
        if self._sheets is None:
            self._sheets = GoogleSheetsClient()
        return await self._sheets.fetch_values(
            sheet_id,
            sheet_range or self._config.default_sheet_range,
            token,
        )

    async def _process_slot(
        self,
        course: CourseConfig,
        day: int,
        source_rows: Sequence[RawRow],
        confirm_overwrite: OverwriteConfirmer | None,
        source_blob: bytes | None,
        item_index: int,
    ) -> SlotResult:
        """Run one day slot through the state machine."""
        tracker = self._progress_tracker
        tracker.start_slot(day, item_index)
        result = SlotResult(course=course.name, day=day)

        try:
            normalized = self._normalizer.normalize_all(list(source_rows), course.kind)
            if not normalized.records:
                raise EmptySourceError(f"No records to import for {course.name} Day {day}")

            # Conflict check and confirmation
            result.status = SlotStatus.CHECKING_CONFLICTS
            tracker.stage(result.status, "Checking existing data...")
            report = await self._detector.detect(course, day)
            result.conflict = report

            if report.has_conflict:
                result.status = SlotStatus.AWAITING_CONFIRMATION
                tracker.stage(result.status, f"Existing data found in {report.description}")
                if not await self._gate.confirm(day, report, confirm_overwrite):
                    result.status = SlotStatus.SKIPPED
                    self._stats["slots_skipped"] += 1
                    tracker.slot_skipped()
                    return result

            result.outcome.skipped_rows = normalized.skipped
            if source_blob:
                await self._writer.backup_source(course, day, source_blob)

            # Replace slot contents
            result.status = SlotStatus.CLEARING
            tracker.stage(result.status, "Clearing existing data...")
            await self._writer.clear(course, day)

            result.status = SlotStatus.WRITING
            await self._write_records(course, day, normalized.records, result.outcome)

            # Metadata
            if result.outcome.success_count > 0:
                result.status = SlotStatus.UPDATING_METADATA
                tracker.stage(result.status, "Updating course metadata...")
                try:
                    await self._metadata.update(course.name, day)
                except Exception as e:
                    logger.error(f"Metadata update failed for {course.name} Day {day}: {e}")

        except IngestionError as e:
            result.status = SlotStatus.FAILED
            result.error = str(e)
            self._stats["slots_failed"] += 1
            tracker.slot_failed(str(e))
            raise

        result.status = SlotStatus.DONE
        self._record_stats(result.outcome)
        tracker.slot_completed(result.outcome)
        return result

    async def _write_records(
        self,
        course: CourseConfig,
        day: int,
        records: list,
        outcome: BatchOutcome,
    ) -> None:
        """Enrich and insert records one at a time."""
        tracker = self._progress_tracker
        tracker.start_writing(len(records))

        for record in records:
            enrichment = await self._enrichment.enrich(record, course.level)
            try:
                await self._writer.insert(course, day, record)
                outcome.success_count += 1
                if enrichment.linguistic_applied:
                    outcome.enriched_count += 1
                if enrichment.failed:
                    outcome.enrichment_fail_count += 1
            except InsertError as e:
                outcome.fail_count += 1
                logger.error(f"Error uploading '{record.key}': {e}")

            tracker.record_processed()

    def _record_stats(self, outcome: BatchOutcome) -> None:
        self._stats["slots_processed"] += 1
        self._stats["records_written"] += outcome.success_count
        self._stats["records_failed"] += outcome.fail_count
        self._stats["records_enriched"] += outcome.enriched_count
        self._stats["enrichment_failures"] += outcome.enrichment_fail_count
        self._stats["rows_skipped"] += outcome.skipped_rows

    def add_progress_listener(self, callback: EventCallback) -> None:
        """Add progress event listener.

        Args:
            callback: Function to call with event data.
        """
        self._progress_tracker.add_listener(callback)

    def remove_progress_listener(self, callback: EventCallback) -> None:
        self._progress_tracker.remove_listener(callback)

    async def get_total_days(self, course: str) -> int:
        """Highest day with data for a course (0 if none)."""
        if not self._initialized:
            await self.initialize()
        return await self._metadata.get_total_days(course)

    def get_stats(self) -> dict[str, Any]:
        """Get pipeline statistics."""
        stats = self._stats.copy()

        if self._writer:
            stats["writer"] = self._writer.get_stats()

        if self._enrichment:
            stats["enrichment"] = self._enrichment.get_info()

        stats["progress"] = self._progress_tracker.get_stats()
        return stats

    def get_info(self) -> dict[str, Any]:
        """Get pipeline information."""
        return {
            "initialized": self._initialized,
            "config": self._config.to_dict(),
            "stats": self._stats,
            "document_backend": self._documents.backend if self._documents else None,
            "blob_backend": self._blobs.backend if self._blobs else None,
            "enrichment_enabled": self._enrichment.enabled if self._enrichment else False,
        }
