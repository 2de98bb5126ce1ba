"""Tests for conflict detection, overwrite gate, slot writer and metadata."""

from unittest.mock import AsyncMock

import pytest

from voca.ingestion.errors import ClearFailedError, InsertError
from voca.ingestion.pipeline.conflict_detector import ConflictDetector
from voca.ingestion.pipeline.day_slot_writer import DaySlotWriter
from voca.ingestion.pipeline.ingestion_models import ConflictReport, WordRecord
from voca.ingestion.pipeline.metadata_updater import MetadataUpdater
from voca.ingestion.pipeline.overwrite_gate import OverwriteGate, conflict_description
from voca.ingestion.storage import MemoryBlobStore, MemoryDocumentStore


class BrokenDocumentStore(MemoryDocumentStore):
    """Memory store whose operations can be made to fail."""

    def __init__(self, fail_list=False, fail_delete=False, fail_add_for=()):
        super().__init__()
        self.fail_list = fail_list
        self.fail_delete = fail_delete
        self.fail_add_for = set(fail_add_for)

    async def list_documents(self, path):
        if self.fail_list:
            raise ConnectionError("store unreachable")
        return await super().list_documents(path)

    async def delete_document(self, path, doc_id):
        if self.fail_delete:
            raise ConnectionError("delete refused")
        await super().delete_document(path, doc_id)

    async def add_document(self, path, data):
        if data.get("word") in self.fail_add_for:
            raise ConnectionError("write refused")
        return await super().add_document(path, data)


@pytest.fixture
def toeic(ingestion_config):
    return ingestion_config.get_course("TOEIC")


class TestConflictDetector:
    """Test dual-store probing."""

    @pytest.mark.asyncio
    async def test_no_conflict(self, document_store, blob_store, toeic):
        detector = ConflictDetector(document_store, blob_store)

        report = await detector.detect(toeic, 1)

        assert report.has_conflict is False

    @pytest.mark.asyncio
    async def test_both_stores(self, document_store, blob_store, toeic):
        await document_store.add_document("courses/toeic/Day2", {"word": "apple"})
        await blob_store.upload_bytes("csv/TOEIC/Day2.csv", b"Word\napple\n")
        detector = ConflictDetector(document_store, blob_store)

        report = await detector.detect(toeic, 2)

        assert report.blob_exists and report.documents_exist
        assert report.description == "both blob store and document store"

    @pytest.mark.asyncio
    async def test_blob_only(self, document_store, blob_store, toeic):
        await blob_store.upload_bytes("csv/TOEIC/Day3.csv", b"x")
        report = await ConflictDetector(document_store, blob_store).detect(toeic, 3)

        assert report.blob_exists is True
        assert report.documents_exist is False

    @pytest.mark.asyncio
    async def test_store_errors_fail_open(self, blob_store, toeic):
        documents = BrokenDocumentStore(fail_list=True)
        blobs = MemoryBlobStore()
        blobs.get_metadata = AsyncMock(side_effect=TimeoutError("slow"))

        report = await ConflictDetector(documents, blobs).detect(toeic, 1)

        assert report.has_conflict is False


class TestOverwriteGate:
    """Test confirmation handling."""

    @pytest.fixture
    def conflict(self):
        return ConflictReport(blob_exists=False, documents_exist=True)

    def test_description(self, conflict):
        assert conflict_description(4, conflict) == (
            "Day 4 already has data in document store. Do you want to overwrite it?"
        )

    @pytest.mark.asyncio
    async def test_no_conflict_passes(self):
        assert await OverwriteGate().confirm(1, ConflictReport()) is True

    @pytest.mark.asyncio
    async def test_no_confirmer_declines(self, conflict):
        assert await OverwriteGate().confirm(1, conflict) is False

    @pytest.mark.asyncio
    async def test_sync_confirmer(self, conflict):
        questions = []

        def confirmer(description):
            questions.append(description)
            return True

        assert await OverwriteGate(confirmer).confirm(4, conflict) is True
        assert questions == [conflict_description(4, conflict)]

    @pytest.mark.asyncio
    async def test_async_confirmer_per_call(self, conflict):
        async def confirmer(description):
            return False

        gate = OverwriteGate(lambda d: True)
        assert await gate.confirm(1, conflict, confirmer) is False

    @pytest.mark.asyncio
    async def test_raising_confirmer_declines(self, conflict):
        def confirmer(description):
            raise RuntimeError("dialog closed")

        assert await OverwriteGate(confirmer).confirm(1, conflict) is False


class TestDaySlotWriter:
    """Test clear / insert / backup."""

    @pytest.mark.asyncio
    async def test_clear_and_insert(self, document_store, blob_store, toeic):
        for word in ("old1", "old2"):
            await document_store.add_document("courses/toeic/Day1", {"word": word})
        writer = DaySlotWriter(document_store, blob_store)

        removed = await writer.clear(toeic, 1)
        doc_id = await writer.insert(toeic, 1, WordRecord(headword="apple", meaning="사과"))

        docs = await document_store.list_documents("courses/toeic/Day1")
        assert removed == 2
        assert [d.id for d in docs] == [doc_id]
        assert docs[0].data["word"] == "apple"
        assert writer.get_stats() == {"inserted": 1, "cleared": 2}

    @pytest.mark.asyncio
    async def test_clear_failure(self, blob_store, toeic):
        documents = BrokenDocumentStore(fail_delete=True)
        await documents.add_document("courses/toeic/Day1", {"word": "old"})
        writer = DaySlotWriter(documents, blob_store)

        with pytest.raises(ClearFailedError) as exc_info:
            await writer.clear(toeic, 1)

        assert exc_info.value.course == "TOEIC"
        assert exc_info.value.day == 1

    @pytest.mark.asyncio
    async def test_insert_failure(self, blob_store, toeic):
        writer = DaySlotWriter(BrokenDocumentStore(fail_add_for={"apple"}), blob_store)

        with pytest.raises(InsertError):
            await writer.insert(toeic, 1, WordRecord(headword="apple"))

    @pytest.mark.asyncio
    async def test_backup_source(self, document_store, blob_store, toeic):
        writer = DaySlotWriter(document_store, blob_store)

        assert await writer.backup_source(toeic, 5, b"Word\napple\n") is True
        assert blob_store.read("csv/TOEIC/Day5.csv") == b"Word\napple\n"

    @pytest.mark.asyncio
    async def test_backup_failure_swallowed(self, document_store, toeic):
        blobs = MemoryBlobStore()
        blobs.upload_bytes = AsyncMock(side_effect=ConnectionError("bucket gone"))
        writer = DaySlotWriter(document_store, blobs)

        assert await writer.backup_source(toeic, 5, b"x") is False


class TestMetadataUpdater:
    """Test the monotonic totalDays counter."""

    @pytest.fixture
    def updater(self, document_store, ingestion_config):
        return MetadataUpdater(document_store, ingestion_config)

    @pytest.mark.asyncio
    async def test_creates_document(self, updater, document_store):
        total = await updater.update("TOEIC", 3)

        snapshot = await document_store.get_document("courseMetadata/TOEIC")
        assert total == 3
        assert snapshot.data["courseId"] == "TOEIC"
        assert snapshot.data["totalDays"] == 3
        assert snapshot.data["lastUpdated"]

    @pytest.mark.asyncio
    async def test_lower_day_does_not_write(self, updater, document_store):
        await document_store.set_document(
            "courseMetadata/TOEIC",
            {"courseId": "TOEIC", "totalDays": 10, "lastUpdated": "2024-01-01T00:00:00+00:00"},
        )

        total = await updater.update("TOEIC", 4)

        snapshot = await document_store.get_document("courseMetadata/TOEIC")
        assert total == 10
        assert snapshot.data["lastUpdated"] == "2024-01-01T00:00:00+00:00"

    @pytest.mark.asyncio
    async def test_higher_day_merges(self, updater, document_store):
        await document_store.set_document(
            "courseMetadata/TOEIC",
            {"courseId": "TOEIC", "totalDays": 10, "extra": "kept"},
        )

        assert await updater.update("TOEIC", 12) == 12

        snapshot = await document_store.get_document("courseMetadata/TOEIC")
        assert snapshot.data["totalDays"] == 12
        assert snapshot.data["extra"] == "kept"

    @pytest.mark.asyncio
    async def test_csat_uses_korean_course_id(self, updater, document_store):
        await updater.update("CSAT", 2)

        assert (await document_store.get_document("courseMetadata/수능")).exists
        assert await updater.get_total_days("수능") == 2

    @pytest.mark.asyncio
    async def test_unknown_course_is_noop(self, updater, document_store):
        assert await updater.update("LATIN", 1) is None
        assert await updater.get_metadata("LATIN") is None
        assert await updater.get_total_days("LATIN") == 0

    @pytest.mark.asyncio
    async def test_course_without_path_is_noop(self, updater, ingestion_config, document_store):
        ingestion_config.get_course("OPIC").path = ""

        assert await updater.update("OPIC", 1) is None
        assert document_store.count("courseMetadata") == 0

    @pytest.mark.asyncio
    async def test_store_errors_propagate(self, ingestion_config):
        documents = MemoryDocumentStore()
        documents.get_document = AsyncMock(side_effect=ConnectionError("down"))

        with pytest.raises(ConnectionError):
            await MetadataUpdater(documents, ingestion_config).update("TOEIC", 1)
