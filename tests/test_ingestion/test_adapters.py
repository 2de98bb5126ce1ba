"""Tests for data source adapters."""

import pytest
import httpx

from voca.ingestion.adapters.base_adapter import (
    AdapterType,
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
from voca.ingestion.errors import EmptySourceError, SheetFetchError, SourceFormatError


class TestMemoryAdapter:
    """Test MemoryAdapter."""

    @pytest.fixture
    def sample_rows(self):
        return [{"Word": f"word{i}", "Meaning": f"meaning {i}"} for i in range(5)]

    @pytest.mark.asyncio
    async def test_connect_disconnect(self, sample_rows):
        """Test adapter connection lifecycle."""
        adapter = MemoryAdapter(rows=sample_rows)

        assert await adapter.connect() is True
        assert adapter.connected is True
        await adapter.disconnect()
        assert adapter.connected is False

    @pytest.mark.asyncio
    async def test_read_stream(self, sample_rows):
        """Test streaming rows in order."""
        adapter = MemoryAdapter(rows=sample_rows)

        rows = []
        async for row in adapter.read_stream():
            rows.append(row)

        assert len(rows) == 5
        assert rows[0]["Word"] == "word0"
        assert adapter.stats.rows_read == 5

    @pytest.mark.asyncio
    async def test_count_rows(self, sample_rows):
        adapter = MemoryAdapter(rows=sample_rows)
        adapter.add_rows([{"Word": "extra"}])

        assert await adapter.count_rows() == 6
        assert adapter.get_info()["type"] == AdapterType.MEMORY.value


class TestSheetGridAdapter:
    """Test grid parsing."""

    def test_fewer_than_two_rows_raises(self):
        with pytest.raises(EmptySourceError):
            parse_sheet_values([["Word", "Meaning"]])
        with pytest.raises(EmptySourceError):
            parse_sheet_values([])
        with pytest.raises(EmptySourceError):
            parse_sheet_values(None)

    def test_short_rows_padded(self):
        """Missing trailing cells become empty strings."""
        rows = parse_sheet_values([
            ["Word", "Meaning", "Pronunciation"],
            ["apple"],
            ["banana", "바나나", "/bəˈnænə/"],
        ])

        assert rows[0] == {"Word": "apple", "Meaning": "", "Pronunciation": ""}
        assert rows[1]["Pronunciation"] == "/bəˈnænə/"

    def test_headers_trimmed_and_extra_cells_ignored(self):
        rows = parse_sheet_values([
            [" Word ", "Meaning"],
            ["apple", "사과", "unexpected"],
        ])

        assert rows == [{"Word": "apple", "Meaning": "사과"}]

    def test_none_cells_become_empty(self):
        rows = parse_sheet_values([["Word", "Meaning"], ["apple", None]])
        assert rows[0]["Meaning"] == ""

    @pytest.mark.asyncio
    async def test_read_stream_counts_padded(self):
        adapter = SheetGridAdapter([
            ["Word", "Meaning"],
            ["apple"],
            ["banana", "바나나"],
        ])

        rows = await adapter.read_all()

        assert len(rows) == 2
        assert adapter.stats.rows_read == 2
        assert adapter.stats.rows_padded == 1
        assert adapter.header == ["Word", "Meaning"]

    @pytest.mark.asyncio
    async def test_read_stream_empty_records_error(self):
        adapter = SheetGridAdapter([["Word"]])

        with pytest.raises(EmptySourceError):
            await adapter.read_all()
        assert adapter.stats.errors == 1

    def test_to_csv_bytes(self):
        adapter = SheetGridAdapter([["Word", "Meaning"], ["a, b", None]])

        assert adapter.to_csv_bytes() == b'Word,Meaning\n"a, b",\n'


class TestDelimitedTextAdapter:
    """Test CSV parsing."""

    def test_dedupe_headers(self):
        assert dedupe_headers(["", "", ""]) == ["", "_1", "_2"]
        assert dedupe_headers(["Word", "Word", "Meaning"]) == ["Word", "Word_1", "Meaning"]
        assert dedupe_headers(["a", "a_1", "a"]) == ["a", "a_1", "a_2"]

    def test_parse_quoted_fields(self):
        text = 'Word,Meaning,Example sentence\ndecide,결정하다,"We decide, then act."\n'

        headers, rows, blank = parse_delimited_text(text)

        assert headers == ["Word", "Meaning", "Example sentence"]
        assert rows[0]["Example sentence"] == "We decide, then act."
        assert blank == 0

    def test_blank_lines_skipped_and_short_rows_padded(self):
        text = "Word,Meaning,Translation\napple,사과\n\n,,\nbanana,바나나,banana\n"

        headers, rows, blank = parse_delimited_text(text)

        assert len(rows) == 2
        assert rows[0] == {"Word": "apple", "Meaning": "사과", "Translation": ""}
        assert blank == 2

    def test_bom_stripped(self):
        headers, rows, _ = parse_delimited_text("\ufeffWord,Meaning\napple,사과\n")

        assert headers[0] == "Word"
        assert rows[0]["Word"] == "apple"

    def test_headerless_export_positional_labels(self):
        """Blank header cells become "", "_1", ... so positional aliases work."""
        headers, rows, _ = parse_delimited_text(",,,,\napple,사과,/ˈæpəl/,An apple.,apple\n")

        assert headers == ["", "_1", "_2", "_3", "_4"]
        assert rows[0]["_1"] == "사과"

    def test_tab_delimiter(self):
        _, rows, _ = parse_delimited_text("Word\tMeaning\napple\t사과\n", delimiter="\t")
        assert rows[0]["Meaning"] == "사과"

    @pytest.mark.asyncio
    async def test_header_only_raises(self):
        adapter = DelimitedTextAdapter("Word,Meaning\n")

        with pytest.raises(EmptySourceError):
            await adapter.read_all()

    @pytest.mark.asyncio
    async def test_bytes_input(self):
        data = "\ufeffWord,Meaning\napple,사과\n".encode("utf-8")
        adapter = DelimitedTextAdapter(data)

        rows = await adapter.read_all()

        assert rows == [{"Word": "apple", "Meaning": "사과"}]
        assert adapter.stats.bytes_read == len(data)
        assert adapter.headers == ["Word", "Meaning"]

    def test_invalid_utf8_raises_source_format_error(self):
        with pytest.raises(SourceFormatError, match="not valid UTF-8") as exc_info:
            DelimitedTextAdapter(b"Word\n\xff\xfe\n")

        assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)

    def test_oversized_field_raises_source_format_error(self):
        text = "Word,Meaning\napple," + "x" * 200_000 + "\n"

        with pytest.raises(SourceFormatError, match="Malformed delimited text"):
            parse_delimited_text(text)


class TestGoogleSheetsClient:
    """Test Sheets v4 retrieval with a mocked transport."""

    @staticmethod
    def _client(handler):
        return GoogleSheetsClient(http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))

    @pytest.mark.asyncio
    async def test_fetch_values(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json={"values": [["Word", "Meaning"], ["apple", "사과"]]})

        client = self._client(handler)
        values = await client.fetch_values("sheet123", "Sheet1!A:E", token="tok")

        assert values == [["Word", "Meaning"], ["apple", "사과"]]
        assert "/sheet123/values/Sheet1!A:E" in seen["url"]
        assert "majorDimension=ROWS" in seen["url"]
        assert seen["auth"] == "Bearer tok"

    @pytest.mark.asyncio
    async def test_error_payload_raises(self):
        def handler(request):
            return httpx.Response(403, json={"error": {"code": 403, "message": "denied"}})

        client = self._client(handler)

        with pytest.raises(SheetFetchError, match="denied"):
            await client.fetch_values("sheet123")

    @pytest.mark.asyncio
    async def test_header_only_raises(self):
        def handler(request):
            return httpx.Response(200, json={"values": [["Word", "Meaning"]]})

        client = self._client(handler)

        with pytest.raises(EmptySourceError):
            await client.fetch_values("sheet123")

    @pytest.mark.asyncio
    async def test_transport_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        client = self._client(handler)

        with pytest.raises(SheetFetchError):
            await client.fetch_values("sheet123")
