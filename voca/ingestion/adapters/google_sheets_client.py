"""Google Sheets values retrieval.

Fetches a value grid from the Sheets v4 REST API using an OAuth bearer
token supplied by the caller.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from voca.ingestion.errors import EmptySourceError, SheetFetchError

logger = logging.getLogger(__name__)


SHEETS_API_URL = "https://sheets.googleapis.com/v4/spreadsheets"


class GoogleSheetsClient:
    """Async client for spreadsheet value ranges.

    Usage:
        client = GoogleSheetsClient()
        grid = await client.fetch_values(sheet_id, "Sheet1!A:E", token)
        await client.close()
    """

    __slots__ = ("_client", "_owns_client", "_base_url")

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
        base_url: str = SHEETS_API_URL,
    ):
        """Initialize Sheets client.

        Args:
            http_client: Existing client to reuse (not closed by close()).
            timeout: Request timeout when creating a client.
            base_url: Spreadsheets endpoint.
        """
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._base_url = base_url.rstrip("/")

    async def fetch_values(
        self,
        sheet_id: str,
        sheet_range: str = "Sheet1!A:E",
        token: str = "",
    ) -> list[list[str]]:
        """Fetch a range as a list of rows.

        Args:
            sheet_id: Spreadsheet identifier.
            sheet_range: A1 range, e.g. "Sheet1!A:E".
            token: OAuth access token.

        Returns:
            Grid of cell values, first row = headers.

        Raises:
            SheetFetchError: If the API returns an error payload.
            EmptySourceError: If the range holds fewer than two rows.
        """
        url = f"{self._base_url}/{sheet_id}/values/{quote(sheet_range, safe='!:')}"
        headers = {"Authorization": f"Bearer {token}"} if token else {}

        try:
            response = await self._client.get(
                url,
                params={"majorDimension": "ROWS"},
                headers=headers,
            )
            payload: dict[str, Any] = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise SheetFetchError(f"Sheet request failed for {sheet_id}: {e}") from e

        if payload.get("error"):
            error = payload["error"]
            message = error.get("message", "unknown error") if isinstance(error, dict) else str(error)
            raise SheetFetchError(f"Sheet Error ({sheet_id}): {message}")

        values = payload.get("values")
        if not values or len(values) < 2:
            raise EmptySourceError(
                f"No data found in {sheet_id} {sheet_range} or only header row exists."
            )

        logger.info(f"Fetched {len(values) - 1} rows from sheet {sheet_id} ({sheet_range})")
        return values

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> GoogleSheetsClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
