"""Wiktionary IPA lookup.

Fetches page wikitext from the MediaWiki API and extracts US and UK
transcriptions from the Pronunciation section.
"""

from __future__ import annotations

import logging
import re
from collections import OrderedDict

import httpx

from voca.ingestion.enrichment.base_service import BasePhoneticService, PhoneticResult
from voca.ingestion.errors import EnrichmentError

logger = logging.getLogger(__name__)


WIKTIONARY_API_URL = "https://en.wiktionary.org/w/api.php"
USER_AGENT = "voca-ingest/0.1 (vocabulary import pipeline)"

_SECTION_RE = re.compile(
    r"===\s*Pronunciation\s*===\s*([\s\S]*?)(?=\n===|\n==|$)",
    re.IGNORECASE,
)
_US_MARKER_RE = re.compile(
    r"\{\{a\|(?:US|GA|General American|GenAm)\}\}|'''US'''|'''GenAm'''|\(US\)|\(GA\)",
    re.IGNORECASE,
)
_UK_MARKER_RE = re.compile(
    r"\{\{a\|(?:UK|RP|Received Pronunciation|British)\}\}"
    r"|'''UK'''|'''RP'''|'''British'''|\(UK\)|\(RP\)|\(British\)",
    re.IGNORECASE,
)
_IPA_PATTERNS = (
    re.compile(r"\{\{IPA\|en\|(/[^}/]+/)\}\}"),
    re.compile(r"IPA:\s*(/[^,\n]+/)"),
    re.compile(r"(/[ˈˌəɪʊɛæɑɔʌaeiouɜːˑθðʃʒŋtsdnlrwjhkɡpbfvmz]+/)", re.IGNORECASE),
)


def extract_pronunciation_section(wikitext: str) -> str | None:
    """Return the body of the first Pronunciation section."""
    match = _SECTION_RE.search(wikitext)
    return match.group(1) if match else None


def parse_ipa(section: str) -> tuple[str | None, str | None]:
    """Extract (US, UK) transcriptions from a Pronunciation section.

    Lines without an accent marker fill US first, then UK.
    """
    us_ipa: str | None = None
    uk_ipa: str | None = None

    for line in section.split("\n"):
        if not line.strip():
            continue

        is_us = bool(_US_MARKER_RE.search(line))
        is_uk = bool(_UK_MARKER_RE.search(line))

        ipa = None
        for pattern in _IPA_PATTERNS:
            match = pattern.search(line)
            if match:
                ipa = match.group(1)
                break

        if ipa:
            if is_us and not us_ipa:
                us_ipa = ipa
            elif is_uk and not uk_ipa:
                uk_ipa = ipa
            elif not is_us and not is_uk:
                if not us_ipa:
                    us_ipa = ipa
                elif not uk_ipa:
                    uk_ipa = ipa

        if us_ipa and uk_ipa:
            break

    return us_ipa, uk_ipa


class WiktionaryPhoneticService(BasePhoneticService):
    """Phonetic lookup backed by the Wiktionary MediaWiki API.

    Features:
    - US / UK transcription split by accent markers
    - Bounded in-memory LRU cache (hits and misses)
    - Request timeout (8 seconds by default)

    Transport failures raise EnrichmentError and are not cached, so a
    later run can still find the word.
    """

    __slots__ = ("_client", "_owns_client", "_api_url", "_cache", "_cache_size")

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 8.0,
        cache_size: int = 500,
        api_url: str = WIKTIONARY_API_URL,
    ):
        """Initialize Wiktionary service.

        Args:
            http_client: Existing client to reuse (not closed by close()).
            timeout: Request timeout in seconds.
            cache_size: Maximum cached words.
            api_url: MediaWiki API endpoint.
        """
        super().__init__()
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=timeout,
            headers={"Accept": "application/json", "User-Agent": USER_AGENT},
        )
        self._api_url = api_url
        self._cache: OrderedDict[str, PhoneticResult] = OrderedDict()
        self._cache_size = cache_size

    @property
    def service_name(self) -> str:
        return "wiktionary"

    def clear_cache(self) -> None:
        self._cache.clear()

    def _get_cached(self, key: str) -> PhoneticResult | None:
        result = self._cache.get(key)
        if result is not None:
            self._cache.move_to_end(key)
        return result

    def _set_cached(self, key: str, result: PhoneticResult) -> None:
        if key in self._cache:
            self._cache.move_to_end(key)
        elif len(self._cache) >= self._cache_size:
            self._cache.popitem(last=False)
        self._cache[key] = result

    async def lookup(self, word: str) -> PhoneticResult:
        """Look up US/UK IPA for a word.

        Raises:
            EnrichmentError: On timeout, transport error, or non-2xx status.
        """
        normalized = word.strip().lower()
        if not normalized:
            return PhoneticResult(word=normalized)

        cached = self._get_cached(normalized)
        if cached is not None:
            self._stats.cache_hits += 1
            return cached

        wikitext = await self._fetch_wikitext(normalized)

        section = extract_pronunciation_section(wikitext) if wikitext else None
        if not section:
            result = PhoneticResult(word=normalized)
        else:
            us, uk = parse_ipa(section)
            result = PhoneticResult(
                word=normalized,
                source="wiktionary" if (us or uk) else "none",
                primary=us,
                secondary=uk,
            )

        if result.found:
            self._stats.record_success()
        else:
            self._stats.record_miss()
            logger.debug(f"Wiktionary: no pronunciation for '{normalized}'")

        self._set_cached(normalized, result)
        return result

    async def _fetch_wikitext(self, word: str) -> str | None:
        """Fetch page wikitext. None when the page does not exist."""
        params = {
            "action": "parse",
            "page": word,
            "prop": "wikitext",
            "format": "json",
            "formatversion": "2",
            "origin": "*",
        }

        try:
            response = await self._client.get(self._api_url, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            self._stats.record_failure(f"timeout: {word}")
            raise EnrichmentError(f"Wiktionary timeout fetching '{word}'") from e
        except (httpx.HTTPError, ValueError) as e:
            self._stats.record_failure(str(e))
            raise EnrichmentError(f"Wiktionary fetch error for '{word}': {e}") from e

        if data.get("error"):
            info = data["error"].get("info", "") if isinstance(data["error"], dict) else data["error"]
            logger.debug(f"Wiktionary: API error for '{word}': {info}")
            return None

        parse = data.get("parse") or {}
        return parse.get("wikitext") or None

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
