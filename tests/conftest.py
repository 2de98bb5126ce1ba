"""Pytest configuration and shared fixtures."""

import pytest
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from voca.ingestion.config import IngestionConfig
from voca.ingestion.enrichment import (
    BaseLinguisticService,
    BasePhoneticService,
    LinguisticRequest,
    LinguisticResult,
    PhoneticResult,
)
from voca.ingestion.errors import EnrichmentError
from voca.ingestion.storage import MemoryBlobStore, MemoryDocumentStore


@pytest.fixture(scope="session")
def event_loop_policy():
    """Use default event loop policy for Windows compatibility."""
    import asyncio
    if sys.platform == "win32":
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
    return asyncio.get_event_loop_policy()


class FakePhoneticService(BasePhoneticService):
    """Phonetic service answering from a dict."""

    def __init__(self, transcriptions=None, failing=()):
        super().__init__()
        self.transcriptions = transcriptions or {}
        self.failing = set(failing)
        self.calls = []

    @property
    def service_name(self):
        return "fake-phonetic"

    async def lookup(self, word):
        self.calls.append(word)
        if word in self.failing:
            raise EnrichmentError(f"lookup failed for {word}")
        us, uk = self.transcriptions.get(word, (None, None))
        source = "wiktionary" if (us or uk) else "none"
        return PhoneticResult(word=word, source=source, primary=us, secondary=uk)


class FakeLinguisticService(BaseLinguisticService):
    """Linguistic service returning canned data."""

    def __init__(self, failing=()):
        super().__init__()
        self.failing = set(failing)
        self.requests: list[LinguisticRequest] = []

    @property
    def service_name(self):
        return "fake-linguistic"

    async def generate(self, request):
        self.requests.append(request)
        if request.word in self.failing:
            return LinguisticResult.failure("rate limited")
        return LinguisticResult(
            success=True,
            part_of_speech="verb",
            synonyms=[f"{request.word}-syn"],
            antonyms=[],
            related_words=[f"{request.word}-rel"],
            word_forms={"base": request.word, "pastForm": f"{request.word}ed"},
        )


@pytest.fixture
def ingestion_config():
    """Config with a storage path for every course and no auto-built services."""
    config = IngestionConfig()
    for course in config.courses.values():
        course.path = f"courses/{course.name.lower()}"
    config.enrichment.enabled = False
    return config


@pytest.fixture
def document_store():
    return MemoryDocumentStore()


@pytest.fixture
def blob_store():
    return MemoryBlobStore()


@pytest.fixture
def phonetic_service():
    return FakePhoneticService(
        transcriptions={
            "decide": ("/dɪˈsaɪd/", "/dɪˈsaɪd/"),
            "water": ("/ˈwɔtɚ/", "/ˈwɔːtə/"),
            "schedule": ("/ˈskɛdʒul/", None),
        }
    )


@pytest.fixture
def linguistic_service():
    return FakeLinguisticService()


@pytest.fixture
def word_rows():
    """Three vocabulary rows plus a stray header row."""
    return [
        {"Word": "Word", "Meaning": "Meaning"},
        {"Word": "decide", "Meaning": "결정하다", "Example sentence": "We decide today."},
        {"Word": "water", "Meaning": "물", "Pronunciation": ""},
        {"Word": " schedule ", "Meaning": "일정", "Translation": "schedule"},
    ]
