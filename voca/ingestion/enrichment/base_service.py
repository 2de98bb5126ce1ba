"""Base enrichment service interfaces.

Abstract base classes for the phonetic-transcription lookup and the
linguistic-data generation services, plus their request/result models.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass(slots=True)
class PhoneticResult:
    """Result of a phonetic lookup.

    Attributes:
        word: Normalized lookup word.
        source: "wiktionary" when any transcription was found, else "none".
        primary: US (General American) transcription.
        secondary: UK (Received Pronunciation) transcription.
    """

    word: str
    source: str = "none"
    primary: str | None = None
    secondary: str | None = None

    @property
    def found(self) -> bool:
        return self.source != "none" and bool(self.primary or self.secondary)

    def to_dict(self) -> dict[str, Any]:
        return {
            "word": self.word,
            "source": self.source,
            "primary": self.primary,
            "secondary": self.secondary,
        }


@dataclass(slots=True)
class LinguisticRequest:
    """Input to linguistic-data generation."""

    word: str
    meaning: str = ""
    course_level: str = "TOEIC"


@dataclass(slots=True)
class LinguisticResult:
    """Generated linguistic data for one word.

    On failure success is False, error holds the reason, and every data
    field is empty.
    """

    success: bool
    part_of_speech: str = "other"
    synonyms: list[str] = field(default_factory=list)
    antonyms: list[str] = field(default_factory=list)
    related_words: list[str] = field(default_factory=list)
    word_forms: dict[str, str] = field(default_factory=dict)
    error: str | None = None

    @classmethod
    def failure(cls, error: str) -> LinguisticResult:
        return cls(success=False, error=error)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "part_of_speech": self.part_of_speech,
            "synonyms": self.synonyms,
            "antonyms": self.antonyms,
            "related_words": self.related_words,
            "word_forms": self.word_forms,
            "error": self.error,
        }


@dataclass(slots=True)
class ServiceStats:
    """Statistics for external service calls."""

    calls: int = 0
    successes: int = 0
    misses: int = 0
    failures: int = 0
    cache_hits: int = 0
    last_call_time: str | None = None
    last_error: str | None = None

    def record_success(self) -> None:
        self.calls += 1
        self.successes += 1
        self.last_call_time = datetime.now(timezone.utc).isoformat()

    def record_miss(self) -> None:
        """Record a call that completed without a result."""
        self.calls += 1
        self.misses += 1
        self.last_call_time = datetime.now(timezone.utc).isoformat()

    def record_failure(self, error: str) -> None:
        self.calls += 1
        self.failures += 1
        self.last_error = error
        self.last_call_time = datetime.now(timezone.utc).isoformat()

    def to_dict(self) -> dict[str, Any]:
        return {
            "calls": self.calls,
            "successes": self.successes,
            "misses": self.misses,
            "failures": self.failures,
            "cache_hits": self.cache_hits,
            "last_call_time": self.last_call_time,
            "last_error": self.last_error,
        }


class BasePhoneticService(ABC):
    """Phonetic-transcription lookup service."""

    __slots__ = ("_stats",)

    def __init__(self):
        self._stats = ServiceStats()

    @property
    def stats(self) -> ServiceStats:
        return self._stats

    @property
    @abstractmethod
    def service_name(self) -> str:
        pass

    @abstractmethod
    async def lookup(self, word: str) -> PhoneticResult:
        """Look up transcriptions for a word.

        Returns source="none" when the word has no transcription.

        Raises:
            EnrichmentError: If the service could not be reached.
        """
        pass

    async def close(self) -> None:
        return None

    def get_info(self) -> dict[str, Any]:
        return {"service": self.service_name, "stats": self._stats.to_dict()}


class BaseLinguisticService(ABC):
    """Linguistic-data generation service."""

    __slots__ = ("_stats",)

    def __init__(self):
        self._stats = ServiceStats()

    @property
    def stats(self) -> ServiceStats:
        return self._stats

    @property
    @abstractmethod
    def service_name(self) -> str:
        pass

    @abstractmethod
    async def generate(self, request: LinguisticRequest) -> LinguisticResult:
        """Generate linguistic data.

        Failures are reported as LinguisticResult(success=False).
        """
        pass

    async def close(self) -> None:
        return None

    def get_info(self) -> dict[str, Any]:
        return {"service": self.service_name, "stats": self._stats.to_dict()}
