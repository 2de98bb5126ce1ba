"""Per-record enrichment.

Fills pronunciation from a phonetic lookup and attaches generated
linguistic data to single-token WordRecords. Failures never propagate;
they are reported on the returned EnrichmentResult.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from voca.ingestion.enrichment.base_service import (
    BaseLinguisticService,
    BasePhoneticService,
    LinguisticRequest,
    PhoneticResult,
)
from voca.ingestion.errors import EnrichmentError
from voca.ingestion.pipeline.ingestion_models import CanonicalRecord, WordRecord

logger = logging.getLogger(__name__)


def format_pronunciation(result: PhoneticResult) -> str:
    """Combine US and UK transcriptions into the stored pronunciation."""
    if result.primary and result.secondary:
        return f"US: {result.primary} | UK: {result.secondary}"
    return result.primary or result.secondary or ""


@dataclass(slots=True)
class EnrichmentResult:
    """Outcome of enriching one record."""

    attempted: bool = False
    pronunciation_found: bool = False
    linguistic_applied: bool = False
    errors: list[EnrichmentError] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return bool(self.errors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "attempted": self.attempted,
            "pronunciation_found": self.pronunciation_found,
            "linguistic_applied": self.linguistic_applied,
            "errors": [str(e) for e in self.errors],
        }


class EnrichmentStage:
    """Sequential phonetic + linguistic enrichment.

    Either service may be None, in which case that step is skipped.
    """

    __slots__ = ("phonetic", "linguistic")

    def __init__(
        self,
        phonetic: BasePhoneticService | None = None,
        linguistic: BaseLinguisticService | None = None,
    ):
        self.phonetic = phonetic
        self.linguistic = linguistic

    @property
    def enabled(self) -> bool:
        return self.phonetic is not None or self.linguistic is not None

    @staticmethod
    def is_eligible(record: CanonicalRecord) -> bool:
        return isinstance(record, WordRecord) and record.is_single_token

    async def enrich(self, record: CanonicalRecord, course_level: str) -> EnrichmentResult:
        """Enrich a record in place.

        Args:
            record: Record to enrich. Only single-token WordRecords are touched.
            course_level: Level tag for linguistic generation (TOEIC, CSAT...).

        Returns:
            EnrichmentResult describing what was applied and what failed.
        """
        result = EnrichmentResult()
        if not self.enabled or not self.is_eligible(record):
            return result

        result.attempted = True

        if self.phonetic is not None and not record.pronunciation:
            try:
                phonetic = await self.phonetic.lookup(record.headword)
                pronunciation = format_pronunciation(phonetic) if phonetic.found else ""
                if pronunciation:
                    record.pronunciation = pronunciation
                    result.pronunciation_found = True
            except Exception as e:
                logger.warning(f"Enrichment: phonetic lookup failed for '{record.headword}': {e}")
                result.errors.append(
                    e if isinstance(e, EnrichmentError) else EnrichmentError(str(e))
                )

        if self.linguistic is not None:
            request = LinguisticRequest(
                word=record.headword,
                meaning=record.meaning,
                course_level=course_level,
            )
            try:
                generated = await self.linguistic.generate(request)
            except Exception as e:
                logger.warning(f"Enrichment: linguistic generation raised for '{record.headword}': {e}")
                result.errors.append(EnrichmentError(str(e)))
            else:
                if generated.success:
                    record.part_of_speech = generated.part_of_speech
                    record.synonyms = list(generated.synonyms)
                    record.antonyms = list(generated.antonyms)
                    record.related_words = list(generated.related_words)
                    record.word_forms = dict(generated.word_forms) or None
                    result.linguistic_applied = True
                else:
                    logger.warning(
                        f"Enrichment: no linguistic data for '{record.headword}': {generated.error}"
                    )
                    result.errors.append(EnrichmentError(generated.error or "generation failed"))

        return result

    async def close(self) -> None:
        if self.phonetic is not None:
            await self.phonetic.close()
        if self.linguistic is not None:
            await self.linguistic.close()

    def get_info(self) -> dict[str, Any]:
        return {
            "phonetic": self.phonetic.get_info() if self.phonetic else None,
            "linguistic": self.linguistic.get_info() if self.linguistic else None,
        }
