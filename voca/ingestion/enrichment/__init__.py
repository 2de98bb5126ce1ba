"""Record enrichment services.

Supported Services:
- Wiktionary: US/UK IPA transcriptions
- OpenAI: part of speech, synonyms, antonyms, related words, word forms
"""

from voca.ingestion.enrichment.base_service import (
    BaseLinguisticService,
    BasePhoneticService,
    LinguisticRequest,
    LinguisticResult,
    PhoneticResult,
    ServiceStats,
)
from voca.ingestion.enrichment.enrichment_stage import (
    EnrichmentResult,
    EnrichmentStage,
    format_pronunciation,
)
from voca.ingestion.enrichment.linguistic_service import OpenAILinguisticService
from voca.ingestion.enrichment.phonetic_service import WiktionaryPhoneticService

__all__ = [
    "BaseLinguisticService",
    "BasePhoneticService",
    "LinguisticRequest",
    "LinguisticResult",
    "PhoneticResult",
    "ServiceStats",
    "EnrichmentResult",
    "EnrichmentStage",
    "format_pronunciation",
    "OpenAILinguisticService",
    "WiktionaryPhoneticService",
]
