"""Column-alias schema mapping for vocabulary rows.

Maps arbitrarily labelled spreadsheet columns onto the canonical
word / phrase record shapes.
"""

from voca.ingestion.schema.schema_models import (
    DEFAULT_SCHEMAS,
    HEADER_LABELS,
    PHRASE_SCHEMA,
    WORD_SCHEMA,
    CourseSchema,
    FieldAliases,
    VocabField,
)
from voca.ingestion.schema.field_extractors import (
    FieldNormalizer,
    NormalizationResult,
    create_normalizer,
)

__all__ = [
    "DEFAULT_SCHEMAS",
    "HEADER_LABELS",
    "PHRASE_SCHEMA",
    "WORD_SCHEMA",
    "CourseSchema",
    "FieldAliases",
    "VocabField",
    "FieldNormalizer",
    "NormalizationResult",
    "create_normalizer",
]
