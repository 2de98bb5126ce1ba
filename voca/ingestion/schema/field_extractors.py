"""Field normalizer for loosely-labelled vocabulary rows.

Resolves each canonical field by walking its ordered alias list and
builds the course-appropriate canonical record.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from voca.ingestion.pipeline.ingestion_models import (
    CanonicalRecord,
    CourseKind,
    PhraseRecord,
    RawRow,
    WordRecord,
)
from voca.ingestion.schema.schema_models import (
    DEFAULT_SCHEMAS,
    CourseSchema,
    VocabField,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class NormalizationResult:
    """Records produced from a row sequence plus the count of dropped rows."""

    records: list[CanonicalRecord] = field(default_factory=list)
    skipped: int = 0

    def __len__(self) -> int:
        return len(self.records)


class FieldNormalizer:
    """Maps raw rows onto canonical records.

    Supports:
    - Ordered alias lookup per field (first non-empty value wins)
    - Trimming of every extracted value
    - Skipping of blank and stray header rows
    - Per-instance alias overrides
    """

    __slots__ = ("_schemas",)

    def __init__(self, schemas: dict[CourseKind, CourseSchema] | None = None):
        """Initialize with alias tables.

        Args:
            schemas: Alias table per course kind. Defaults to the built-in
                word and phrase schemas.
        """
        self._schemas = dict(DEFAULT_SCHEMAS)
        if schemas:
            self._schemas.update(schemas)

    def schema_for(self, kind: CourseKind) -> CourseSchema:
        return self._schemas[kind]

    def extract(
        self,
        row: RawRow,
        target_field: VocabField,
        schema: CourseSchema,
    ) -> str:
        """Extract a single field value from a row.

        Args:
            row: Source row.
            target_field: Canonical field to resolve.
            schema: Alias table to use.

        Returns:
            Trimmed value of the first non-empty alias, or "".
        """
        for alias in schema.aliases_for(target_field):
            value = _clean(row.get(alias))
            if value:
                return value
        return ""

    def normalize(self, row: RawRow, kind: CourseKind) -> CanonicalRecord | None:
        """Build one canonical record.

        Args:
            row: Source row.
            kind: Course kind selecting the record variant.

        Returns:
            WordRecord / PhraseRecord, or None for blank and header rows.
        """
        schema = self._schemas[kind]
        key = self.extract(row, schema.key_field, schema)

        if not key or key in schema.header_labels:
            return None

        if kind == CourseKind.PHRASE:
            return PhraseRecord(
                phrase=key,
                meaning=self.extract(row, VocabField.MEANING, schema),
                explanation=self.extract(row, VocabField.EXPLANATION, schema),
                example=self.extract(row, VocabField.EXAMPLE, schema),
                translation=self.extract(row, VocabField.TRANSLATION, schema),
            )

        return WordRecord(
            headword=key,
            meaning=self.extract(row, VocabField.MEANING, schema),
            translation=self.extract(row, VocabField.TRANSLATION, schema),
            pronunciation=self.extract(row, VocabField.PRONUNCIATION, schema),
            example=self.extract(row, VocabField.EXAMPLE, schema),
        )

    def normalize_all(self, rows: list[RawRow], kind: CourseKind) -> NormalizationResult:
        """Normalize rows in source order, counting dropped rows."""
        result = NormalizationResult()
        for row in rows:
            record = self.normalize(row, kind)
            if record is None:
                result.skipped += 1
                continue
            result.records.append(record)

        if result.skipped:
            logger.debug(f"Skipped {result.skipped} blank/header rows")
        return result


def _clean(value: Any) -> str:
    """Coerce a cell to a trimmed string."""
    if value is None:
        return ""
    return str(value).strip()


def create_normalizer(schemas: dict[CourseKind, CourseSchema] | None = None) -> FieldNormalizer:
    """Factory function for field normalizer.

    Args:
        schemas: Optional alias table overrides.

    Returns:
        Configured FieldNormalizer.
    """
    return FieldNormalizer(schemas)
