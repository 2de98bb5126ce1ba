"""Schema mapping data models.

Defines the canonical vocabulary fields and the ordered column-name
aliases used to find them in loosely-labelled source rows.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from voca.ingestion.pipeline.ingestion_models import CourseKind


class VocabField(str, Enum):
    """Canonical record fields a source column can map to."""

    HEADWORD = "headword"
    PHRASE = "phrase"
    MEANING = "meaning"
    TRANSLATION = "translation"
    PRONUNCIATION = "pronunciation"
    EXAMPLE = "example"
    EXPLANATION = "explanation"


# Literal header labels. A key value equal to one of these means a header
# row was parsed as data.
HEADER_LABELS: frozenset[str] = frozenset({"Word", "word", "Collocation", "collocation"})

# "_1".."_5" are the labels spreadsheet CSV exports get when the header
# row is blank or duplicated.
KEY_ALIASES = ("Word", "word", "_1", "Collocation", "collocation")


@dataclass(slots=True)
class FieldAliases:
    """Ordered list of source column names for one canonical field.

    Attributes:
        target_field: Canonical field these aliases resolve.
        aliases: Column names, tried in order. First non-empty value wins.
    """

    target_field: VocabField
    aliases: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "target_field": self.target_field.value,
            "aliases": list(self.aliases),
        }


@dataclass(slots=True)
class CourseSchema:
    """Complete alias table for one course kind.

    Attributes:
        kind: Record variant this schema produces.
        key_field: Field holding the headword or phrase.
        field_aliases: Alias lists for every field, key field included.
        header_labels: Key values that mark a stray header row.
    """

    kind: CourseKind
    key_field: VocabField
    field_aliases: list[FieldAliases] = field(default_factory=list)
    header_labels: frozenset[str] = HEADER_LABELS

    def aliases_for(self, target_field: VocabField) -> tuple[str, ...]:
        """Get aliases for a target field (empty if unmapped)."""
        for mapping in self.field_aliases:
            if mapping.target_field == target_field:
                return mapping.aliases
        return ()

    def with_aliases(self, target_field: VocabField, aliases: tuple[str, ...]) -> CourseSchema:
        """Return a copy with one field's aliases replaced."""
        updated = [m for m in self.field_aliases if m.target_field != target_field]
        updated.append(FieldAliases(target_field, tuple(aliases)))
        return CourseSchema(
            kind=self.kind,
            key_field=self.key_field,
            field_aliases=updated,
            header_labels=self.header_labels,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "key_field": self.key_field.value,
            "field_aliases": [m.to_dict() for m in self.field_aliases],
            "header_labels": sorted(self.header_labels),
        }


WORD_SCHEMA = CourseSchema(
    kind=CourseKind.WORD,
    key_field=VocabField.HEADWORD,
    field_aliases=[
        FieldAliases(VocabField.HEADWORD, KEY_ALIASES),
        FieldAliases(VocabField.MEANING, ("Meaning", "meaning", "_2")),
        FieldAliases(VocabField.TRANSLATION, ("Translation", "translation", "_5")),
        FieldAliases(
            VocabField.PRONUNCIATION,
            ("Pronounciation", "Pronunciation", "pronunciation", "_3"),
        ),
        FieldAliases(
            VocabField.EXAMPLE,
            ("Example sentence", "Example", "example", "_4"),
        ),
    ],
)

PHRASE_SCHEMA = CourseSchema(
    kind=CourseKind.PHRASE,
    key_field=VocabField.PHRASE,
    field_aliases=[
        FieldAliases(VocabField.PHRASE, KEY_ALIASES),
        FieldAliases(VocabField.MEANING, ("Meaning", "meaning", "_2")),
        FieldAliases(VocabField.EXPLANATION, ("Explanation", "explanation", "_3")),
        FieldAliases(VocabField.EXAMPLE, ("Example", "example", "_4")),
        FieldAliases(VocabField.TRANSLATION, ("Translation", "translation", "_5")),
    ],
)

DEFAULT_SCHEMAS: dict[CourseKind, CourseSchema] = {
    CourseKind.WORD: WORD_SCHEMA,
    CourseKind.PHRASE: PHRASE_SCHEMA,
}
