"""Tests for column-alias normalization."""

import pytest

from voca.ingestion.pipeline.ingestion_models import CourseKind, PhraseRecord, WordRecord
from voca.ingestion.schema import (
    PHRASE_SCHEMA,
    WORD_SCHEMA,
    FieldNormalizer,
    VocabField,
    create_normalizer,
)


class TestWordNormalization:
    """Test WordRecord extraction."""

    @pytest.fixture
    def normalizer(self):
        return create_normalizer()

    def test_standard_headers(self, normalizer):
        record = normalizer.normalize(
            {
                "Word": " decide ",
                "Meaning": "결정하다",
                "Pronunciation": "/dɪˈsaɪd/",
                "Example sentence": "We decide today.",
                "Translation": "우리는 오늘 결정한다.",
            },
            CourseKind.WORD,
        )

        assert isinstance(record, WordRecord)
        assert record.headword == "decide"
        assert record.pronunciation == "/dɪˈsaɪd/"
        assert record.example == "We decide today."
        assert record.translation == "우리는 오늘 결정한다."

    def test_misspelled_pronunciation_header_preferred(self, normalizer):
        """First alias with a non-empty value wins."""
        record = normalizer.normalize(
            {"Word": "apple", "Pronounciation": "/ˈæpəl/", "Pronunciation": "/other/"},
            CourseKind.WORD,
        )
        assert record.pronunciation == "/ˈæpəl/"

    def test_empty_alias_falls_through(self, normalizer):
        record = normalizer.normalize(
            {"Word": "apple", "Example sentence": "  ", "Example": "An apple a day."},
            CourseKind.WORD,
        )
        assert record.example == "An apple a day."

    def test_positional_aliases(self, normalizer):
        record = normalizer.normalize(
            {"": "1", "_1": "apple", "_2": "사과", "_3": "/ˈæpəl/", "_4": "An apple.", "_5": "사과 하나"},
            CourseKind.WORD,
        )

        assert record.headword == "apple"
        assert record.meaning == "사과"
        assert record.pronunciation == "/ˈæpəl/"
        assert record.example == "An apple."
        assert record.translation == "사과 하나"

    def test_missing_optional_fields_default_empty(self, normalizer):
        record = normalizer.normalize({"word": "apple"}, CourseKind.WORD)

        assert record.meaning == ""
        assert record.translation == ""
        assert record.synonyms == []
        assert record.word_forms is None

    @pytest.mark.parametrize("key", ["Word", "word", "Collocation", "collocation"])
    def test_header_row_skipped(self, normalizer, key):
        assert normalizer.normalize({"Word": key, "Meaning": "Meaning"}, CourseKind.WORD) is None

    def test_blank_key_skipped(self, normalizer):
        assert normalizer.normalize({"Word": "   ", "Meaning": "뜻"}, CourseKind.WORD) is None

    def test_normalize_all_keeps_order_and_counts_skips(self, normalizer, word_rows):
        result = normalizer.normalize_all(word_rows, CourseKind.WORD)

        assert [r.headword for r in result.records] == ["decide", "water", "schedule"]
        assert result.skipped == 1
        assert len(result) == 3


class TestPhraseNormalization:
    """Test PhraseRecord extraction."""

    def test_collocation_columns(self):
        normalizer = FieldNormalizer()
        record = normalizer.normalize(
            {
                "Collocation": "make a decision",
                "Meaning": "결정을 내리다",
                "Explanation": "Used for formal choices.",
                "Example": "She made a decision.",
                "Translation": "그녀는 결정을 내렸다.",
            },
            CourseKind.PHRASE,
        )

        assert isinstance(record, PhraseRecord)
        assert record.phrase == "make a decision"
        assert record.explanation == "Used for formal choices."
        assert record.example == "She made a decision."

    def test_phrase_positional_explanation(self):
        record = FieldNormalizer().normalize(
            {"_1": "take a break", "_2": "쉬다", "_3": "Informal.", "_4": "Let's take a break."},
            CourseKind.PHRASE,
        )

        assert record.explanation == "Informal."
        assert record.example == "Let's take a break."

    def test_phrase_document_shape(self):
        record = FieldNormalizer().normalize({"Collocation": "by and large"}, CourseKind.PHRASE)
        doc = record.to_document()

        assert doc["collocation"] == "by and large"
        assert set(doc) == {"collocation", "meaning", "explanation", "example", "translation", "createdAt"}


class TestAliasOverrides:
    """Test per-instance alias tables."""

    def test_override_meaning_aliases(self):
        schema = WORD_SCHEMA.with_aliases(VocabField.MEANING, ("Definition",))
        normalizer = FieldNormalizer({CourseKind.WORD: schema})

        record = normalizer.normalize(
            {"Word": "apple", "Definition": "a fruit", "Meaning": "ignored"},
            CourseKind.WORD,
        )

        assert record.meaning == "a fruit"
        # Defaults untouched
        assert WORD_SCHEMA.aliases_for(VocabField.MEANING) == ("Meaning", "meaning", "_2")
        assert normalizer.schema_for(CourseKind.PHRASE) is PHRASE_SCHEMA

    def test_schema_to_dict(self):
        data = PHRASE_SCHEMA.to_dict()

        assert data["kind"] == "phrase"
        assert data["key_field"] == "phrase"
        assert "Collocation" in data["header_labels"]
