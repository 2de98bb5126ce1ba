"""OpenAI linguistic-data generation.

Generates part of speech, synonyms, antonyms, related words and word
forms for a headword through the chat completions API in JSON mode.
A response that fails validation is retried once with a stricter prompt.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Literal

from openai import AsyncOpenAI
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from voca.ingestion.enrichment.base_service import (
    BaseLinguisticService,
    LinguisticRequest,
    LinguisticResult,
)

logger = logging.getLogger(__name__)


DIFFICULTY_BY_LEVEL = {
    "CSAT": "high school level (Korean university entrance exam)",
    "TOEFL": "academic English at university level",
    "TOEIC": "business and workplace English",
    "IELTS": "academic and general English",
    "COLLOCATION": "natural word combinations and phrases",
    "OPIC": "everyday conversational English",
}
DEFAULT_DIFFICULTY = "intermediate English"

PARTS_OF_SPEECH = ("noun", "verb", "adjective", "adverb", "other")


def difficulty_for(course_level: str) -> str:
    return DIFFICULTY_BY_LEVEL.get(course_level, DEFAULT_DIFFICULTY)


class LinguisticPayload(BaseModel):
    """Well-formed generation response."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    part_of_speech: Literal["noun", "verb", "adjective", "adverb", "other"] = Field(
        alias="partOfSpeech"
    )
    synonyms: list[str]
    antonyms: list[str]
    related_words: list[str] = Field(alias="relatedWords")
    word_forms: dict[str, Any] = Field(alias="wordForms")


class LenientLinguisticPayload(BaseModel):
    """Response accepted from the strict re-prompt (missing fields default)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    part_of_speech: str = Field(default="other", alias="partOfSpeech")
    synonyms: list[str] = Field(default_factory=list)
    antonyms: list[str] = Field(default_factory=list)
    related_words: list[str] = Field(default_factory=list, alias="relatedWords")
    word_forms: dict[str, Any] = Field(default_factory=dict, alias="wordForms")

    @field_validator("part_of_speech", mode="before")
    @classmethod
    def _coerce_pos(cls, value: Any) -> str:
        return value if value in PARTS_OF_SPEECH else "other"

    @field_validator("synonyms", "antonyms", "related_words", "word_forms", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any, info) -> Any:
        if value is None:
            return {} if info.field_name == "word_forms" else []
        return value


def _system_prompt(difficulty: str) -> str:
    return f"""You are an expert English linguist and vocabulary educator.
Your task is to generate comprehensive linguistic data for vocabulary learning.
Consider the target audience level: {difficulty}

Rules:
1. Accurately detect the part of speech of the word based on the meaning provided
2. Provide 3-5 high-quality synonyms appropriate for the course level
3. Provide 0-3 antonyms ONLY if they naturally exist (return an empty array otherwise)
4. Provide 3-5 contextually related words (words often used together or in similar contexts)
5. Generate word forms based on the detected part of speech:
   - For verbs: include nounForm, adjectiveForm, adverbForm, gerundForm, pastForm
   - For nouns: include verbForm, adjectiveForm, adverbForm, pluralForm
   - For adjectives: include nounForm, verbForm, adverbForm
   - For adverbs: include nounForm, verbForm, adjectiveForm
6. If a word form doesn't exist naturally in English, omit that field
7. All words should be appropriate for {difficulty} learners"""


def _user_prompt(word: str, meaning: str) -> str:
    return f"""Analyze the word "{word}" (meaning: {meaning}).

Generate linguistic data in JSON format:
{{
  "partOfSpeech": "noun|verb|adjective|adverb|other",
  "synonyms": ["word1", "word2", "word3"],
  "antonyms": ["word1"] or [],
  "relatedWords": ["word1", "word2", "word3"],
  "wordForms": {{
    "base": "{word}",
    "nounForm": "if applicable",
    "verbForm": "if applicable",
    "adjectiveForm": "if applicable",
    "adverbForm": "if applicable",
    "gerundForm": "if verb",
    "pastForm": "if verb",
    "pluralForm": "if noun"
  }}
}}

Important: Only include word form fields that actually exist for this word."""


STRICT_SYSTEM_PROMPT = "You are an English linguist. Provide linguistic data in valid JSON format."


def _strict_user_prompt(word: str, meaning: str) -> str:
    return f"""For the English word "{word}" (meaning: {meaning}), provide:
1. partOfSpeech: What part of speech is this word? (noun, verb, adjective, adverb, or other)
2. synonyms: List 3-5 words with similar meanings
3. antonyms: List 0-3 words with opposite meanings (empty array [] if none exist)
4. relatedWords: List 3-5 words commonly associated with this word
5. wordForms: Different grammatical forms of this word

IMPORTANT: Return valid JSON only. Example format:
{{
  "partOfSpeech": "verb",
  "synonyms": ["determine", "choose", "resolve"],
  "antonyms": ["hesitate"],
  "relatedWords": ["decision", "choice", "option"],
  "wordForms": {{
    "base": "{word}",
    "nounForm": "decision",
    "adjectiveForm": "decisive",
    "adverbForm": "decisively",
    "gerundForm": "deciding",
    "pastForm": "decided"
  }}
}}"""


def _to_result(word: str, payload: LinguisticPayload | LenientLinguisticPayload) -> LinguisticResult:
    word_forms = {k: str(v) for k, v in payload.word_forms.items() if v}
    word_forms["base"] = word
    return LinguisticResult(
        success=True,
        part_of_speech=payload.part_of_speech,
        synonyms=list(payload.synonyms),
        antonyms=list(payload.antonyms),
        related_words=list(payload.related_words),
        word_forms=word_forms,
    )


class OpenAILinguisticService(BaseLinguisticService):
    """Linguistic data via OpenAI chat completions.

    Usage:
        service = OpenAILinguisticService(api_key="sk-...")
        result = await service.generate(LinguisticRequest("decide", "결정하다", "TOEIC"))
    """

    __slots__ = ("_client", "_model", "_temperature", "_strict_temperature", "_max_tokens")

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gpt-4o-mini",
        temperature: float = 0.7,
        max_tokens: int = 500,
        strict_temperature: float = 0.5,
        client: AsyncOpenAI | None = None,
    ):
        """Initialize OpenAI service.

        Args:
            api_key: OpenAI API key (ignored when client is given).
            model: Chat model name.
            temperature: Sampling temperature for the first attempt.
            max_tokens: Completion token limit.
            strict_temperature: Sampling temperature for the strict re-prompt.
            client: Existing AsyncOpenAI client.
        """
        super().__init__()
        self._client = client or AsyncOpenAI(api_key=api_key)
        self._model = model
        self._temperature = temperature
        self._strict_temperature = strict_temperature
        self._max_tokens = max_tokens

    @property
    def service_name(self) -> str:
        return f"openai:{self._model}"

    async def _complete(self, system_prompt: str, user_prompt: str, temperature: float) -> dict | None:
        """Run one JSON-mode completion. None when the model returned no content."""
        response = await self._client.chat.completions.create(
            model=self._model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            response_format={"type": "json_object"},
            temperature=temperature,
            max_tokens=self._max_tokens,
        )
        content = response.choices[0].message.content
        if not content:
            return None
        return json.loads(content)

    async def generate(self, request: LinguisticRequest) -> LinguisticResult:
        """Generate linguistic data for one word."""
        difficulty = difficulty_for(request.course_level)

        try:
            parsed = await self._complete(
                _system_prompt(difficulty),
                _user_prompt(request.word, request.meaning),
                self._temperature,
            )
        except Exception as e:
            logger.error(f"Linguistic: generation failed for '{request.word}': {e}")
            self._stats.record_failure(str(e))
            return LinguisticResult.failure(str(e) or "Unknown error")

        if parsed is None:
            self._stats.record_failure("empty response")
            return LinguisticResult.failure("No response from OpenAI")

        try:
            payload = LinguisticPayload.model_validate(parsed)
        except ValidationError:
            logger.warning(f"Linguistic: invalid response structure for '{request.word}', retrying strict")
            return await self._generate_strict(request)

        self._stats.record_success()
        return _to_result(request.word, payload)

    async def _generate_strict(self, request: LinguisticRequest) -> LinguisticResult:
        """Second attempt with explicit format instructions."""
        try:
            parsed = await self._complete(
                STRICT_SYSTEM_PROMPT,
                _strict_user_prompt(request.word, request.meaning),
                self._strict_temperature,
            )
            if parsed is None:
                self._stats.record_failure("empty response (strict mode)")
                return LinguisticResult.failure("No response from OpenAI (strict mode)")
            payload = LenientLinguisticPayload.model_validate(parsed)
        except Exception as e:
            logger.error(f"Linguistic: strict mode failed for '{request.word}': {e}")
            self._stats.record_failure(str(e))
            return LinguisticResult.failure(str(e) or "Unknown error (strict mode)")

        self._stats.record_success()
        return _to_result(request.word, payload)

    async def close(self) -> None:
        await self._client.close()
