"""Ingestion system configuration.

Configuration for the course registry, storage backends, and enrichment
services. Everything can be loaded from environment variables (and an
optional .env file).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any

from dotenv import load_dotenv

from voca.ingestion.pipeline.ingestion_models import CourseKind


def _parse_bool(value: str | None, default: bool = True) -> bool:
    """Parse boolean from environment variable."""
    if not value:
        return default
    return value.lower() in ("true", "1", "yes", "on")


def _parse_float(value: str | None, default: float) -> float:
    """Parse float from environment variable."""
    try:
        return float(value) if value else default
    except ValueError:
        return default


def _parse_int(value: str | None, default: int) -> int:
    """Parse int from environment variable."""
    try:
        return int(value) if value else default
    except ValueError:
        return default


@dataclass(slots=True)
class CourseConfig:
    """One course known to the pipeline.

    Attributes:
        name: Short name used in blob keys and by the admin UI (e.g. "CSAT").
        course_id: Identifier used for course metadata (e.g. "수능").
        kind: Canonical record variant for this course.
        level: Difficulty label passed to linguistic generation.
        path: Document-store collection path holding the course's days.
    """

    name: str
    course_id: str
    kind: CourseKind = CourseKind.WORD
    level: str = "TOEIC"
    path: str = ""

    @property
    def has_path(self) -> bool:
        return bool(self.path)

    def day_path(self, day: int) -> str:
        """Collection path for one day slot."""
        return f"{self.path}/Day{day}"

    def blob_key(self, day: int) -> str:
        """Blob-store key for the slot's source backup."""
        return f"csv/{self.name}/Day{day}.csv"

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "course_id": self.course_id,
            "kind": self.kind.value,
            "level": self.level,
            "path": self.path,
        }


def default_courses() -> dict[str, CourseConfig]:
    """Built-in course registry. Paths come from COURSE_PATH_<NAME>."""
    courses = [
        CourseConfig("CSAT", "수능", CourseKind.WORD, "CSAT"),
        CourseConfig("IELTS", "IELTS", CourseKind.WORD, "IELTS"),
        CourseConfig("TOEFL", "TOEFL", CourseKind.WORD, "TOEFL"),
        CourseConfig("TOEIC", "TOEIC", CourseKind.WORD, "TOEIC"),
        CourseConfig("TOEIC_SPEAKING", "TOEIC_SPEAKING", CourseKind.WORD, "TOEIC"),
        CourseConfig("OPIC", "OPIC", CourseKind.WORD, "OPIC"),
        CourseConfig("COLLOCATION", "COLLOCATION", CourseKind.PHRASE, "COLLOCATION"),
    ]
    return {c.name: c for c in courses}


@dataclass(slots=True)
class StorageConfig:
    """Configuration for the document and blob stores."""

    # Document store (empty = in-memory)
    redis_url: str = ""
    redis_prefix: str = "voca"
    metadata_collection: str = "courseMetadata"

    # Blob store (empty bucket = in-memory)
    blob_bucket: str = ""
    blob_prefix: str = ""
    aws_region: str = "us-east-1"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary (excludes connection secrets)."""
        return {
            "document_backend": "redis" if self.redis_url else "memory",
            "redis_prefix": self.redis_prefix,
            "metadata_collection": self.metadata_collection,
            "blob_backend": "s3" if self.blob_bucket else "memory",
            "blob_bucket": self.blob_bucket,
            "blob_prefix": self.blob_prefix,
            "aws_region": self.aws_region,
        }


@dataclass(slots=True)
class EnrichmentConfig:
    """Configuration for phonetic lookup and linguistic generation."""

    enabled: bool = True

    # Wiktionary phonetic lookup
    phonetic_enabled: bool = True
    phonetic_timeout: float = 8.0
    phonetic_cache_size: int = 500

    # OpenAI linguistic generation (no key = disabled)
    openai_api_key: str = ""
    linguistic_model: str = "gpt-4o-mini"
    linguistic_temperature: float = 0.7
    linguistic_max_tokens: int = 500

    @property
    def linguistic_enabled(self) -> bool:
        return self.enabled and bool(self.openai_api_key)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary (excludes API keys)."""
        return {
            "enabled": self.enabled,
            "phonetic_enabled": self.phonetic_enabled,
            "phonetic_timeout": self.phonetic_timeout,
            "phonetic_cache_size": self.phonetic_cache_size,
            "linguistic_enabled": self.linguistic_enabled,
            "linguistic_model": self.linguistic_model,
            "linguistic_temperature": self.linguistic_temperature,
            "linguistic_max_tokens": self.linguistic_max_tokens,
        }


@dataclass(slots=True)
class IngestionConfig:
    """Main ingestion system configuration.

    Combines the course registry with storage and enrichment
    sub-configurations. Can be loaded from environment variables.
    """

    courses: dict[str, CourseConfig] = field(default_factory=default_courses)
    storage: StorageConfig = field(default_factory=StorageConfig)
    enrichment: EnrichmentConfig = field(default_factory=EnrichmentConfig)

    # Progress tracking
    progress_interval: int = 10  # Emit insert progress every N records

    # Batch behaviour
    continue_on_error: bool = False  # Record fatal slot errors and keep going
    default_sheet_range: str = "Sheet1!A:E"

    debug_mode: bool = False

    def get_course(self, course: str) -> CourseConfig | None:
        """Look up a course by short name or by metadata course id."""
        if course in self.courses:
            return self.courses[course]
        for config in self.courses.values():
            if config.course_id == course:
                return config
        return None

    @classmethod
    def from_env(cls, env_file: str | None = None) -> IngestionConfig:
        """Load configuration from environment variables.

        Environment variables:
            COURSE_PATH_<NAME>: Collection path per course
                (CSAT, IELTS, TOEFL, TOEIC, TOEIC_SPEAKING, OPIC, COLLOCATION)

            # Storage
            REDIS_URL: Redis URL for the document store
            REDIS_PREFIX: Key prefix for stored collections
            BLOB_BUCKET: S3 bucket for source backups
            BLOB_PREFIX: Key prefix inside the bucket
            AWS_REGION: AWS region for S3

            # Enrichment
            ENRICHMENT_ENABLED: Enable the enrichment stage
            PHONETIC_LOOKUP_ENABLED: Enable Wiktionary IPA lookup
            PHONETIC_TIMEOUT: Lookup timeout in seconds
            OPENAI_API_KEY: Key for linguistic generation
            LINGUISTIC_MODEL: Chat model name

            # Pipeline
            INGESTION_PROGRESS_INTERVAL: Records between progress events
            INGESTION_CONTINUE_ON_ERROR: Keep going after a failed slot
            INGESTION_DEBUG: Debug mode

        Args:
            env_file: Optional .env file to load first. Existing
                environment variables win.
        """
        load_dotenv(env_file)

        courses = default_courses()
        for name, course in courses.items():
            course.path = os.getenv(f"COURSE_PATH_{name}", "")

        storage = StorageConfig(
            redis_url=os.getenv("REDIS_URL", ""),
            redis_prefix=os.getenv("REDIS_PREFIX", "voca"),
            metadata_collection=os.getenv("METADATA_COLLECTION", "courseMetadata"),
            blob_bucket=os.getenv("BLOB_BUCKET", ""),
            blob_prefix=os.getenv("BLOB_PREFIX", ""),
            aws_region=os.getenv("AWS_REGION", "us-east-1"),
        )

        enrichment = EnrichmentConfig(
            enabled=_parse_bool(os.getenv("ENRICHMENT_ENABLED"), True),
            phonetic_enabled=_parse_bool(os.getenv("PHONETIC_LOOKUP_ENABLED"), True),
            phonetic_timeout=_parse_float(os.getenv("PHONETIC_TIMEOUT"), 8.0),
            phonetic_cache_size=_parse_int(os.getenv("PHONETIC_CACHE_SIZE"), 500),
            openai_api_key=os.getenv("OPENAI_API_KEY", ""),
            linguistic_model=os.getenv("LINGUISTIC_MODEL", "gpt-4o-mini"),
            linguistic_temperature=_parse_float(os.getenv("LINGUISTIC_TEMPERATURE"), 0.7),
            linguistic_max_tokens=_parse_int(os.getenv("LINGUISTIC_MAX_TOKENS"), 500),
        )

        return cls(
            courses=courses,
            storage=storage,
            enrichment=enrichment,
            progress_interval=_parse_int(os.getenv("INGESTION_PROGRESS_INTERVAL"), 10),
            continue_on_error=_parse_bool(os.getenv("INGESTION_CONTINUE_ON_ERROR"), False),
            default_sheet_range=os.getenv("SHEET_DEFAULT_RANGE", "Sheet1!A:E"),
            debug_mode=_parse_bool(os.getenv("INGESTION_DEBUG"), False),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "courses": {name: c.to_dict() for name, c in self.courses.items()},
            "storage": self.storage.to_dict(),
            "enrichment": self.enrichment.to_dict(),
            "progress_interval": self.progress_interval,
            "continue_on_error": self.continue_on_error,
            "default_sheet_range": self.default_sheet_range,
            "debug_mode": self.debug_mode,
        }
