"""Ingestion configuration."""

from voca.ingestion.config.ingestion_config import (
    CourseConfig,
    EnrichmentConfig,
    IngestionConfig,
    StorageConfig,
    default_courses,
)

__all__ = [
    "CourseConfig",
    "EnrichmentConfig",
    "IngestionConfig",
    "StorageConfig",
    "default_courses",
]
