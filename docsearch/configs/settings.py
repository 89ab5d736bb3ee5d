"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.
Provides a cached factory for callers that wire the retrieval pipeline.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from docsearch.configs.base import BaseSettings
from docsearch.configs.cache import CacheSettings
from docsearch.configs.embedding import EmbeddingSettings
from docsearch.configs.retrieval import RetrievalSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    # Aggregated settings
    cache: CacheSettings = CacheSettings()
    retrieval: RetrievalSettings = RetrievalSettings()
    embedding: EmbeddingSettings = EmbeddingSettings()


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached for the lifetime of the process.
    Environment variables loaded once at first call.

    Returns:
        Settings: Application settings instance

    Usage:
        from docsearch.configs import get_settings
        settings = get_settings()
    """
    return Settings()
