"""
Vector cache configuration settings.

Expiration policies for the two cache entry classes (embeddings and
search results) plus the optional memory budget.

Dependencies: pydantic, pydantic_settings
System role: Cache lifetime configuration threaded into VectorCache
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from docsearch.configs.base import BaseSettings


class CacheSettings(BaseSettings):
    """Embedding and search-result cache configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CACHE_",
        case_sensitive=False,
        extra="ignore",
    )

    embedding_ttl_seconds: float = Field(
        default=30 * 24 * 60 * 60,
        description="Absolute lifetime of a cached embedding (default 30 days)",
        gt=0,
    )
    results_ttl_seconds: float = Field(
        default=15 * 60,
        description="Absolute lifetime of cached search results (default 15 minutes)",
        gt=0,
    )
    results_sliding_window_seconds: float | None = Field(
        default=5 * 60,
        description="Sliding window refreshed on each result cache hit (None disables)",
        gt=0,
    )
    size_limit: int | None = Field(
        default=None,
        description="Approximate memory budget in bytes (None for unbounded)",
        gt=0,
    )
    lock_stripes: int = Field(
        default=16,
        description="Number of lock stripes guarding cache entries",
        ge=1,
        le=1024,
    )
