"""
Embedding provider configuration settings.

Settings for the Google Gemini embedding client, dimension validation
bounds and retry policy for transient provider failures.

Dependencies: pydantic_settings
System role: Embedding provider configuration
"""

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings


class EmbeddingSettings(BaseSettings):
    """Embedding provider configuration."""

    model: str = Field(
        default="models/gemini-embedding-001",
        description="Google Gemini embedding model ID",
    )
    dimension: int = Field(
        default=768,
        description="Output dimensionality requested from the provider",
        ge=1,
    )
    google_api_key: SecretStr | None = Field(
        default=None,
        description="Google API key; the provider is unavailable without it",
    )
    min_dimension: int = Field(
        default=256,
        description="Smallest accepted embedding dimension",
        ge=1,
    )
    max_dimension: int = Field(
        default=4096,
        description="Largest accepted embedding dimension",
        ge=1,
    )
    max_attempts: int = Field(
        default=3,
        description="Attempts per embedding call before giving up",
        ge=1,
    )
    retry_initial_wait: float = Field(
        default=1.0,
        description="Initial backoff between attempts in seconds",
        ge=0.0,
    )
    retry_max_wait: float = Field(
        default=30.0,
        description="Maximum backoff between attempts in seconds",
        ge=0.0,
    )

    class Config:
        """Pydantic config for environment variable loading."""

        env_prefix = "EMBEDDING_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"
