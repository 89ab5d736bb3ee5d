"""
Retrieval configuration settings.

Manages candidate pool sizing, similarity thresholds and the MMR
relevance/diversity trade-off.

Dependencies: pydantic, pydantic_settings
System role: Retrieval pipeline configuration for RetrievalService
"""

from pydantic import Field
from pydantic_settings import BaseSettings


class RetrievalSettings(BaseSettings):
    """Similarity scan and MMR reranking configuration."""

    default_top_k: int = Field(default=10, description="Number of results returned by search", ge=1)
    mmr_lambda: float = Field(
        default=0.5,
        description="Trade-off between relevance (1.0) and diversity (0.0)",
        ge=0.0,
        le=1.0,
    )
    candidate_multiplier: int = Field(
        default=3,
        description="Candidate pool size for reranking is top_k * candidate_multiplier",
        ge=1,
    )
    min_similarity: float = Field(
        default=0.5,
        description="Minimum cosine similarity for a stored vector to become a candidate",
        ge=-1.0,
        le=1.0,
    )
    cache_results: bool = Field(
        default=True,
        description="Cache final ranked results per query",
    )

    class Config:
        """Pydantic config."""

        env_prefix = "RETRIEVAL_"
        case_sensitive = False
