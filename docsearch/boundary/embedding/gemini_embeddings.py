"""
Gemini query embeddings pinned to the configured dimension.

Stored vectors and query vectors must agree on dimension for cosine
similarity to be meaningful, and GoogleGenerativeAIEmbeddings ignores
output_dimensionality passed to its constructor, so it is applied per call.

Dependencies: langchain_google_genai, python-dotenv, docsearch.configs
System role: Default embedding provider backend
"""

import logging

from dotenv import load_dotenv
from langchain_google_genai import GoogleGenerativeAIEmbeddings

from docsearch.configs.embedding import EmbeddingSettings
from docsearch.core.exceptions import EmbeddingError

load_dotenv()

logger = logging.getLogger(__name__)


class FixedDimensionEmbeddings(GoogleGenerativeAIEmbeddings):
    """Gemini embeddings that always request query_dimension outputs."""

    _query_dimension: int = 768

    def __init__(self, model: str, query_dimension: int, **kwargs) -> None:
        super().__init__(model=model, **kwargs)
        self._query_dimension = query_dimension
        logger.info(
            f"{__name__}:__init__ - Gemini embeddings ready: model={model}, "
            f"dimension={query_dimension}"
        )

    def embed_query(
        self,
        text: str,
        task_type: str | None = "RETRIEVAL_QUERY",
        title: str | None = None,
        output_dimensionality: int | None = None,
    ) -> list[float]:
        """
        Embed search query text.

        Args:
            text: Query text
            task_type: Gemini task type (retrieval query by default)
            title: Optional title
            output_dimensionality: Override for the pinned dimension

        Returns:
            list[float]: Embedding of query_dimension floats
        """
        return super().embed_query(
            text,
            task_type=task_type,
            title=title,
            output_dimensionality=output_dimensionality or self._query_dimension,
        )


def build_gemini_embeddings(settings: EmbeddingSettings) -> FixedDimensionEmbeddings:
    """
    Build the Gemini embedding client from settings.

    Args:
        settings: Embedding provider settings

    Returns:
        FixedDimensionEmbeddings: Ready-to-use LangChain embeddings

    Raises:
        EmbeddingError: If no API key is configured
    """
    if settings.google_api_key is None or not settings.google_api_key.get_secret_value():
        raise EmbeddingError(
            "Embedding provider not configured: EMBEDDING_GOOGLE_API_KEY is not set",
            details={"model": settings.model},
        )

    return FixedDimensionEmbeddings(
        model=settings.model,
        query_dimension=settings.dimension,
        google_api_key=settings.google_api_key,
    )
