"""
Core retrieval logic module.

Contains the exception hierarchy, shared vector math, the linear
similarity scanner and the MMR reranker.
"""

from docsearch.core.exceptions import (
    DocSearchException,
    ValidationError,
    EmbeddingDimensionError,
    EmbeddingError,
    VectorStoreError,
    CacheError,
    OperationCancelledError,
)
from docsearch.core.vector_math import (
    Vector,
    cosine_similarity,
    to_vector,
    validate_embedding_dimensions,
)
from docsearch.core.cancellation import CancellationToken

# Retrieval algorithms
from docsearch.core.similarity_scanner import NearestNeighborSearch, SimilarityScanner
from docsearch.core.mmr_reranker import MMRReranker

__all__ = [
    # Exceptions
    "DocSearchException",
    "ValidationError",
    "EmbeddingDimensionError",
    "EmbeddingError",
    "VectorStoreError",
    "CacheError",
    "OperationCancelledError",
    # Vector math
    "Vector",
    "cosine_similarity",
    "to_vector",
    "validate_embedding_dimensions",
    "CancellationToken",
    # Retrieval algorithms
    "NearestNeighborSearch",
    "SimilarityScanner",
    "MMRReranker",
]
