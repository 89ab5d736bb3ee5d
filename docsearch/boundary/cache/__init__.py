"""
Vector cache boundary layer.

Dependencies: numpy
System role: Content-addressed embedding and result cache
"""

from docsearch.boundary.cache.vector_cache import (
    EMBEDDING_PREFIX,
    SEARCH_PREFIX,
    VectorCache,
    embedding_key,
    fingerprint,
    results_key,
)

__all__ = [
    "EMBEDDING_PREFIX",
    "SEARCH_PREFIX",
    "VectorCache",
    "embedding_key",
    "fingerprint",
    "results_key",
]
