"""
Domain models for the retrieval pipeline.
"""

from docsearch.models.cache import CacheEntry
from docsearch.models.candidate import CandidateVector, MMRResult, StoredVector
from docsearch.models.stats import VectorStoreStats

__all__ = [
    "CacheEntry",
    "CandidateVector",
    "MMRResult",
    "StoredVector",
    "VectorStoreStats",
]
