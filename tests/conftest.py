"""
Shared test fixtures and configuration for entire test suite.

Provides: Fake clock, settings with test-friendly bounds, embedding provider
and storage doubles, sample 2-D vectors
Dependencies: pytest, numpy
System role: Test infrastructure and fixture management
"""

from unittest.mock import MagicMock

import numpy as np
import pytest

from docsearch.boundary.cache.vector_cache import VectorCache
from docsearch.boundary.storage.vector_store import InMemoryVectorStore
from docsearch.configs.cache import CacheSettings
from docsearch.configs.embedding import EmbeddingSettings
from docsearch.configs.retrieval import RetrievalSettings
from docsearch.configs.settings import Settings
from docsearch.models.candidate import CandidateVector


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    """Provide a clock that only moves when a test advances it."""
    return FakeClock()


@pytest.fixture
def cache_settings() -> CacheSettings:
    """Provide short, round-number cache lifetimes."""
    return CacheSettings(
        embedding_ttl_seconds=100.0,
        results_ttl_seconds=60.0,
        results_sliding_window_seconds=20.0,
    )


@pytest.fixture
def vector_cache(cache_settings: CacheSettings, fake_clock: FakeClock) -> VectorCache:
    """Provide VectorCache driven by the fake clock."""
    return VectorCache(cache_settings, clock=fake_clock)


@pytest.fixture
def test_settings(cache_settings: CacheSettings) -> Settings:
    """
    Provide settings accepting 2-D embeddings.

    Returns:
        Settings: min_dimension lowered so small test vectors validate
    """
    return Settings(
        cache=cache_settings,
        retrieval=RetrievalSettings(min_similarity=-1.0),
        embedding=EmbeddingSettings(min_dimension=1, google_api_key=None),
    )


@pytest.fixture
def mock_provider() -> MagicMock:
    """
    Create mock EmbeddingProvider.

    Returns:
        MagicMock: embed() returns the query vector [1, 0]
    """
    provider = MagicMock()
    provider.embed = MagicMock(return_value=np.array([1.0, 0.0], dtype=np.float32))
    return provider


@pytest.fixture
def scenario_vectors() -> dict[str, list[float]]:
    """Query, a close match, its near-duplicate and an orthogonal vector."""
    return {
        "query": [1.0, 0.0],
        "v1": [1.0, 0.0],
        "v2": [0.99, 0.1],
        "v3": [0.0, 1.0],
    }


@pytest.fixture
def scenario_candidates(scenario_vectors: dict[str, list[float]]) -> list[CandidateVector]:
    """Candidate pool ordered by upstream score (v1 0.9, v2 0.85, v3 0.4)."""
    return [
        CandidateVector("v1", np.array(scenario_vectors["v1"], dtype=np.float32), 0.9),
        CandidateVector("v2", np.array(scenario_vectors["v2"], dtype=np.float32), 0.85),
        CandidateVector("v3", np.array(scenario_vectors["v3"], dtype=np.float32), 0.4),
    ]


@pytest.fixture
def populated_store(scenario_vectors: dict[str, list[float]]) -> InMemoryVectorStore:
    """
    Create InMemoryVectorStore holding the three scenario vectors.

    Returns:
        InMemoryVectorStore: v1/v2 tagged "finance", v3 tagged "legal"
    """
    store = InMemoryVectorStore()
    store.upsert("v1", scenario_vectors["v1"], {"category": "finance"})
    store.upsert("v2", scenario_vectors["v2"], {"category": "finance"})
    store.upsert("v3", scenario_vectors["v3"], {"category": "legal"})
    return store
