"""
Test suite for VectorCache.

Tests key derivation, absolute and sliding expiration, eviction,
fail-open behaviour and the optional size budget. Time is driven by a
fake clock so expiry is deterministic.

System role: Verification of the embedding and result cache
"""

import re
from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from docsearch.boundary.cache.vector_cache import (
    EMBEDDING_PREFIX,
    SEARCH_PREFIX,
    VectorCache,
    embedding_key,
    fingerprint,
    results_key,
)
from docsearch.configs.cache import CacheSettings
from docsearch.core.vector_math import to_vector
from docsearch.models.candidate import MMRResult


class TestCacheKeys:
    """Test suite for fingerprint and key helpers."""

    def test_fingerprint_should_be_unpadded_urlsafe_sha256(self) -> None:
        """Fingerprints are 43 URL-safe base64 characters."""
        # Act
        value = fingerprint("quarterly invoice totals")

        # Assert
        assert re.fullmatch(r"[A-Za-z0-9_-]{43}", value)

    def test_fingerprint_of_empty_string_should_match_known_digest(self) -> None:
        assert fingerprint("") == "47DEQpj8HBSa-_TImW-5JCeuQeRkm5NMpJWZG3hSuFU"

    def test_fingerprint_should_be_deterministic(self) -> None:
        assert fingerprint("invoice") == fingerprint("invoice")
        assert fingerprint("invoice") != fingerprint("Invoice")

    def test_embedding_key_should_use_embedding_prefix(self) -> None:
        assert embedding_key("invoice") == f"{EMBEDDING_PREFIX}{fingerprint('invoice')}"

    def test_results_key_should_include_type_name(self) -> None:
        """A type tag renders as its class name."""
        assert results_key("invoice", MMRResult) == f"{SEARCH_PREFIX}MMRResult:{fingerprint('invoice')}"

    def test_results_keys_should_differ_per_type_tag(self) -> None:
        assert results_key("invoice", "A") != results_key("invoice", "B")


class TestEmbeddingCache:
    """Test suite for embedding entries."""

    def test_get_after_put_should_return_vector(self, vector_cache: VectorCache) -> None:
        # Arrange
        vector_cache.put_embedding("invoice", [0.5, 0.25])

        # Act
        cached = vector_cache.get_embedding("invoice")

        # Assert
        np.testing.assert_array_equal(cached, np.array([0.5, 0.25], dtype=np.float32))

    def test_missing_text_should_return_none(self, vector_cache: VectorCache) -> None:
        assert vector_cache.get_embedding("never stored") is None

    def test_repeated_put_should_keep_single_entry(self, vector_cache: VectorCache) -> None:
        """Putting the same embedding twice is idempotent."""
        vector_cache.put_embedding("invoice", [1.0, 0.0])
        vector_cache.put_embedding("invoice", [1.0, 0.0])

        assert len(vector_cache) == 1
        assert vector_cache.total_size == 8

    def test_stored_vector_should_not_follow_caller_mutation(self, vector_cache: VectorCache) -> None:
        source = np.array([1.0, 0.0], dtype=np.float32)
        vector_cache.put_embedding("invoice", source)

        source[0] = 42.0

        assert vector_cache.get_embedding("invoice")[0] == 1.0

    def test_entry_should_expire_after_ttl(self, vector_cache: VectorCache, fake_clock) -> None:
        """Embeddings live for exactly embedding_ttl_seconds."""
        # Arrange
        vector_cache.put_embedding("invoice", [1.0, 0.0])

        # Act & Assert
        fake_clock.advance(99.0)
        assert vector_cache.get_embedding("invoice") is not None

        fake_clock.advance(1.0)
        assert vector_cache.get_embedding("invoice") is None
        assert len(vector_cache) == 0

    def test_reads_should_not_extend_embedding_expiry(self, vector_cache: VectorCache, fake_clock) -> None:
        """Embedding entries have an absolute expiration only."""
        vector_cache.put_embedding("invoice", [1.0, 0.0])

        fake_clock.advance(90.0)
        vector_cache.get_embedding("invoice")
        fake_clock.advance(10.0)

        assert vector_cache.get_embedding("invoice") is None

    def test_explicit_ttl_should_override_default(self, vector_cache: VectorCache, fake_clock) -> None:
        vector_cache.put_embedding("invoice", [1.0, 0.0], ttl=5.0)

        fake_clock.advance(5.0)

        assert vector_cache.get_embedding("invoice") is None


class TestResultsCache:
    """Test suite for search result entries."""

    def test_get_after_put_should_preserve_order(self, vector_cache: VectorCache) -> None:
        vector_cache.put_results("invoice", MMRResult, ["c", "a", "b"])

        assert vector_cache.get_results("invoice", MMRResult) == ["c", "a", "b"]

    def test_returned_list_should_be_a_copy(self, vector_cache: VectorCache) -> None:
        """Mutating a returned list leaves the cached results intact."""
        vector_cache.put_results("invoice", MMRResult, ["a", "b"])

        first = vector_cache.get_results("invoice", MMRResult)
        first.append("c")

        assert vector_cache.get_results("invoice", MMRResult) == ["a", "b"]

    def test_mutating_returned_metadata_should_not_change_cache(self, vector_cache: VectorCache) -> None:
        """Each read hands out results detached from the cached snapshot."""
        # Arrange
        result = MMRResult(
            id="doc-1",
            vector=to_vector([1.0, 0.0]),
            initial_score=0.9,
            mmr_score=0.45,
            rank=1,
            metadata={"k": 1},
        )
        vector_cache.put_results("invoice", MMRResult, [result])

        # Act
        first = vector_cache.get_results("invoice", MMRResult)
        first[0].metadata["k"] = 999

        # Assert
        again = vector_cache.get_results("invoice", MMRResult)
        assert again[0].metadata == {"k": 1}
        assert again[0].id == "doc-1"
        assert again[0].vector is result.vector

    def test_mutating_source_metadata_after_put_should_not_change_cache(
        self, vector_cache: VectorCache
    ) -> None:
        metadata = {"tags": ["finance"]}
        result = MMRResult(
            id="doc-1",
            vector=to_vector([1.0, 0.0]),
            initial_score=0.9,
            mmr_score=0.45,
            rank=1,
            metadata=metadata,
        )
        vector_cache.put_results("invoice", MMRResult, [result])

        metadata["tags"].append("legal")

        assert vector_cache.get_results("invoice", MMRResult)[0].metadata == {"tags": ["finance"]}

    def test_type_tags_should_not_collide(self, vector_cache: VectorCache) -> None:
        vector_cache.put_results("invoice", "Summary", ["s"])
        vector_cache.put_results("invoice", MMRResult, ["r"])

        assert vector_cache.get_results("invoice", "Summary") == ["s"]
        assert vector_cache.get_results("invoice", MMRResult) == ["r"]

    def test_unread_results_should_expire_at_absolute_ttl(
        self, vector_cache: VectorCache, fake_clock
    ) -> None:
        vector_cache.put_results("invoice", MMRResult, ["a"])

        fake_clock.advance(60.0)

        assert vector_cache.get_results("invoice", MMRResult) is None

    def test_read_hit_should_slide_expiry(self, vector_cache: VectorCache, fake_clock) -> None:
        """Each hit pushes expiry to at least now + sliding window."""
        # Arrange
        vector_cache.put_results("invoice", MMRResult, ["a"])

        # Act
        fake_clock.advance(50.0)
        assert vector_cache.get_results("invoice", MMRResult) == ["a"]
        fake_clock.advance(15.0)

        # Assert
        assert vector_cache.get_results("invoice", MMRResult) == ["a"]

    def test_sliding_window_should_lapse_without_reads(
        self, vector_cache: VectorCache, fake_clock
    ) -> None:
        vector_cache.put_results("invoice", MMRResult, ["a"])
        fake_clock.advance(50.0)
        vector_cache.get_results("invoice", MMRResult)

        fake_clock.advance(20.0)

        assert vector_cache.get_results("invoice", MMRResult) is None

    def test_disabled_sliding_window_should_keep_absolute_expiry(self, fake_clock) -> None:
        cache = VectorCache(
            CacheSettings(results_ttl_seconds=60.0, results_sliding_window_seconds=None),
            clock=fake_clock,
        )
        cache.put_results("invoice", MMRResult, ["a"])

        fake_clock.advance(55.0)
        cache.get_results("invoice", MMRResult)
        fake_clock.advance(5.0)

        assert cache.get_results("invoice", MMRResult) is None


class TestCacheEviction:
    """Test suite for remove, remove_by_prefix and clear."""

    def test_remove_should_evict_entry(self, vector_cache: VectorCache) -> None:
        vector_cache.put_embedding("invoice", [1.0, 0.0])

        vector_cache.remove(embedding_key("invoice"))

        assert vector_cache.get_embedding("invoice") is None
        assert vector_cache.total_size == 0

    def test_remove_should_be_idempotent(self, vector_cache: VectorCache) -> None:
        """Removing a missing key is a no-op."""
        vector_cache.remove(embedding_key("invoice"))
        vector_cache.remove(embedding_key("invoice"))

        assert len(vector_cache) == 0

    def test_remove_by_prefix_should_only_touch_matching_keys(self, vector_cache: VectorCache) -> None:
        # Arrange
        vector_cache.put_embedding("a", [1.0, 0.0])
        vector_cache.put_embedding("b", [0.0, 1.0])
        vector_cache.put_results("a", MMRResult, ["x"])

        # Act
        removed = vector_cache.remove_by_prefix(EMBEDDING_PREFIX)

        # Assert
        assert removed == 2
        assert vector_cache.get_embedding("a") is None
        assert vector_cache.get_results("a", MMRResult) == ["x"]

    def test_clear_should_evict_everything(self, vector_cache: VectorCache) -> None:
        vector_cache.put_embedding("a", [1.0, 0.0])
        vector_cache.put_results("a", MMRResult, ["x", "y"])

        removed = vector_cache.clear()

        assert removed == 2
        assert len(vector_cache) == 0
        assert vector_cache.total_size == 0


class TestCacheFailOpen:
    """Test suite for cache failures behaving as misses."""

    def test_malformed_vector_should_not_be_cached(self, vector_cache: VectorCache, caplog) -> None:
        vector_cache.put_embedding("invoice", None)

        assert vector_cache.get_embedding("invoice") is None
        assert "Cache write skipped" in caplog.text

    def test_non_positive_ttl_should_skip_write(self, vector_cache: VectorCache) -> None:
        vector_cache.put_embedding("invoice", [1.0, 0.0], ttl=0)

        assert len(vector_cache) == 0

    def test_non_string_text_should_read_as_miss(self, vector_cache: VectorCache) -> None:
        assert vector_cache.get_embedding(None) is None
        assert vector_cache.get_results(None, MMRResult) is None


class TestCacheSizeLimit:
    """Test suite for the optional memory budget."""

    def test_oversized_entry_should_be_skipped(self, fake_clock) -> None:
        cache = VectorCache(CacheSettings(size_limit=16), clock=fake_clock)

        cache.put_embedding("wide", [0.0] * 5)

        assert cache.get_embedding("wide") is None

    def test_soonest_expiring_entry_should_be_evicted_first(self, fake_clock) -> None:
        """Going over budget evicts entries closest to expiry."""
        # Arrange
        cache = VectorCache(CacheSettings(size_limit=16), clock=fake_clock)
        cache.put_embedding("old", [1.0, 0.0])
        fake_clock.advance(1.0)
        cache.put_embedding("mid", [1.0, 0.0])
        fake_clock.advance(1.0)

        # Act
        cache.put_embedding("new", [1.0, 0.0])

        # Assert
        assert cache.get_embedding("old") is None
        assert cache.get_embedding("mid") is not None
        assert cache.get_embedding("new") is not None
        assert cache.total_size == 16

    def test_result_entries_should_be_sized_by_vector_bytes(self, fake_clock) -> None:
        """A result list carrying wide vectors counts their payload against the budget."""
        # Arrange
        cache = VectorCache(CacheSettings(size_limit=2048), clock=fake_clock)
        wide = MMRResult(
            id="doc-1",
            vector=to_vector([0.5] * 1024),
            initial_score=0.9,
            mmr_score=0.45,
            rank=1,
        )

        # Act
        cache.put_results("invoice", MMRResult, [wide])

        # Assert
        assert wide.vector.nbytes == 4096
        assert cache.get_results("invoice", MMRResult) is None
        assert cache.total_size == 0

    def test_result_entry_size_should_include_vector_payload(self, vector_cache: VectorCache) -> None:
        result = MMRResult(
            id="doc-1",
            vector=to_vector([0.5] * 256),
            initial_score=0.9,
            mmr_score=0.45,
            rank=1,
        )

        vector_cache.put_results("invoice", MMRResult, [result])

        assert vector_cache.total_size > result.vector.nbytes

    def test_one_put_should_evict_several_entries_in_expiry_order(self, fake_clock) -> None:
        """A wide entry displaces as many of the soonest-expiring entries as needed."""
        # Arrange
        cache = VectorCache(CacheSettings(size_limit=24), clock=fake_clock)
        for text in ("first", "second", "third"):
            cache.put_embedding(text, [1.0, 0.0])
            fake_clock.advance(1.0)

        # Act
        cache.put_embedding("wide", [1.0, 0.0, 0.0, 0.0])

        # Assert
        assert cache.get_embedding("first") is None
        assert cache.get_embedding("second") is None
        assert cache.get_embedding("third") is not None
        assert cache.get_embedding("wide") is not None
        assert cache.total_size == 24

    def test_expired_entries_should_be_purged_before_live_ones(self, fake_clock) -> None:
        cache = VectorCache(
            CacheSettings(size_limit=16, embedding_ttl_seconds=100.0),
            clock=fake_clock,
        )
        cache.put_embedding("short", [1.0, 0.0], ttl=1.0)
        cache.put_embedding("long", [1.0, 0.0])
        fake_clock.advance(2.0)

        cache.put_embedding("new", [1.0, 0.0])

        assert len(cache) == 2
        assert cache.get_embedding("long") is not None
        assert cache.get_embedding("new") is not None


class TestCacheConcurrency:
    """Test suite for concurrent access."""

    def test_concurrent_puts_and_gets_should_not_corrupt_state(self, vector_cache: VectorCache) -> None:
        """Parallel writers and readers leave one consistent entry per key."""

        def worker(index: int) -> None:
            text = f"text-{index % 10}"
            vector_cache.put_embedding(text, [float(index % 10), 1.0])
            vector_cache.get_embedding(text)

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(worker, range(200)))

        assert len(vector_cache) == 10
        assert vector_cache.total_size == 10 * 8
        np.testing.assert_array_equal(vector_cache.get_embedding("text-3"), [3.0, 1.0])
