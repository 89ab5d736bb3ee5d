"""
Content-addressed cache for embeddings and search results.

Keys are SHA-256 fingerprints of the input text, so identical text always
maps to the same entry and distinct caches never collide:
- embeddings:      "emb:{fingerprint(text)}"
- search results:  "search:{result_type}:{fingerprint(query)}"

Embeddings get a long absolute TTL (text embeddings never change); result
lists get a short absolute TTL plus a sliding window that is pushed forward
on every read hit, so frequently used queries stay warm. The cache is a
performance optimization only: internal failures are logged and behave
exactly like a miss.

Dependencies: numpy, docsearch.configs, docsearch.models
System role: Shared in-process cache for the retrieval pipeline
"""

import base64
import copy
import dataclasses
import hashlib
import logging
import sys
import threading
import time
from typing import Any, Callable, Sequence

import numpy as np

from docsearch.configs.cache import CacheSettings
from docsearch.core.exceptions import CacheError
from docsearch.core.vector_math import Vector, VectorLike, to_vector
from docsearch.models.cache import CacheEntry

logger = logging.getLogger(__name__)

EMBEDDING_PREFIX = "emb:"
SEARCH_PREFIX = "search:"

FLOAT32_BYTES = np.dtype(np.float32).itemsize


def fingerprint(text: str) -> str:
    """
    SHA-256 of the UTF-8 bytes of text, URL-safe base64 without padding.

    Args:
        text: Content to fingerprint

    Returns:
        str: 43-character fingerprint
    """
    digest = hashlib.sha256(text.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


def embedding_key(text: str) -> str:
    """Cache key for the embedding of text."""
    return f"{EMBEDDING_PREFIX}{fingerprint(text)}"


def results_key(query: str, result_type_tag: str | type) -> str:
    """Cache key for results of result_type_tag returned for query."""
    tag = result_type_tag.__name__ if isinstance(result_type_tag, type) else str(result_type_tag)
    return f"{SEARCH_PREFIX}{tag}:{fingerprint(query)}"


def _detach(item: Any) -> Any:
    """
    Copy of a cached result that shares no mutable state with the original.

    Dataclass results with a metadata dict keep their (read-only) vector and
    get a deep copy of the metadata; anything else is deep-copied.
    """
    if (
        dataclasses.is_dataclass(item)
        and not isinstance(item, type)
        and isinstance(getattr(item, "metadata", None), dict)
    ):
        return dataclasses.replace(item, metadata=copy.deepcopy(item.metadata))
    return copy.deepcopy(item)


def _results_size(results: Sequence[Any]) -> int:
    """Approximate bytes held by a result list, counting vector payloads."""
    size = sys.getsizeof(results)
    for item in results:
        size += sys.getsizeof(item)
        vector = getattr(item, "vector", None)
        if isinstance(vector, np.ndarray):
            size += vector.nbytes
    return size


class VectorCache:
    """
    Thread-safe TTL cache with striped locking.

    Each key hashes to one of `lock_stripes` partitions with its own lock,
    so operations on keys in different partitions never wait on each other.
    An entry's value and expiry are always read and written together under
    its partition lock.
    """

    def __init__(
        self,
        settings: CacheSettings | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize cache.

        Args:
            settings: TTLs, sliding window, size budget and stripe count
            clock: Monotonic time source in seconds (injectable for tests)
        """
        self.settings = settings or CacheSettings()
        self._clock = clock
        stripes = self.settings.lock_stripes
        self._locks = [threading.Lock() for _ in range(stripes)]
        self._partitions: list[dict[str, CacheEntry]] = [{} for _ in range(stripes)]
        self._size_lock = threading.Lock()
        self._total_size = 0

    # ------------------------------------------------------------------
    # Embeddings
    # ------------------------------------------------------------------

    def get_embedding(self, text: str) -> Vector | None:
        """
        Get the cached embedding for text.

        Args:
            text: Text the embedding was computed from

        Returns:
            Vector | None: Cached vector, or None if missing, expired or on error
        """
        try:
            return self._get(embedding_key(text))
        except Exception as e:
            logger.warning(f"{__name__}:get_embedding - Cache read failed, treating as miss: {e}")
            return None

    def put_embedding(
        self,
        text: str,
        vector: VectorLike,
        ttl: float | None = None,
    ) -> None:
        """
        Cache an embedding with an absolute expiration.

        Args:
            text: Text the embedding was computed from
            vector: Embedding vector
            ttl: Lifetime in seconds (defaults to embedding_ttl_seconds)
        """
        try:
            stored = to_vector(vector)
            self._put(
                embedding_key(text),
                stored,
                ttl=ttl if ttl is not None else self.settings.embedding_ttl_seconds,
                sliding_window=None,
                size=stored.shape[0] * FLOAT32_BYTES,
            )
        except Exception as e:
            logger.warning(f"{__name__}:put_embedding - Cache write skipped: {e}")

    # ------------------------------------------------------------------
    # Search results
    # ------------------------------------------------------------------

    def get_results(self, query: str, result_type_tag: str | type) -> list[Any] | None:
        """
        Get cached results for query, refreshing the sliding window on a hit.

        Args:
            query: Query the results were produced for
            result_type_tag: Result element type (or its name)

        Returns:
            list | None: Cached results in original order, or None
        """
        try:
            results = self._get(results_key(query, result_type_tag))
        except Exception as e:
            logger.warning(f"{__name__}:get_results - Cache read failed, treating as miss: {e}")
            return None
        if results is None:
            return None
        return [_detach(item) for item in results]

    def put_results(
        self,
        query: str,
        result_type_tag: str | type,
        results: Sequence[Any],
        ttl: float | None = None,
    ) -> None:
        """
        Cache results with an absolute TTL and a sliding window.

        Args:
            query: Query the results were produced for
            result_type_tag: Result element type (or its name)
            results: Ordered results to cache
            ttl: Absolute lifetime in seconds (defaults to results_ttl_seconds)
        """
        try:
            snapshot = tuple(_detach(item) for item in results)
            self._put(
                results_key(query, result_type_tag),
                snapshot,
                ttl=ttl if ttl is not None else self.settings.results_ttl_seconds,
                sliding_window=self.settings.results_sliding_window_seconds,
                size=_results_size(snapshot),
            )
        except Exception as e:
            logger.warning(f"{__name__}:put_results - Cache write skipped: {e}")

    # ------------------------------------------------------------------
    # Eviction
    # ------------------------------------------------------------------

    def remove(self, key: str) -> None:
        """
        Evict a single entry. Missing keys are ignored.

        Args:
            key: Full cache key (see embedding_key / results_key)
        """
        try:
            index = self._stripe(key)
            with self._locks[index]:
                entry = self._partitions[index].pop(key, None)
            if entry is not None:
                self._adjust_size(-entry.size)
        except Exception as e:
            logger.warning(f"{__name__}:remove - Cache eviction failed for {key}: {e}")

    def remove_by_prefix(self, prefix: str) -> int:
        """
        Evict every entry whose key starts with prefix.

        Args:
            prefix: Key prefix, e.g. EMBEDDING_PREFIX or "search:MMRResult:"

        Returns:
            int: Number of entries evicted
        """
        removed = 0
        for index, lock in enumerate(self._locks):
            with lock:
                partition = self._partitions[index]
                doomed = [key for key in partition if key.startswith(prefix)]
                for key in doomed:
                    self._adjust_size(-partition.pop(key).size)
            removed += len(doomed)

        logger.info(f"{__name__}:remove_by_prefix - Removed {removed} cache keys with prefix {prefix}")
        return removed

    def clear(self) -> int:
        """
        Evict every entry.

        Returns:
            int: Number of entries evicted
        """
        return self.remove_by_prefix("")

    def __len__(self) -> int:
        return sum(len(partition) for partition in self._partitions)

    @property
    def total_size(self) -> int:
        """Approximate size in bytes of all live entries."""
        with self._size_lock:
            return self._total_size

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _stripe(self, key: str) -> int:
        return hash(key) % len(self._locks)

    def _get(self, key: str) -> Any | None:
        index = self._stripe(key)
        expired = None
        with self._locks[index]:
            partition = self._partitions[index]
            entry = partition.get(key)
            if entry is None:
                return None
            now = self._clock()
            if entry.is_expired(now):
                expired = partition.pop(key)
            else:
                entry.touch(now)
                return entry.value

        self._adjust_size(-expired.size)
        return None

    def _put(
        self,
        key: str,
        value: Any,
        ttl: float,
        sliding_window: float | None,
        size: int,
    ) -> None:
        if ttl <= 0:
            raise CacheError("Cache TTL must be positive", details={"key": key, "ttl": ttl})

        limit = self.settings.size_limit
        if limit is not None and size > limit:
            logger.debug(f"{__name__}:_put - Entry {key} ({size}) exceeds size limit {limit}")
            return

        now = self._clock()
        entry = CacheEntry(
            key=key,
            value=value,
            expires_at=now + ttl,
            sliding_window=sliding_window,
            size=size,
        )

        index = self._stripe(key)
        with self._locks[index]:
            previous = self._partitions[index].get(key)
            self._partitions[index][key] = entry
        self._adjust_size(size - (previous.size if previous is not None else 0))

        if limit is not None and self.total_size > limit:
            self._compact(limit, keep=key)

    def _adjust_size(self, delta: int) -> None:
        with self._size_lock:
            self._total_size += delta

    def _compact(self, limit: int, keep: str) -> None:
        """Drop expired entries, then the soonest-expiring ones, until under limit."""
        now = self._clock()
        survivors: list[tuple[float, str]] = []
        for index, lock in enumerate(self._locks):
            with lock:
                partition = self._partitions[index]
                for key, entry in list(partition.items()):
                    if entry.is_expired(now):
                        self._adjust_size(-partition.pop(key).size)
                    elif key != keep:
                        survivors.append((entry.expires_at, key))

        survivors.sort()
        evicted = 0
        for _, key in survivors:
            if self.total_size <= limit:
                break
            self.remove(key)
            evicted += 1

        if evicted:
            logger.debug(f"{__name__}:_compact - Evicted {evicted} entries to fit size limit {limit}")
