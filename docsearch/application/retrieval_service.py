"""
Retrieval service orchestrator.

Coordinates query embedding, candidate fetching, similarity scanning and
MMR reranking, with the vector cache in front of the embedding provider
and of the final result lists.

Dependencies: docsearch.boundary, docsearch.core, docsearch.configs
System role: Retrieval orchestration
"""

import asyncio
import json
import logging
from typing import Any, Mapping, Sequence

from docsearch.boundary.cache.vector_cache import FLOAT32_BYTES, VectorCache
from docsearch.boundary.embedding.client import EmbeddingProvider, LazyEmbeddingClient
from docsearch.boundary.storage.vector_store import CandidateVectorSource
from docsearch.configs.settings import Settings, get_settings
from docsearch.core.cancellation import CancellationToken
from docsearch.core.exceptions import EmbeddingDimensionError, VectorStoreError
from docsearch.core.mmr_reranker import MMRReranker
from docsearch.core.similarity_scanner import NearestNeighborSearch, SimilarityScanner
from docsearch.core.vector_math import (
    Vector,
    VectorLike,
    positive_count,
    validate_embedding_dimensions,
    vector_dimension,
)
from docsearch.models.candidate import CandidateVector, MMRResult, StoredVector
from docsearch.models.stats import VectorStoreStats
from docsearch.observability.log_utils import log_exception_with_context, log_with_context

logger = logging.getLogger(__name__)


class RetrievalService:
    """
    Retrieval service orchestrator.

    Provider and storage calls run in worker threads; the scan and rerank
    run inline on the event loop and never suspend.
    """

    def __init__(
        self,
        embedder: EmbeddingProvider,
        store: CandidateVectorSource,
        cache: VectorCache | None = None,
        scanner: NearestNeighborSearch | None = None,
        reranker: MMRReranker | None = None,
        settings: Settings | None = None,
    ) -> None:
        """
        Initialize retrieval service.

        Args:
            embedder: Text-to-vector provider (may be unavailable)
            store: Storage collaborator yielding stored vectors
            cache: Optional shared VectorCache (created if None)
            scanner: Optional nearest-neighbour search (linear scan if None)
            reranker: Optional MMR reranker (created if None)
            settings: Optional settings (get_settings() if None)
        """
        self.settings = settings or get_settings()
        self.embedder = embedder
        self.store = store
        self.cache = cache if cache is not None else VectorCache(self.settings.cache)
        self.scanner = scanner or SimilarityScanner()
        self.reranker = reranker or MMRReranker()

    @classmethod
    def from_settings(
        cls,
        store: CandidateVectorSource,
        settings: Settings | None = None,
    ) -> "RetrievalService":
        """Service wired to the Gemini provider described by settings."""
        settings = settings or get_settings()
        return cls(
            embedder=LazyEmbeddingClient.from_settings(settings.embedding),
            store=store,
            settings=settings,
        )

    async def embed_query(self, text: str) -> Vector | None:
        """
        Embed query text, consulting the cache first.

        Steps:
        1. Return the cached embedding if present
        2. Call the provider in a worker thread
        3. Validate the dimension
        4. Cache the new embedding

        Args:
            text: Query text

        Returns:
            Vector | None: Embedding, or None if the provider is unavailable
            or returned an embedding of unsupported dimension
        """
        cached = self.cache.get_embedding(text)
        if cached is not None:
            logger.debug(f"{__name__}:embed_query - Embedding cache hit")
            return cached

        vector = await asyncio.to_thread(self.embedder.embed, text)
        if vector is None:
            logger.warning(f"{__name__}:embed_query - No embedding available for query")
            return None

        embedding_settings = self.settings.embedding
        try:
            validate_embedding_dimensions(
                vector,
                embedding_settings.min_dimension,
                embedding_settings.max_dimension,
            )
        except EmbeddingDimensionError as e:
            logger.warning(f"{__name__}:embed_query - Discarding embedding: {e}")
            return None

        self.cache.put_embedding(text, vector)
        return vector

    async def search_similar(
        self,
        query_vector: VectorLike,
        top_k: int,
        min_similarity: float | None = None,
        metadata_filter: Mapping[str, Any] | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> list[CandidateVector]:
        """
        Top-k stored vectors by cosine similarity, without reranking.

        Args:
            query_vector: Query embedding
            top_k: Maximum number of candidates
            min_similarity: Similarity floor (RetrievalSettings.min_similarity if None)
            metadata_filter: Metadata key/value pairs a candidate must match
            cancel_token: Optional token checked during the scan

        Returns:
            list[CandidateVector]: Candidates, most similar first

        Raises:
            VectorStoreError: If the storage collaborator fails
            OperationCancelledError: If cancel_token is cancelled mid-scan
        """
        if min_similarity is None:
            min_similarity = self.settings.retrieval.min_similarity

        stored = await self._fetch_candidates()
        if metadata_filter:
            stored = [entry for entry in stored if _matches_filter(entry, metadata_filter)]

        return self.scanner.top_n(
            query_vector,
            stored,
            top_k,
            cancel_token=cancel_token,
            min_similarity=min_similarity,
        )

    async def search(
        self,
        query: str,
        top_k: int | None = None,
        lambda_: float | None = None,
        metadata_filter: Mapping[str, Any] | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> list[MMRResult]:
        """
        Relevant and diverse results for query.

        Steps:
        1. Return cached results for the same query and parameters
        2. Embed the query
        3. Fetch stored vectors and apply the metadata filter
        4. Scan for top_k * candidate_multiplier candidates
        5. Rerank candidates with MMR
        6. Cache the ranked results

        Args:
            query: Query text
            top_k: Number of results (RetrievalSettings.default_top_k if None)
            lambda_: MMR trade-off (RetrievalSettings.mmr_lambda if None)
            metadata_filter: Metadata key/value pairs a result must match
            cancel_token: Optional token checked during scan and rerank

        Returns:
            list[MMRResult]: Ranked results; empty when the query is blank,
            no embedding is available or nothing clears the similarity floor

        Raises:
            VectorStoreError: If the storage collaborator fails
            OperationCancelledError: If cancel_token is cancelled
        """
        retrieval = self.settings.retrieval
        top_k = retrieval.default_top_k if top_k is None else top_k
        lambda_ = retrieval.mmr_lambda if lambda_ is None else lambda_

        if not query or not query.strip():
            logger.warning(f"{__name__}:search - Empty query")
            return []
        count = positive_count(top_k)
        if count is None:
            logger.warning(f"{__name__}:search - Invalid top_k: {top_k!r}")
            return []
        top_k = count

        cache_query = _results_cache_query(query, top_k, lambda_, metadata_filter)
        if retrieval.cache_results:
            cached = self.cache.get_results(cache_query, MMRResult)
            if cached is not None:
                logger.info(f"{__name__}:search - Returning {len(cached)} cached results")
                return cached

        query_vector = await self.embed_query(query)
        if query_vector is None:
            return []

        candidates = await self.search_similar(
            query_vector,
            top_k * retrieval.candidate_multiplier,
            metadata_filter=metadata_filter,
            cancel_token=cancel_token,
        )
        if not candidates:
            logger.info(f"{__name__}:search - No candidates above similarity threshold")
            return []

        results = self.reranker.rerank(
            query_vector,
            candidates,
            top_k,
            lambda_=lambda_,
            cancel_token=cancel_token,
        )

        log_with_context(
            logger,
            logging.INFO,
            "Search completed",
            candidates=len(candidates),
            results=len(results),
            top_k=top_k,
        )

        if retrieval.cache_results and results:
            self.cache.put_results(cache_query, MMRResult, results)
        return results

    async def get_stats(self) -> VectorStoreStats:
        """
        Statistics over the vectors currently held by the store.

        Raises:
            VectorStoreError: If the storage collaborator fails
        """
        stored = await self._fetch_candidates()

        dimension = 0
        size_bytes = 0
        for entry in stored:
            length = vector_dimension(entry[1])
            if length is None:
                continue
            if dimension == 0:
                dimension = length
            size_bytes += length * FLOAT32_BYTES

        return VectorStoreStats(
            total_vectors=len(stored),
            vector_dimension=dimension,
            storage_size_bytes=size_bytes,
        )

    async def _fetch_candidates(self) -> list[StoredVector]:
        try:
            stored = await asyncio.to_thread(self.store.fetch_candidate_vectors)
        except VectorStoreError:
            raise
        except Exception as e:
            log_exception_with_context(
                logger,
                f"{__name__}:_fetch_candidates - Storage fetch failed",
                e,
                store=type(self.store).__name__,
            )
            raise VectorStoreError(
                message=f"Failed to fetch candidate vectors: {e}",
                operation="fetch_candidate_vectors",
            ) from e
        return list(stored or [])


def _matches_filter(entry: Sequence[Any], metadata_filter: Mapping[str, Any]) -> bool:
    try:
        metadata = entry[2]
    except (TypeError, IndexError):
        return False
    if not isinstance(metadata, Mapping):
        return False
    return all(key in metadata and metadata[key] == value for key, value in metadata_filter.items())


def _results_cache_query(
    query: str,
    top_k: int,
    lambda_: float,
    metadata_filter: Mapping[str, Any] | None,
) -> str:
    """Cache identity for a search: query text plus every parameter that shapes results."""
    filter_json = json.dumps(dict(metadata_filter or {}), sort_keys=True, default=str)
    return f"{query}\x1fk={top_k}\x1flambda={lambda_!r}\x1ffilter={filter_json}"
