"""
Linear cosine-similarity nearest-neighbour scan.

Scores every stored vector against a query vector and returns the top-N
as CandidateVector objects. This full O(candidates x dimension) scan is the
reference search; NearestNeighborSearch is the seam where an approximate
index can replace it without touching the reranker.

Dependencies: numpy, docsearch.core.vector_math, docsearch.models
System role: Candidate generation for MMR reranking
"""

import logging
from typing import Iterable, Protocol

from docsearch.core.cancellation import CancellationToken
from docsearch.core.vector_math import (
    VectorLike,
    cosine_similarity,
    dimensions_match,
    positive_count,
    to_vector,
)
from docsearch.models.candidate import CandidateVector, StoredVector

logger = logging.getLogger(__name__)


class NearestNeighborSearch(Protocol):
    """Top-N similarity search over (id, vector, metadata) triples."""

    def top_n(
        self,
        query_vector: VectorLike,
        candidates: Iterable[StoredVector | tuple] | None,
        n: int,
        cancel_token: CancellationToken | None = None,
        min_similarity: float | None = None,
    ) -> list[CandidateVector]:
        ...


class SimilarityScanner:
    """
    Brute-force cosine similarity scan.

    Ties in score keep input order (first seen ranks first). Candidates with
    an unreadable vector, a zero-norm vector or a dimension that differs from
    the query score 0.0 and are still returned if they make the cut.
    """

    def top_n(
        self,
        query_vector: VectorLike,
        candidates: Iterable[StoredVector | tuple] | None,
        n: int,
        cancel_token: CancellationToken | None = None,
        min_similarity: float | None = None,
    ) -> list[CandidateVector]:
        """
        Return the n stored vectors most similar to query_vector.

        Args:
            query_vector: Query embedding
            candidates: (id, vector, metadata) triples to scan
            n: Maximum number of candidates to return
            cancel_token: Optional token checked between candidates
            min_similarity: Optional floor; lower-scoring candidates are dropped

        Returns:
            list[CandidateVector]: Best candidates, highest similarity first

        Raises:
            OperationCancelledError: If cancel_token is cancelled mid-scan
        """
        if candidates is None:
            logger.warning(f"{__name__}:top_n - No candidates provided for similarity scan")
            return []

        count = positive_count(n)
        if count is None:
            logger.warning(f"{__name__}:top_n - Invalid n value: {n!r}")
            return []

        try:
            query = to_vector(query_vector)
        except (TypeError, ValueError) as e:
            logger.warning(f"{__name__}:top_n - Unreadable query vector, scan skipped: {e}")
            return []

        scored: list[CandidateVector] = []
        scanned = 0
        mismatched = 0
        malformed = 0

        for position, stored in enumerate(candidates):
            scanned = position + 1
            if cancel_token is not None:
                cancel_token.raise_if_cancelled("similarity_scan", scanned=position)

            try:
                candidate_id, raw_vector, metadata = stored
            except (TypeError, ValueError):
                malformed += 1
                continue

            try:
                vector = to_vector(raw_vector)
            except (TypeError, ValueError):
                malformed += 1
                vector = to_vector([])

            if dimensions_match(query, vector):
                score = cosine_similarity(query, vector)
            else:
                if vector.size:
                    mismatched += 1
                score = 0.0

            if min_similarity is not None and score < min_similarity:
                continue

            scored.append(
                CandidateVector(
                    id=candidate_id,
                    vector=vector,
                    initial_score=score,
                    metadata=dict(metadata or {}),
                )
            )

        if not scanned:
            logger.warning(f"{__name__}:top_n - No candidates provided for similarity scan")
            return []

        if mismatched or malformed:
            logger.warning(
                f"{__name__}:top_n - Scored {mismatched} dimension-mismatched and "
                f"{malformed} malformed vectors as 0 (query dimension {query.shape[0]})"
            )

        # list.sort is stable, so equal scores keep input order
        scored.sort(key=lambda candidate: -candidate.initial_score)
        return scored[:count]
