"""
Maximal Marginal Relevance (MMR) reranking.

Greedily selects a diverse, relevant top-K ordering from a candidate pool:

    MMR(c) = lambda * sim(query, c) - (1 - lambda) * max(sim(c, s) for s in selected)

The redundancy term is 0 while nothing is selected, so the first pick is
pure relevance. Greedy selection is not a global optimum; the candidate pool
is expected to be a small pre-filtered set (tens of items), making the
O(top_k x candidates x dimension) cost acceptable.

Dependencies: numpy, docsearch.core.vector_math, docsearch.models
System role: Diversity-aware reranking of similarity scan output
"""

import logging
import math
from typing import Iterable, Sequence

from docsearch.core.cancellation import CancellationToken
from docsearch.core.vector_math import (
    VectorLike,
    cosine_similarity,
    positive_count,
    to_vector,
    vector_dimension,
)
from docsearch.models.candidate import CandidateVector, MMRResult

logger = logging.getLogger(__name__)

DEFAULT_LAMBDA = 0.5

# Scores closer than this are treated as equal when choosing the next pick.
_TIE_TOLERANCE = 1e-12


class MMRReranker:
    """
    MMR reranker over CandidateVector pools.

    Ties on MMR score go to the candidate with the smaller redundancy
    penalty, then to the earliest position in the pool. Malformed input
    never raises: it is logged as a warning and yields an empty result.
    """

    def rerank(
        self,
        query_vector: VectorLike,
        candidates: Iterable[CandidateVector] | None,
        top_k: int,
        lambda_: float = DEFAULT_LAMBDA,
        cancel_token: CancellationToken | None = None,
    ) -> list[MMRResult]:
        """
        Rerank candidates with MMR.

        Args:
            query_vector: Query embedding
            candidates: Candidate pool, typically SimilarityScanner output
            top_k: Number of results to select
            lambda_: Trade-off between relevance (1.0) and diversity (0.0)
            cancel_token: Optional token checked once per selection round

        Returns:
            list[MMRResult]: Selected candidates in selection order, rank from 1

        Raises:
            OperationCancelledError: If cancel_token is cancelled mid-rerank
        """
        if candidates is None:
            logger.warning(f"{__name__}:rerank - No candidates provided for MMR reranking")
            return []

        pool = [c for c in candidates if hasattr(c, "vector") and hasattr(c, "id")]
        if not pool:
            logger.warning(f"{__name__}:rerank - No candidates provided for MMR reranking")
            return []

        count = positive_count(top_k)
        if count is None:
            logger.warning(f"{__name__}:rerank - Invalid topK value: {top_k!r}")
            return []
        top_k = count

        try:
            lambda_ = float(lambda_)
        except (TypeError, ValueError):
            logger.warning(f"{__name__}:rerank - Invalid lambda value: {lambda_!r}")
            return []
        if not math.isfinite(lambda_):
            logger.warning(f"{__name__}:rerank - Invalid lambda value: {lambda_}")
            return []
        if not 0.0 <= lambda_ <= 1.0:
            logger.warning(
                f"{__name__}:rerank - Lambda {lambda_} outside [0, 1]; scores may be unexpected"
            )

        try:
            query = to_vector(query_vector)
        except (TypeError, ValueError) as e:
            logger.warning(f"{__name__}:rerank - Unreadable query vector: {e}")
            return []

        logger.info(
            f"{__name__}:rerank - Starting MMR reranking with {len(pool)} candidates, "
            f"topK={top_k}, lambda={lambda_}"
        )

        mismatched = sum(1 for c in pool if vector_dimension(c.vector) != query.shape[0])
        if mismatched:
            logger.warning(
                f"{__name__}:rerank - {mismatched} candidates differ from query dimension "
                f"{query.shape[0]}; their similarities count as 0"
            )

        relevance = [cosine_similarity(query, c.vector) for c in pool]
        # Max similarity of each candidate to anything selected so far
        redundancy = [-math.inf] * len(pool)
        remaining = list(range(len(pool)))
        results: list[MMRResult] = []

        for iteration in range(min(top_k, len(pool))):
            if cancel_token is not None:
                cancel_token.raise_if_cancelled("mmr_rerank", selected=len(results))

            best_pos = -1
            best_score = -math.inf
            best_penalty = math.inf
            for pos, index in enumerate(remaining):
                penalty = (1.0 - lambda_) * redundancy[index] if results else 0.0
                score = lambda_ * relevance[index] - penalty

                if best_pos < 0 or score > best_score + _TIE_TOLERANCE or (
                    abs(score - best_score) <= _TIE_TOLERANCE
                    and penalty < best_penalty - _TIE_TOLERANCE
                ):
                    best_pos, best_score, best_penalty = pos, score, penalty

            chosen_index = remaining.pop(best_pos)
            chosen = pool[chosen_index]
            results.append(MMRResult.from_candidate(chosen, mmr_score=best_score, rank=iteration + 1))

            for index in remaining:
                similarity = cosine_similarity(pool[index].vector, chosen.vector)
                if similarity > redundancy[index]:
                    redundancy[index] = similarity

            if not remaining:
                break

        logger.info(
            f"{__name__}:rerank - MMR reranking completed. Selected {len(results)} documents"
        )
        return results

    def calculate_mmr_score(
        self,
        query_vector: VectorLike,
        candidate_vector: VectorLike,
        selected_vectors: Sequence[VectorLike],
        lambda_: float = DEFAULT_LAMBDA,
    ) -> float:
        """
        MMR score of a single candidate against the current selection.

        Args:
            query_vector: Query embedding
            candidate_vector: Candidate embedding
            selected_vectors: Embeddings already selected
            lambda_: Trade-off between relevance (1.0) and diversity (0.0)

        Returns:
            float: lambda * relevance - (1 - lambda) * max similarity to selected
        """
        relevance = cosine_similarity(query_vector, candidate_vector)

        max_similarity_to_selected = 0.0
        if selected_vectors:
            max_similarity_to_selected = max(
                cosine_similarity(candidate_vector, selected) for selected in selected_vectors
            )

        return lambda_ * relevance - (1 - lambda_) * max_similarity_to_selected
