"""
Retrieval candidate and rerank result types.

Frozen value objects passed from the similarity scanner to the MMR
reranker. Vectors are read-only float32 arrays so a candidate cannot be
mutated once constructed.

Dependencies: numpy
System role: Type definitions for the scan and rerank stages
"""

from dataclasses import dataclass, field
from typing import Any, Hashable, NamedTuple, Sequence, Union

import numpy as np

Vector = np.ndarray
VectorLike = Union[np.ndarray, Sequence[float]]


class StoredVector(NamedTuple):
    """A stored (id, vector, metadata) triple yielded by the storage collaborator."""

    id: Hashable
    vector: VectorLike
    metadata: dict[str, Any]


@dataclass(frozen=True)
class CandidateVector:
    """One retrieval candidate prior to reranking."""

    id: Hashable
    vector: Vector
    initial_score: float
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class MMRResult:
    """A candidate selected by the MMR reranker, in selection order."""

    id: Hashable
    vector: Vector
    initial_score: float
    mmr_score: float
    rank: int
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_candidate(cls, candidate: CandidateVector, mmr_score: float, rank: int) -> "MMRResult":
        """Build a result carrying the candidate's id, vector, score and metadata."""
        return cls(
            id=candidate.id,
            vector=candidate.vector,
            initial_score=candidate.initial_score,
            mmr_score=mmr_score,
            rank=rank,
            metadata=candidate.metadata,
        )
