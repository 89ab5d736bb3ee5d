"""
Storage collaborator interface and in-memory implementation.

The retrieval core only ever reads from storage: it asks for every stored
(id, vector, metadata) triple and scans them. InMemoryVectorStore is the
local implementation used for development and tests; production stores
implement CandidateVectorSource over their own persistence.

Dependencies: numpy, docsearch.core, docsearch.models
System role: Read-side storage boundary for the similarity scan
"""

import logging
import threading
from typing import Any, Hashable, Iterable, Protocol, Sequence

from docsearch.core.exceptions import VectorStoreError
from docsearch.core.vector_math import Vector, VectorLike, to_vector
from docsearch.models.candidate import StoredVector
from docsearch.models.stats import VectorStoreStats

logger = logging.getLogger(__name__)


class CandidateVectorSource(Protocol):
    """Storage collaborator exposing documents that currently have a vector."""

    def fetch_candidate_vectors(self) -> Sequence[StoredVector]:
        ...


class InMemoryVectorStore:
    """
    Process-local vector store.

    Vectors of different dimensions may coexist (e.g. after an embedding
    provider swap); the scanner scores mismatched ones as 0.
    """

    def __init__(self) -> None:
        self._vectors: dict[Hashable, StoredVector] = {}
        self._lock = threading.Lock()

    def upsert(
        self,
        vector_id: Hashable,
        vector: VectorLike,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """
        Insert or replace a vector.

        Args:
            vector_id: Document or chunk identifier
            vector: Embedding vector
            metadata: Optional metadata used for filtering

        Raises:
            VectorStoreError: If the id is empty or the vector is malformed
        """
        if vector_id is None or vector_id == "":
            raise VectorStoreError("Vector id must not be empty", operation="upsert")
        try:
            stored = to_vector(vector)
        except (TypeError, ValueError) as e:
            raise VectorStoreError(
                message="Failed to store malformed vector",
                operation="upsert",
                details={"id": vector_id, "error": str(e)},
            ) from e

        with self._lock:
            self._vectors[vector_id] = StoredVector(vector_id, stored, dict(metadata or {}))

    def upsert_many(self, entries: Iterable[StoredVector | tuple]) -> int:
        """
        Insert or replace many vectors, skipping malformed entries.

        Args:
            entries: (id, vector, metadata) triples

        Returns:
            int: Number of vectors stored
        """
        stored = 0
        for vector_id, vector, metadata in entries:
            try:
                self.upsert(vector_id, vector, metadata)
                stored += 1
            except VectorStoreError as e:
                logger.warning(f"{__name__}:upsert_many - Skipped entry: {e}")

        logger.info(f"{__name__}:upsert_many - Stored {stored} vectors")
        return stored

    def delete(self, vector_id: Hashable) -> bool:
        """
        Delete a vector.

        Returns:
            bool: True if a vector was removed
        """
        with self._lock:
            return self._vectors.pop(vector_id, None) is not None

    def get_vector(self, vector_id: Hashable) -> Vector | None:
        """Stored vector for vector_id, or None."""
        with self._lock:
            entry = self._vectors.get(vector_id)
        return entry.vector if entry is not None else None

    def fetch_candidate_vectors(self) -> list[StoredVector]:
        """Snapshot of every stored vector in insertion order."""
        with self._lock:
            return list(self._vectors.values())

    def get_stats(self) -> VectorStoreStats:
        """Count, sample dimension and approximate payload size of stored vectors."""
        with self._lock:
            entries = list(self._vectors.values())

        dimension = len(entries[0].vector) if entries else 0
        return VectorStoreStats(
            total_vectors=len(entries),
            vector_dimension=dimension,
            storage_size_bytes=sum(entry.vector.nbytes for entry in entries),
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._vectors)
