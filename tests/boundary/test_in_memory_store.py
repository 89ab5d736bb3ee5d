"""
Test suite for InMemoryVectorStore.

System role: Verification of the reference storage collaborator
"""

import numpy as np
import pytest

from docsearch.boundary.storage.vector_store import InMemoryVectorStore
from docsearch.core.exceptions import VectorStoreError


@pytest.fixture
def store() -> InMemoryVectorStore:
    """Provide empty InMemoryVectorStore."""
    return InMemoryVectorStore()


class TestInMemoryVectorStoreWrites:
    """Test suite for upsert and delete."""

    def test_upsert_should_store_read_only_copy(self, store: InMemoryVectorStore) -> None:
        # Arrange
        source = [1.0, 2.0]

        # Act
        store.upsert("doc-1", source, {"page": 3})
        source[0] = 9.0

        # Assert
        vector = store.get_vector("doc-1")
        np.testing.assert_array_equal(vector, [1.0, 2.0])
        assert not vector.flags.writeable

    def test_upsert_should_replace_existing_vector(self, store: InMemoryVectorStore) -> None:
        store.upsert("doc-1", [1.0, 0.0])
        store.upsert("doc-1", [0.0, 1.0])

        assert len(store) == 1
        np.testing.assert_array_equal(store.get_vector("doc-1"), [0.0, 1.0])

    @pytest.mark.parametrize("vector_id", [None, ""])
    def test_upsert_should_reject_empty_id(self, store: InMemoryVectorStore, vector_id) -> None:
        with pytest.raises(VectorStoreError) as exc_info:
            store.upsert(vector_id, [1.0, 0.0])

        assert exc_info.value.details["operation"] == "upsert"

    def test_upsert_should_reject_malformed_vector(self, store: InMemoryVectorStore) -> None:
        with pytest.raises(VectorStoreError):
            store.upsert("doc-1", [[1.0, 0.0], [0.0, 1.0]])

    def test_upsert_many_should_skip_bad_entries(self, store: InMemoryVectorStore) -> None:
        """Valid entries are stored even when others in the batch are rejected."""
        # Act
        stored = store.upsert_many([
            ("a", [1.0, 0.0], {}),
            ("", [1.0, 0.0], {}),
            ("b", None, {}),
            ("c", [0.0, 1.0], None),
        ])

        # Assert
        assert stored == 2
        assert [entry.id for entry in store.fetch_candidate_vectors()] == ["a", "c"]

    def test_delete_should_report_whether_vector_existed(self, store: InMemoryVectorStore) -> None:
        store.upsert("doc-1", [1.0, 0.0])

        assert store.delete("doc-1") is True
        assert store.delete("doc-1") is False
        assert store.get_vector("doc-1") is None


class TestInMemoryVectorStoreReads:
    """Test suite for candidate fetching and statistics."""

    def test_fetch_should_return_snapshot_in_insertion_order(self, populated_store: InMemoryVectorStore) -> None:
        # Act
        snapshot = populated_store.fetch_candidate_vectors()
        populated_store.delete("v1")

        # Assert
        assert [entry.id for entry in snapshot] == ["v1", "v2", "v3"]
        assert snapshot[2].metadata == {"category": "legal"}

    def test_get_stats_should_summarize_vectors(self, populated_store: InMemoryVectorStore) -> None:
        stats = populated_store.get_stats()

        assert stats.total_vectors == 3
        assert stats.vector_dimension == 2
        assert stats.storage_size_bytes == 3 * 2 * 4
        assert stats.index_type == "linear_scan"

    def test_get_stats_on_empty_store_should_be_zero(self, store: InMemoryVectorStore) -> None:
        stats = store.get_stats()

        assert stats.total_vectors == 0
        assert stats.vector_dimension == 0
        assert stats.storage_size_bytes == 0
