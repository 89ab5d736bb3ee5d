"""
Vector storage boundary layer.

Dependencies: numpy
System role: Storage collaborator interface for the similarity scan
"""

from docsearch.boundary.storage.vector_store import CandidateVectorSource, InMemoryVectorStore

__all__ = ["CandidateVectorSource", "InMemoryVectorStore"]
