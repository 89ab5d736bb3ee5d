"""
Vector store statistics schema.

Dependencies: pydantic
System role: Reporting model for the storage collaborator
"""

from pydantic import BaseModel, Field


class VectorStoreStats(BaseModel):
    """Summary of the vectors currently held by a storage collaborator."""

    total_vectors: int = Field(description="Number of stored vectors", ge=0)
    vector_dimension: int = Field(description="Dimension of a sample stored vector (0 if empty)", ge=0)
    storage_size_bytes: int = Field(description="Approximate float32 payload size", ge=0)
    index_type: str = Field(default="linear_scan", description="Search structure used for lookups")
