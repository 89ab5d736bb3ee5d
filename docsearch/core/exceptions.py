"""
Exception hierarchy for the docsearch retrieval core.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the retrieval core
"""

from typing import Any


class DocSearchException(Exception):
    """Base exception for all docsearch errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging

        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(DocSearchException):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class EmbeddingDimensionError(ValidationError):
    """Raised when an embedding's dimension is outside the accepted range."""

    def __init__(
        self,
        dimension: int,
        min_dimension: int,
        max_dimension: int,
    ) -> None:
        """
        Initialize embedding dimension error.

        Args:
            dimension: Dimension of the rejected embedding
            min_dimension: Smallest accepted dimension
            max_dimension: Largest accepted dimension
        """
        super().__init__(
            f"Invalid embedding dimension: {dimension}. "
            f"Expected dimension between {min_dimension} and {max_dimension}",
            field="embedding",
            details={
                "dimension": dimension,
                "min_dimension": min_dimension,
                "max_dimension": max_dimension,
            },
        )


class EmbeddingError(DocSearchException):
    """Raised when the embedding provider cannot be built or called."""

    pass


class VectorStoreError(DocSearchException):
    """Raised when storage collaborator operations fail."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize vector store error.

        Args:
            message: Error message
            operation: Operation that failed (upsert, fetch, delete)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)


class CacheError(DocSearchException):
    """Raised inside the vector cache; never surfaced to cache callers."""

    pass


class OperationCancelledError(DocSearchException):
    """Raised when a scan or rerank observes a cancellation request."""

    def __init__(self, operation: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize cancellation error.

        Args:
            operation: Name of the cancelled operation
            details: Additional context (e.g. progress at cancellation)
        """
        details = details or {}
        details["operation"] = operation
        super().__init__(f"Operation cancelled: {operation}", details)
