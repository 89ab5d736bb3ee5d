"""
Shared vector math for similarity scanning and MMR reranking.

Vectors are stored as read-only float32 arrays; similarity arithmetic is
carried out in float64. Cosine similarity fails closed: mismatched
dimensions, zero-norm vectors and malformed input all score 0.0.

Dependencies: numpy, docsearch.core.exceptions, docsearch.models
System role: Vector conversion, cosine similarity and dimension validation
"""

import logging
import math
import numbers
import operator
from typing import Any

import numpy as np

from docsearch.core.exceptions import EmbeddingDimensionError
from docsearch.models.candidate import Vector, VectorLike

logger = logging.getLogger(__name__)


def to_vector(values: VectorLike) -> Vector:
    """
    Convert a 1-D sequence of numbers to a read-only float32 vector.

    The input is always copied so later mutation by the caller cannot
    change a stored vector.

    Args:
        values: Sequence or array of numbers

    Returns:
        Vector: Read-only float32 array

    Raises:
        TypeError: If values is None
        ValueError: If values is not one-dimensional or not numeric
    """
    if values is None:
        raise TypeError("vector must not be None")
    vector = np.array(values, dtype=np.float32)
    if vector.ndim != 1:
        raise ValueError(f"vector must be one-dimensional, got shape {vector.shape}")
    vector.flags.writeable = False
    return vector


def cosine_similarity(a: Any, b: Any) -> float:
    """
    Cosine similarity dot(a, b) / (|a| * |b|).

    Returns 0.0 instead of raising when the vectors differ in dimension,
    either vector has zero magnitude, the input cannot be read as a 1-D
    numeric vector, or the result is not finite.

    Args:
        a: First vector
        b: Second vector

    Returns:
        float: Similarity in [-1, 1], or 0.0 on any failure
    """
    try:
        va = np.asarray(a, dtype=np.float64)
        vb = np.asarray(b, dtype=np.float64)
    except (TypeError, ValueError):
        logger.debug(f"{__name__}:cosine_similarity - Unreadable vector, similarity 0")
        return 0.0

    if va.ndim != 1 or vb.ndim != 1 or va.shape != vb.shape:
        logger.debug(
            f"{__name__}:cosine_similarity - Vector dimension mismatch: "
            f"{va.shape} vs {vb.shape}"
        )
        return 0.0

    magnitude_a = math.sqrt(float(np.dot(va, va)))
    magnitude_b = math.sqrt(float(np.dot(vb, vb)))
    if magnitude_a == 0.0 or magnitude_b == 0.0:
        return 0.0

    similarity = float(np.dot(va, vb)) / (magnitude_a * magnitude_b)
    if not math.isfinite(similarity):
        return 0.0
    return similarity


def dimensions_match(a: Vector, b: Vector) -> bool:
    """Whether two vectors can be compared."""
    return a.shape == b.shape


def vector_dimension(values: Any) -> int | None:
    """Length of a 1-D vector, or None when values is not one."""
    try:
        shape = np.shape(values)
    except (TypeError, ValueError):
        return None
    if len(shape) != 1:
        return None
    return shape[0]


def positive_count(value: Any) -> int | None:
    """
    value as a plain int when it is a positive integer, else None.

    Accepts any integral type (including numpy integers) but not bool.
    """
    if isinstance(value, (bool, np.bool_)) or not isinstance(value, numbers.Integral):
        return None
    count = operator.index(value)
    return count if count > 0 else None


def validate_embedding_dimensions(
    vector: VectorLike | None,
    min_dimension: int,
    max_dimension: int,
) -> None:
    """
    Validate that an embedding's dimension is within the accepted range.

    Absent or empty embeddings pass; there is nothing to validate.

    Args:
        vector: Embedding to validate
        min_dimension: Smallest accepted dimension
        max_dimension: Largest accepted dimension

    Raises:
        EmbeddingDimensionError: If the dimension is out of range
    """
    if vector is None or len(vector) == 0:
        return

    dimension = len(vector)
    if dimension < min_dimension or dimension > max_dimension:
        logger.error(
            f"{__name__}:validate_embedding_dimensions - Invalid embedding dimension: "
            f"{dimension}. Expected between {min_dimension} and {max_dimension}"
        )
        raise EmbeddingDimensionError(dimension, min_dimension, max_dimension)

    logger.debug(f"{__name__}:validate_embedding_dimensions - Validated dimension: {dimension}")
