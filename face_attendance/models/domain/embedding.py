"""
Embedding vector helpers.

An embedding is a fixed-length float vector produced by the face model.
It travels through the API and the store as a plain list of floats and is
converted to a float64 numpy array for distance computations.
"""

from typing import Optional, Sequence, List, Type

import numpy as np

from face_attendance.core.exceptions import InvalidEmbeddingError, ValidationError


def to_vector(
    values: Sequence[float],
    expected_dim: Optional[int] = None,
    error_class: Type[ValidationError] = InvalidEmbeddingError,
) -> np.ndarray:
    """
    Validate and convert raw values to a 1-D float64 array.

    Args:
        values: Embedding components
        expected_dim: Required dimensionality (None accepts any non-zero length)
        error_class: Exception raised on failure (InvalidEmbeddingError or InvalidQueryError)

    Returns:
        Embedding as numpy array

    Raises:
        error_class: If the embedding is empty, non-numeric, non-finite or of the wrong length
    """
    if values is None:
        raise error_class("embedding is missing")

    try:
        vector = np.asarray(values, dtype=np.float64)
    except (TypeError, ValueError):
        raise error_class("embedding must be a list of numbers")

    if vector.ndim != 1:
        raise error_class("embedding must be one-dimensional")
    if vector.size == 0:
        raise error_class("embedding is empty")
    if not np.all(np.isfinite(vector)):
        raise error_class("embedding contains non-finite values")
    if expected_dim is not None and vector.size != expected_dim:
        raise error_class(f"expected dimension {expected_dim}, got {vector.size}")

    return vector


def to_list(vector: np.ndarray) -> List[float]:
    """Convert numpy array to list for storage and JSON."""
    return [float(x) for x in vector]


def squared_distances(query: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    """Squared Euclidean distance from query to every row of matrix."""
    diff = matrix - query
    return np.einsum("ij,ij->i", diff, diff)
