"""
Vector primitives for embedding comparison.

All functions are pure. Degenerate inputs to similarity functions
(length mismatch, zero vectors) score 0.0 instead of raising, so ranking
stays total over any catalog. Averaging an empty list or vectors of
different lengths is a structural error and raises.
"""

from typing import Optional, Sequence

import numpy as np


VectorLike = Sequence[float]


class VectorOpsError(ValueError):
    """Base class for structural vector errors."""


class EmptyVectorListError(VectorOpsError):
    """Raised when averaging an empty list of vectors."""


class DimensionMismatchError(VectorOpsError):
    """Raised when vectors that must share a length do not."""

    def __init__(self, expected: int, actual: int, index: Optional[int] = None) -> None:
        where = f" at index {index}" if index is not None else ""
        super().__init__(f"Inconsistent vector dims{where}: expected {expected}, got {actual}")
        self.expected = expected
        self.actual = actual
        self.index = index


def as_vector(values: VectorLike) -> np.ndarray:
    """Coerce to a 1-D float64 array."""
    return np.asarray(values, dtype=np.float64).reshape(-1)


def dot(a: VectorLike, b: VectorLike) -> float:
    return float(np.dot(as_vector(a), as_vector(b)))


def magnitude(a: VectorLike) -> float:
    return float(np.linalg.norm(as_vector(a)))


def cosine_similarity(a: VectorLike, b: VectorLike) -> float:
    """
    Cosine similarity in [-1, 1].

    Returns 0.0 when lengths differ or either vector has zero magnitude.
    """
    va = as_vector(a)
    vb = as_vector(b)
    if va.shape != vb.shape or va.size == 0:
        return 0.0

    norm_a = np.linalg.norm(va)
    norm_b = np.linalg.norm(vb)
    if norm_a == 0 or norm_b == 0:
        return 0.0

    sim = float(np.dot(va, vb) / (norm_a * norm_b))
    # float error can push |sim| a hair past 1
    return max(-1.0, min(1.0, sim))


def weighted_cosine_similarity(a: VectorLike, b: VectorLike, weights: VectorLike) -> float:
    """
    Cosine similarity after scaling both vectors elementwise by `weights`.

    Falls back to the unweighted cosine when the weight vector length does
    not match the inputs.
    """
    va = as_vector(a)
    vb = as_vector(b)
    w = as_vector(weights)
    if w.shape != va.shape or va.shape != vb.shape:
        return cosine_similarity(va, vb)
    return cosine_similarity(va * w, vb * w)


def _stack(vectors: Sequence[VectorLike]) -> np.ndarray:
    if len(vectors) == 0:
        raise EmptyVectorListError("Cannot average an empty list of vectors")

    rows = [as_vector(v) for v in vectors]
    dim = rows[0].shape[0]
    for i, row in enumerate(rows):
        if row.shape[0] != dim:
            raise DimensionMismatchError(dim, row.shape[0], index=i)
    return np.vstack(rows)


def average_vectors(vectors: Sequence[VectorLike]) -> np.ndarray:
    """Unweighted arithmetic mean of equal-length vectors."""
    return _stack(vectors).mean(axis=0)


def weighted_average_vectors(vectors: Sequence[VectorLike], weights: Sequence[float]) -> np.ndarray:
    """
    Weighted mean: out[d] = sum(v[i][d] * w[i]) / sum(w[i]).

    A weight list whose length differs from the vector list degrades to
    `average_vectors` rather than failing.
    """
    matrix = _stack(vectors)
    if len(weights) != matrix.shape[0]:
        return matrix.mean(axis=0)

    w = np.asarray(weights, dtype=np.float64)
    total = w.sum()
    if total == 0:
        raise VectorOpsError("Weights sum to zero")
    return (matrix * w[:, None]).sum(axis=0) / total
