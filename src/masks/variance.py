"""
Per-dimension population variance across a set of embeddings.

variance[d] = mean(x_d^2) - mean(x_d)^2, clamped at 0 so float
cancellation never yields a negative variance.
"""

from typing import List, Sequence

import numpy as np

from recs.vector_ops import VectorOpsError, as_vector


class VarianceInputError(VectorOpsError):
    """Raised for an empty or ragged list of embeddings."""


def compute_variance_per_dim(vectors: Sequence[Sequence[float]]) -> List[float]:
    if len(vectors) == 0:
        raise VarianceInputError("Need at least one embedding to compute variance")

    rows = [as_vector(v) for v in vectors]
    dim = rows[0].shape[0]
    for i, row in enumerate(rows):
        if row.shape[0] != dim:
            raise VarianceInputError(
                f"Inconsistent vector dims at index {i}: expected {dim}, got {row.shape[0]}"
            )

    matrix = np.vstack(rows)
    mean = matrix.mean(axis=0)
    mean_sq = (matrix * matrix).mean(axis=0)
    return np.maximum(0.0, mean_sq - mean * mean).tolist()
