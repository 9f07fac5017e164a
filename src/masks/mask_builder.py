"""
Binary-tier weight mask from a variance profile.

The top ceil(dim * percentile) dimensions by variance get `high_weight`,
everything else gets `low_weight`. High-variance dimensions are the ones
that move when the category attribute (clothing style, frame shape) is
perturbed while identity, pose and lighting stay fixed.
"""

import math
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from masks.models import TopDim


MAX_TOP_DIMS = 50


class MaskParameterError(ValueError):
    """Raised for an empty variance vector or a percentile outside (0, 1]."""


@dataclass(frozen=True)
class MaskWeights:
    weights: List[float]
    top_k: int
    top_dims: List[TopDim]


def high_variance_count(dim: int, percentile: float) -> int:
    # round() guards against products like 10 * 0.3 == 3.0000000000000004
    return min(dim, max(1, math.ceil(round(dim * percentile, 9))))


def build_weights_from_variance(
    variance: Sequence[float],
    percentile: float,
    high_weight: float,
    low_weight: float,
    max_top_dims: int = MAX_TOP_DIMS,
) -> MaskWeights:
    if not 0 < percentile <= 1:
        raise MaskParameterError(f"percentile must be in (0, 1], got {percentile}")

    values = np.asarray(variance, dtype=np.float64).reshape(-1)
    dim = values.shape[0]
    if dim == 0:
        raise MaskParameterError("variance vector is empty")

    top_k = high_variance_count(dim, percentile)
    # Stable sort: equal variances keep ascending index order
    order = np.argsort(-values, kind="stable")
    selected = order[:top_k]

    weights = np.full(dim, float(low_weight))
    weights[selected] = float(high_weight)

    top_dims = [
        TopDim(i=int(idx), variance=float(values[idx]))
        for idx in selected[:min(top_k, max_top_dims)]
    ]
    return MaskWeights(weights=weights.tolist(), top_k=top_k, top_dims=top_dims)
