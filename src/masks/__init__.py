"""
Variance-mask discovery.

Derives per-category dimension weights from the embedding variance of
generated image variants of one base product.
"""

from masks.mask_builder import MaskParameterError, MaskWeights, build_weights_from_variance
from masks.models import MaskParams, TopDim, VarianceMask, VariantRecord
from masks.variance import VarianceInputError, compute_variance_per_dim

__all__ = [
    "MaskParameterError",
    "MaskWeights",
    "build_weights_from_variance",
    "MaskParams",
    "TopDim",
    "VarianceMask",
    "VariantRecord",
    "VarianceInputError",
    "compute_variance_per_dim",
]
