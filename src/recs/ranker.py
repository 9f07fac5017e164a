"""
Similarity ranker.

Scores every filtered product against the preference vector and returns
the full list sorted by score descending. Ties keep catalog order
(Python's sort is stable). Truncation is the caller's job.
"""

from typing import List, Mapping, Optional, Sequence

import numpy as np

from recs.models import Product, ScoredProduct
from recs.vector_ops import cosine_similarity, weighted_cosine_similarity


def score_product(
    product: Product,
    preference: np.ndarray,
    embeddings: Mapping[str, Sequence[float]],
    mask_weights: Optional[Sequence[float]] = None,
) -> float:
    vec = embeddings.get(product.id)
    if vec is None:
        return 0.0
    if mask_weights is not None:
        return weighted_cosine_similarity(preference, vec, mask_weights)
    return cosine_similarity(preference, vec)


def rank_products(
    products: Sequence[Product],
    preference: Optional[np.ndarray],
    embeddings: Mapping[str, Sequence[float]],
    mask_weights: Optional[Sequence[float]] = None,
) -> List[ScoredProduct]:
    """
    Score and sort products.

    Without a preference vector (cold start) every product scores 0 and the
    input order is kept.
    """
    if preference is None:
        return [ScoredProduct.from_product(p, 0.0) for p in products]

    scored = [
        ScoredProduct.from_product(p, score_product(p, preference, embeddings, mask_weights))
        for p in products
    ]
    return sorted(scored, key=lambda sp: -sp.score)
