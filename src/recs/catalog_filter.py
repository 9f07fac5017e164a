"""
Catalog predicates applied before scoring.

Two views of the same catalog:
- recommendation candidates: category match, optionally only
  recommendation_only items ("exclusive" mode)
- public listing: category match and not recommendation_only
"""

from typing import List, Sequence

from recs.models import Product


def filter_for_recommendations(
    products: Sequence[Product],
    category: str,
    exclusive_only: bool = False,
) -> List[Product]:
    """Products eligible for scoring, in catalog order."""
    selected = [p for p in products if p.category == category]
    if exclusive_only:
        selected = [p for p in selected if p.recommendation_only]
    return selected


def filter_for_listing(products: Sequence[Product], category: str) -> List[Product]:
    """Products shown in the browse catalog, in catalog order."""
    return [p for p in products if p.category == category and not p.recommendation_only]
