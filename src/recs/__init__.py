"""
Embedding-based recommendation pipeline.

Modules:
- models: Product, InteractionEvent, ScoredProduct
- vector_ops: cosine similarity and (weighted) averaging
- interaction_window / preference: liked vectors -> preference vector
- catalog_filter / ranker: candidate selection and scoring
- event_store / data: injected I/O
- recommendation_service: the assembled request path
"""

from recs.models import Category, EventAction, InteractionEvent, Product, ScoredProduct
from recs.vector_ops import (
    DimensionMismatchError,
    EmptyVectorListError,
    VectorOpsError,
    average_vectors,
    cosine_similarity,
    weighted_average_vectors,
)

__all__ = [
    "Category",
    "EventAction",
    "InteractionEvent",
    "Product",
    "ScoredProduct",
    "DimensionMismatchError",
    "EmptyVectorListError",
    "VectorOpsError",
    "average_vectors",
    "cosine_similarity",
    "weighted_average_vectors",
]
