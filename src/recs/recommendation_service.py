"""
Recommendation service.

Request path:
    CatalogFilter -> InteractionWindow -> PreferenceVector -> SimilarityRanker

Catalog, embeddings and events are read fresh on every call and treated as
read-only snapshots. A request with no usable likes still returns the full
filtered list with score 0 (cold start), never an error.
"""

from typing import List, Optional, Sequence

import numpy as np

from core.logging import LoggerMixin
from recs.catalog_filter import filter_for_listing, filter_for_recommendations
from recs.data import DataRepository
from recs.event_store import EventStore
from recs.interaction_window import DEFAULT_WINDOW_SIZE, extract_window
from recs.models import EventAction, InteractionEvent, Product, ScoredProduct
from recs.preference import build_preference_vector
from recs.ranker import rank_products


class RecommendationService(LoggerMixin):
    """
    Usage:
        service = RecommendationService(DataRepository(Path(".")), JsonFileEventStore(Path("events.json")))
        top = service.recommend("apparel", limit=6)
    """

    def __init__(
        self,
        repository: DataRepository,
        event_store: EventStore,
        window_size: int = DEFAULT_WINDOW_SIZE,
        positive_action: str = EventAction.LIKE.value,
        apply_mask: bool = False,
    ) -> None:
        self.repository = repository
        self.event_store = event_store
        self.window_size = window_size
        self.positive_action = positive_action
        self.apply_mask = apply_mask

    def rank(
        self,
        events: Sequence[InteractionEvent],
        category: str,
        exclusive_only: bool = False,
    ) -> List[ScoredProduct]:
        """Score and sort every eligible product in `category` against `events`."""
        catalog = self.repository.load_catalog()
        embeddings = self.repository.load_embeddings()

        candidates = filter_for_recommendations(catalog, category, exclusive_only)
        window = extract_window(events, embeddings, self.window_size, self.positive_action)
        preference = build_preference_vector(window)

        if window.unresolved_ids:
            self.logger.debug("Likes without embeddings ignored", product_ids=window.unresolved_ids)

        mask_weights = self._mask_weights(category, preference) if self.apply_mask else None
        ranked = rank_products(candidates, preference, embeddings, mask_weights)

        self.logger.info(
            "Ranked products",
            category=category,
            exclusive_only=exclusive_only,
            candidates=len(candidates),
            window=window.product_ids,
            has_signal=preference is not None,
            masked=mask_weights is not None,
        )
        return ranked

    def recommend(
        self,
        category: str,
        exclusive_only: bool = False,
        limit: Optional[int] = None,
    ) -> List[ScoredProduct]:
        """Rank against the stored event log and keep the top `limit`."""
        ranked = self.rank(self.event_store.list_events(), category, exclusive_only)
        return ranked if limit is None else ranked[:limit]

    def list_catalog(self, category: str) -> List[Product]:
        """Public browse listing: category match, recommendation-only items hidden."""
        return filter_for_listing(self.repository.load_catalog(), category)

    def _mask_weights(self, category: str, preference: Optional[np.ndarray]) -> Optional[List[float]]:
        if preference is None:
            return None
        mask = self.repository.load_mask(category)
        if mask is None:
            return None
        if len(mask.weights) != preference.shape[0]:
            self.logger.warning(
                "Mask length does not match embedding length, ignoring mask",
                category=category,
                mask_dim=len(mask.weights),
                embedding_dim=int(preference.shape[0]),
            )
            return None
        return mask.weights
