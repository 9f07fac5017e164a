"""
Sliding window over the interaction log.

Keeps the most recent positive events (oldest first) and resolves them to
embeddings. Likes for products without an embedding contribute nothing.
"""

from dataclasses import dataclass, field
from typing import List, Mapping, Sequence

import numpy as np

from recs.models import EventAction, InteractionEvent


DEFAULT_WINDOW_SIZE = 3


@dataclass(frozen=True)
class InteractionWindow:
    """Resolved window of liked products, oldest first."""

    product_ids: List[str] = field(default_factory=list)
    vectors: List[np.ndarray] = field(default_factory=list)
    # Positive events in the window whose product had no embedding
    unresolved_ids: List[str] = field(default_factory=list)

    @property
    def has_signal(self) -> bool:
        return len(self.vectors) > 0

    def __len__(self) -> int:
        return len(self.vectors)


def extract_window(
    events: Sequence[InteractionEvent],
    embeddings: Mapping[str, Sequence[float]],
    size: int = DEFAULT_WINDOW_SIZE,
    positive_action: str = EventAction.LIKE.value,
) -> InteractionWindow:
    """
    Take the last `size` positive events in log order and map them to vectors.

    The window is cut before resolution, so an unresolvable like still
    occupies a slot and can push an older resolvable like out.
    """
    if size <= 0:
        return InteractionWindow()

    positives = [e for e in events if e.action == positive_action]
    recent = positives[-size:]

    product_ids: List[str] = []
    vectors: List[np.ndarray] = []
    unresolved: List[str] = []
    for event in recent:
        vec = embeddings.get(event.product_id)
        if vec is None:
            unresolved.append(event.product_id)
            continue
        product_ids.append(event.product_id)
        vectors.append(np.asarray(vec, dtype=np.float64))

    return InteractionWindow(product_ids=product_ids, vectors=vectors, unresolved_ids=unresolved)
