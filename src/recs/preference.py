"""
User preference vector.

Recency-weighted average of the windowed like vectors: the i-th vector
(oldest first, 1-indexed) gets weight i, so with three likes the weights
are 1, 2, 3 and the latest like counts most.
"""

from typing import List, Optional

import numpy as np

from recs.interaction_window import InteractionWindow
from recs.vector_ops import weighted_average_vectors


def recency_weights(count: int) -> List[float]:
    return [float(i + 1) for i in range(count)]


def build_preference_vector(window: InteractionWindow) -> Optional[np.ndarray]:
    """Return the preference vector, or None when the window carries no signal."""
    if not window.has_signal:
        return None
    return weighted_average_vectors(window.vectors, recency_weights(len(window.vectors)))
