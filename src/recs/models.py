"""
Pydantic models for the recommendation pipeline.

Models cover:
- Catalog products and their scored counterparts
- Interaction events from the (single, session-less) event log
- API request/response schemas
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Enums
# =============================================================================

class Category(str, Enum):
    """Known catalog categories."""
    APPAREL = "apparel"
    EYEWEAR = "eyewear"


class EventAction(str, Enum):
    """Interaction actions emitted by the UI. Only LIKE drives scoring."""
    LIKE = "like"
    DISLIKE = "dislike"
    VIEW = "view"


# =============================================================================
# Catalog
# =============================================================================

class Product(BaseModel):
    """A catalog entry. Extra keys from products.yaml are preserved."""

    model_config = ConfigDict(extra="allow", frozen=True)

    id: str
    category: str = Category.APPAREL.value
    recommendation_only: bool = False
    image_path: Optional[str] = None


class ScoredProduct(Product):
    """A product with its similarity to the user's preference vector."""

    score: float = Field(default=0.0, ge=-1.0, le=1.0)

    @classmethod
    def from_product(cls, product: Product, score: float) -> "ScoredProduct":
        # A catalog row may carry its own "score" key; the computed one wins
        data = product.model_dump()
        data["score"] = score
        return cls(**data)


# =============================================================================
# Interaction Events
# =============================================================================

class InteractionEvent(BaseModel):
    """
    One entry of the append-only interaction log.

    Serialized with the camelCase keys the UI posts (`productId`).
    Unknown action tags are kept as plain strings.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    product_id: str = Field(..., alias="productId", min_length=1)
    action: str = Field(..., min_length=1)
    timestamp: Optional[str] = None


# =============================================================================
# API Schemas
# =============================================================================

class EventRequest(BaseModel):
    """Body of POST /api/events."""

    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(..., alias="productId", min_length=1, description="Product the user interacted with")
    action: str = Field(..., min_length=1, description="Action tag, e.g. 'like'")


class SuccessResponse(BaseModel):
    success: bool = True
