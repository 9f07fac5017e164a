"""
Catalog browsing routes.

The public listing hides recommendation-only items; those only surface
through /api/recommendations.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_category, get_recommendation_service
from core.logging import get_logger
from recs.data import DataFileError
from recs.recommendation_service import RecommendationService


logger = get_logger(__name__)

router = APIRouter(prefix="/api/products", tags=["Products"])


@router.get("", summary="List catalog products for a category")
def list_products(
    category: str = Depends(get_category),
    service: RecommendationService = Depends(get_recommendation_service),
) -> List[Dict[str, Any]]:
    try:
        products = service.list_catalog(category)
    except DataFileError as e:
        logger.error("Failed to load catalog", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch products")
    return [p.model_dump() for p in products]
