"""
Recommendation routes.

Returns the top `recommendation_limit` products for a category, scored
against the recency-weighted average of the last likes. An all-zero
result means there is no preference signal yet, not a failure.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Query

from api.dependencies import get_category, get_recommendation_service
from config.settings import Settings, get_settings
from core.logging import get_logger
from recs.data import DataFileError
from recs.recommendation_service import RecommendationService
from recs.vector_ops import VectorOpsError


logger = get_logger(__name__)

router = APIRouter(prefix="/api/recommendations", tags=["Recommendations"])


@router.get("", summary="Get personalized recommendations")
def get_recommendations(
    category: str = Depends(get_category),
    recommendation_only: bool = Query(
        default=False,
        alias="recommendationOnly",
        description="Only return items hidden from the public catalog",
    ),
    settings: Settings = Depends(get_settings),
    service: RecommendationService = Depends(get_recommendation_service),
) -> List[Dict[str, Any]]:
    try:
        ranked = service.recommend(
            category,
            exclusive_only=recommendation_only,
            limit=settings.recommendation_limit,
        )
    except DataFileError as e:
        logger.error("Recommendation data unavailable", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch recommendations")
    except VectorOpsError as e:
        logger.error("Inconsistent embedding data", category=category, error=str(e))
        raise HTTPException(status_code=500, detail=f"Failed to compute recommendations: {e}")
    return [p.model_dump() for p in ranked]
