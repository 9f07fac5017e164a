"""
FastAPI dependencies.

Routes receive the repository, event store and recommendation service via
Depends so tests can swap them through app.dependency_overrides.
"""

from typing import Optional

from fastapi import Depends, HTTPException, Query

from config.settings import Settings, get_settings
from recs.data import DataRepository
from recs.event_store import EventStore, JsonFileEventStore
from recs.recommendation_service import RecommendationService


def get_repository(settings: Settings = Depends(get_settings)) -> DataRepository:
    return DataRepository.from_settings(settings)


def get_event_store(settings: Settings = Depends(get_settings)) -> EventStore:
    return JsonFileEventStore(settings.events_path)


def get_recommendation_service(
    settings: Settings = Depends(get_settings),
    repository: DataRepository = Depends(get_repository),
    event_store: EventStore = Depends(get_event_store),
) -> RecommendationService:
    return RecommendationService(
        repository,
        event_store,
        window_size=settings.like_window_size,
        positive_action=settings.positive_action,
        apply_mask=settings.apply_variance_mask,
    )


def get_category(
    category: Optional[str] = Query(default=None, description="Product category, e.g. 'apparel' or 'eyewear'"),
    settings: Settings = Depends(get_settings),
) -> str:
    """Resolve the category query param, defaulting and validating it."""
    value = category or settings.default_category
    if value not in settings.categories:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown category '{value}'. Expected one of: {', '.join(settings.categories)}",
        )
    return value
