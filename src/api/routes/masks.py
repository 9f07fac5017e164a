"""Variance mask inspection routes."""

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_repository
from config.settings import Settings, get_settings
from recs.data import DataRepository


router = APIRouter(prefix="/api/masks", tags=["Masks"])


@router.get("/{category}", summary="Get the stored variance mask for a category")
def get_mask(
    category: str,
    settings: Settings = Depends(get_settings),
    repository: DataRepository = Depends(get_repository),
) -> Dict[str, Any]:
    if category not in settings.categories:
        raise HTTPException(status_code=400, detail=f"Unknown category '{category}'")
    mask = repository.load_mask(category)
    if mask is None:
        raise HTTPException(status_code=404, detail=f"No mask for category '{category}'")
    return mask.to_artifact()
