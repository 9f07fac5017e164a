"""
Interaction event routes.

The log has no user/session key: every client shares one append-only list.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_event_store
from core.logging import get_logger
from recs.event_store import EventLogError, EventStore
from recs.models import EventRequest, InteractionEvent, SuccessResponse


logger = get_logger(__name__)

router = APIRouter(prefix="/api/events", tags=["Events"])


@router.post("", summary="Record an interaction", response_model=SuccessResponse)
def record_event(
    request: EventRequest,
    store: EventStore = Depends(get_event_store),
) -> SuccessResponse:
    try:
        event = store.append(InteractionEvent(product_id=request.product_id, action=request.action))
    except EventLogError as e:
        logger.error("Event log not writable", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to save event")
    logger.info("Event recorded", product_id=event.product_id, action=event.action)
    return SuccessResponse()


@router.get("", summary="List recorded interactions")
def list_events(store: EventStore = Depends(get_event_store)) -> List[Dict[str, Any]]:
    return [e.model_dump(by_alias=True) for e in store.list_events()]


@router.delete("", summary="Clear the interaction log", response_model=SuccessResponse)
def clear_events(store: EventStore = Depends(get_event_store)) -> SuccessResponse:
    store.clear()
    logger.info("Event log cleared")
    return SuccessResponse()
