"""Events API endpoints."""

from fastapi import APIRouter, Depends

from eventdesk.api.deps import get_current_user, get_engine, get_store
from eventdesk.lifecycle import InquiryLifecycleEngine
from eventdesk.models import Event
from eventdesk.schemas import EventOut, EventUpdate
from eventdesk.store import Store

router = APIRouter(prefix="/api/events", tags=["events"])


@router.get("", response_model=list[EventOut])
async def list_events(
    user_id: str = Depends(get_current_user),
    store: Store = Depends(get_store),
) -> list[EventOut]:
    """List booked events, soonest first."""
    events = await store.select(Event, user_id, order_by=Event.event_date)
    return [EventOut.model_validate(event) for event in events]


@router.get("/{event_id}", response_model=EventOut)
async def get_event(
    event_id: int,
    user_id: str = Depends(get_current_user),
    store: Store = Depends(get_store),
) -> EventOut:
    """Get event by ID."""
    return EventOut.model_validate(await store.get(Event, user_id, event_id))


@router.patch("/{event_id}", response_model=EventOut)
async def update_event(
    event_id: int,
    payload: EventUpdate,
    user_id: str = Depends(get_current_user),
    engine: InquiryLifecycleEngine = Depends(get_engine),
) -> EventOut:
    """Partially update an event's editable fields."""
    return EventOut.model_validate(await engine.update_event(user_id, event_id, payload))


@router.post("/{event_id}/tasks/{task_id}/toggle", response_model=EventOut)
async def toggle_event_task(
    event_id: int,
    task_id: str,
    user_id: str = Depends(get_current_user),
    engine: InquiryLifecycleEngine = Depends(get_engine),
) -> EventOut:
    """Flip one event task and recompute progress."""
    return EventOut.model_validate(await engine.toggle_event_task(user_id, event_id, task_id))
