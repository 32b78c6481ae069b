"""Inquiries API endpoints."""

from fastapi import APIRouter, Depends, Query, status
from pydantic import Field

from eventdesk.api.deps import get_current_user, get_engine, get_store
from eventdesk.lifecycle import InquiryLifecycleEngine, ToggleResult
from eventdesk.models import Inquiry
from eventdesk.schemas import CamelModel, EventOut, InquiryDetails, InquiryOut
from eventdesk.store import Store

router = APIRouter(prefix="/api/inquiries", tags=["inquiries"])


class InquiryCreateRequest(InquiryDetails):
    """New inquiry, optionally pinned to a known client."""

    existing_client_id: int | None = Field(default=None)


class TaskToggleResponse(CamelModel):
    """Result of toggling an inquiry task.

    `inquiry` is null once the toggle completed the checklist; the booked
    event is returned instead.
    """

    inquiry: InquiryOut | None = None
    event: EventOut | None = None
    promoted: bool = False
    calendar_synced: bool | None = None
    calendar_error: str | None = None


def _to_toggle_response(result: ToggleResult) -> TaskToggleResponse:
    return TaskToggleResponse(
        inquiry=InquiryOut.model_validate(result.inquiry) if result.inquiry else None,
        event=EventOut.model_validate(result.event) if result.event else None,
        promoted=result.promoted,
        calendar_synced=result.calendar_synced,
        calendar_error=result.calendar_error,
    )


@router.get("", response_model=list[InquiryOut])
async def list_inquiries(
    client_id: int | None = Query(default=None, alias="clientId"),
    user_id: str = Depends(get_current_user),
    store: Store = Depends(get_store),
    engine: InquiryLifecycleEngine = Depends(get_engine),
) -> list[InquiryOut]:
    """List open inquiries, optionally for one client.

    Promotions a failure left half done are finished first, so a booked
    inquiry never lingers next to its event.
    """
    await engine.resume_promotions(user_id)
    filters = [Inquiry.client_id == client_id] if client_id is not None else []
    inquiries = await store.select(Inquiry, user_id, *filters)
    return [InquiryOut.model_validate(inquiry) for inquiry in inquiries]


@router.post("", response_model=InquiryOut, status_code=status.HTTP_201_CREATED)
async def create_inquiry(
    payload: InquiryCreateRequest,
    user_id: str = Depends(get_current_user),
    engine: InquiryLifecycleEngine = Depends(get_engine),
) -> InquiryOut:
    """Create an inquiry, matching or creating its client."""
    details = InquiryDetails.model_validate(payload.model_dump(exclude={"existing_client_id"}))
    inquiry = await engine.add_inquiry(user_id, details, payload.existing_client_id)
    return InquiryOut.model_validate(inquiry)


@router.get("/{inquiry_id}", response_model=InquiryOut)
async def get_inquiry(
    inquiry_id: int,
    user_id: str = Depends(get_current_user),
    store: Store = Depends(get_store),
) -> InquiryOut:
    """Get inquiry by ID."""
    return InquiryOut.model_validate(await store.get(Inquiry, user_id, inquiry_id))


@router.put("/{inquiry_id}", response_model=InquiryOut)
async def update_inquiry(
    inquiry_id: int,
    payload: InquiryDetails,
    user_id: str = Depends(get_current_user),
    engine: InquiryLifecycleEngine = Depends(get_engine),
) -> InquiryOut:
    """Edit an inquiry; tasks and progress are kept."""
    inquiry = await engine.update_inquiry(user_id, inquiry_id, payload)
    return InquiryOut.model_validate(inquiry)


@router.post("/{inquiry_id}/tasks/{task_id}/toggle", response_model=TaskToggleResponse)
async def toggle_inquiry_task(
    inquiry_id: int,
    task_id: str,
    user_id: str = Depends(get_current_user),
    engine: InquiryLifecycleEngine = Depends(get_engine),
) -> TaskToggleResponse:
    """Flip one task; completing the checklist books the event."""
    result = await engine.toggle_inquiry_task(user_id, inquiry_id, task_id)
    return _to_toggle_response(result)
