"""Google Calendar OAuth and events endpoints."""

from typing import Any

from fastapi import APIRouter, Body, Depends, Query, Response
from fastapi.responses import RedirectResponse
from pydantic import ValidationError as PydanticValidationError

from eventdesk.api.deps import (
    get_calendar_client,
    get_current_user,
    get_google_broker,
    get_optional_user,
    get_store,
)
from eventdesk.core.errors import ValidationError
from eventdesk.core.logging import provider_ctx
from eventdesk.integrations.google_calendar import (
    GoogleCalendarClient,
    GoogleTokenBroker,
    build_calendar_event,
)
from eventdesk.models import Event
from eventdesk.schemas import CamelModel, OAuthStartRequest, OAuthStartResponse
from eventdesk.store import Store


def _tag_provider() -> None:
    provider_ctx.set("google")


class BookedEventRef(CamelModel):
    event_id: int


router = APIRouter(
    prefix="/google-calendar",
    tags=["google-calendar"],
    dependencies=[Depends(_tag_provider)],
)


@router.options("/{path:path}")
async def preflight(path: str) -> Response:
    return Response(status_code=200)


@router.post("/auth", response_model=OAuthStartResponse)
async def start_auth(
    payload: OAuthStartRequest,
    user_id: str | None = Depends(get_optional_user),
    broker: GoogleTokenBroker = Depends(get_google_broker),
) -> OAuthStartResponse:
    """Return the Google consent URL for the calling user."""
    url = await broker.initiate_auth(user_id, payload.client_origin)
    return OAuthStartResponse(authorize_url=url)


@router.get("/callback")
async def auth_callback(
    code: str | None = Query(default=None),
    state: str | None = Query(default=None),
    broker: GoogleTokenBroker = Depends(get_google_broker),
) -> RedirectResponse:
    """Exchange the authorization code and send the browser back to the app."""
    redirect_url = await broker.handle_callback(code, state)
    return RedirectResponse(redirect_url, status_code=302)


@router.get("/events")
async def list_calendar_events(
    time_min: str | None = Query(default=None, alias="timeMin"),
    time_max: str | None = Query(default=None, alias="timeMax"),
    user_id: str = Depends(get_current_user),
    calendar: GoogleCalendarClient = Depends(get_calendar_client),
) -> list[dict[str, Any]]:
    """Events on the user's primary calendar, next 30 days by default."""
    return await calendar.list_events(user_id, time_min, time_max)


@router.post("/create-event")
async def create_calendar_event(
    payload: dict[str, Any] = Body(...),
    user_id: str = Depends(get_current_user),
    calendar: GoogleCalendarClient = Depends(get_calendar_client),
    store: Store = Depends(get_store),
) -> dict[str, Any]:
    """Create a calendar entry.

    The body is either a Google event resource, sent as-is, or
    `{"eventId": <id>}` naming a booked event to map onto one.
    """
    if set(payload) == {"eventId"}:
        try:
            ref = BookedEventRef.model_validate(payload)
        except PydanticValidationError as exc:
            raise ValidationError("eventId must be an integer event id") from exc
        event = await store.get(Event, user_id, ref.event_id)
        payload = build_calendar_event(
            event, calendar.config.timezone, calendar.config.event_duration_hours
        )
    return await calendar.create_event(user_id, payload)
