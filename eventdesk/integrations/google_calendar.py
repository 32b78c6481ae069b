"""Google Calendar: OAuth broker and events API client."""

from datetime import datetime, timedelta
from typing import Any
from zoneinfo import ZoneInfo

import httpx

from eventdesk.core.errors import ProviderAPIError
from eventdesk.core.logging import get_logger
from eventdesk.integrations.token_broker import OAuthTokenBroker, error_description
from eventdesk.models import Event, OAuthProvider

logger = get_logger(__name__)

GOOGLE_SCOPES = (
    "https://www.googleapis.com/auth/calendar.events",
    "https://www.googleapis.com/auth/calendar.readonly",
)
DEFAULT_LOOKAHEAD = timedelta(days=30)


class GoogleTokenBroker(OAuthTokenBroker):
    """Confidential-client OAuth against Google's token endpoint."""

    provider = OAuthProvider.GOOGLE
    display_name = "Google"
    scopes = GOOGLE_SCOPES
    success_path = "/calendar"

    @property
    def authorize_url(self) -> str:
        return self.config.google_auth_url

    @property
    def token_url(self) -> str:
        return self.config.google_token_url

    @property
    def redirect_uri(self) -> str:
        return self.config.google_redirect_uri or ""

    def missing_settings(self) -> list[str]:
        return self.config.missing_google_settings()

    def authorize_params(self, state: str) -> dict[str, str]:
        return {
            "client_id": self.config.google_oauth_client_id or "",
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": " ".join(self.scopes),
            # offline + consent so Google issues a refresh token every time
            "access_type": "offline",
            "prompt": "consent",
            "state": state,
        }

    def token_request(self, form: dict[str, str]) -> dict[str, Any]:
        return {
            "data": {
                **form,
                "client_id": self.config.google_oauth_client_id or "",
                "client_secret": self.config.google_oauth_client_secret or "",
            }
        }


def describe_event(event: Event) -> str:
    """Free-text calendar description of an event."""
    tasks = ", ".join(
        f"{task['name']} ({'done' if task.get('completed') else 'open'})"
        for task in event.tasks
    )
    status = event.status.value if hasattr(event.status, "value") else event.status
    return "\n".join(
        [
            f"Fraternity: {event.fraternity}",
            f"School: {event.school}",
            f"Capacity: {event.capacity}",
            f"Budget: ${event.budget:,.0f}",
            f"Stage: {event.stage_build}",
            f"Status: {status}",
            f"Tasks: {tasks or 'none'}",
        ]
    )


def build_calendar_event(
    event: Event,
    timezone: str,
    duration_hours: int = 2,
) -> dict[str, Any]:
    """Map an event onto a Google Calendar event resource.

    `event.event_date` is local wall-clock time; the entry lasts a fixed
    `duration_hours`.
    """
    tz = ZoneInfo(timezone)
    start = event.event_date.replace(tzinfo=tz)
    end = start + timedelta(hours=duration_hours)
    return {
        "summary": event.event_name,
        "location": event.address_of_event,
        "description": describe_event(event),
        "start": {"dateTime": start.isoformat(), "timeZone": timezone},
        "end": {"dateTime": end.isoformat(), "timeZone": timezone},
    }


class GoogleCalendarClient:
    """Calendar API calls made on behalf of a connected user."""

    def __init__(self, broker: GoogleTokenBroker, http: httpx.AsyncClient):
        self.broker = broker
        self.http = http
        self.config = broker.config

    async def list_events(
        self,
        user_id: str,
        time_min: str | None = None,
        time_max: str | None = None,
    ) -> list[dict[str, Any]]:
        """Events on the user's primary calendar, default next 30 days."""
        self.broker.ensure_configured()
        now = datetime.now().astimezone()
        params = {
            "timeMin": time_min or now.isoformat(),
            "timeMax": time_max or (now + DEFAULT_LOOKAHEAD).isoformat(),
            "singleEvents": "true",
            "orderBy": "startTime",
        }

        async def fetch(access_token: str) -> list[dict[str, Any]]:
            response = await self._call(
                "GET", access_token, "Failed to fetch Google Calendar events", params=params
            )
            return response.get("items", [])

        return await self.broker.with_fresh_token(user_id, fetch)

    async def create_event(self, user_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Insert a provider-shaped event resource."""
        self.broker.ensure_configured()

        async def create(access_token: str) -> dict[str, Any]:
            return await self._call(
                "POST", access_token, "Failed to create Google Calendar event", json=payload
            )

        return await self.broker.with_fresh_token(user_id, create)

    async def sync_event(self, user_id: str, event: Event) -> bool:
        """Create the calendar entry for a newly booked event.

        Returns False without calling Google when the user never connected.
        """
        if self.broker.missing_settings() or not await self.broker.is_connected(user_id):
            return False
        created = await self.create_event(
            user_id,
            build_calendar_event(
                event, self.config.timezone, self.config.event_duration_hours
            ),
        )
        logger.info("calendar_event_created", event_id=event.id, google_event_id=created.get("id"))
        return True

    async def _call(
        self,
        method: str,
        access_token: str,
        context: str,
        **kwargs: Any,
    ) -> dict[str, Any]:
        try:
            response = await self.http.request(
                method,
                self.config.google_calendar_api_url,
                headers={"Authorization": f"Bearer {access_token}"},
                **kwargs,
            )
        except httpx.HTTPError as exc:
            raise ProviderAPIError("Google", f"{context}: {exc}") from exc
        if response.is_error:
            reason = error_description(response)
            logger.error("google_calendar_error", status_code=response.status_code, reason=reason)
            raise ProviderAPIError("Google", f"{context}: {reason}", response.status_code)
        return response.json()
