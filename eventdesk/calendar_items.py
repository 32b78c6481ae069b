"""Items shown on the calendar: inquiries, booked events, and Google entries."""

from datetime import date, datetime
from typing import Annotated, Any, Literal

from pydantic import Field

from eventdesk.core.logging import get_logger
from eventdesk.lifecycle.tasks import combine_event_date
from eventdesk.models import Event, EventStatus, Inquiry
from eventdesk.schemas import CamelModel

logger = get_logger(__name__)


class InquiryCalendarItem(CamelModel):
    kind: Literal["inquiry"] = "inquiry"
    inquiry_id: int
    title: str
    starts_at: datetime
    location: str
    progress: float

    @classmethod
    def from_inquiry(cls, inquiry: Inquiry) -> "InquiryCalendarItem":
        return cls(
            inquiry_id=inquiry.id,
            title=f"{inquiry.fraternity} - {inquiry.school} (inquiry)",
            starts_at=combine_event_date(inquiry.inquiry_date, inquiry.inquiry_time),
            location=inquiry.address_of_event,
            progress=inquiry.progress,
        )


class EventCalendarItem(CamelModel):
    kind: Literal["event"] = "event"
    event_id: int
    title: str
    starts_at: datetime
    location: str
    fraternity: str
    school: str
    budget: float
    status: EventStatus

    @classmethod
    def from_event(cls, event: Event) -> "EventCalendarItem":
        return cls(
            event_id=event.id,
            title=event.event_name,
            starts_at=event.event_date,
            location=event.address_of_event,
            fraternity=event.fraternity,
            school=event.school,
            budget=event.budget,
            status=event.status,
        )


class ExternalCalendarItem(CamelModel):
    """An entry read from the user's Google Calendar."""

    kind: Literal["external"] = "external"
    external_id: str
    title: str
    starts_at: datetime
    location: str = ""
    html_link: str | None = None

    @classmethod
    def from_google(cls, item: dict[str, Any]) -> "ExternalCalendarItem":
        """Build from a Google event resource.

        Raises:
            ValueError: If the entry has no parseable start.
        """
        start = item.get("start") or {}
        # All-day entries carry "date" instead of "dateTime".
        raw = start.get("dateTime") or start.get("date")
        if not isinstance(raw, str):
            raise ValueError(f"calendar entry {item.get('id')!r} has no start")
        starts_at = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        return cls(
            external_id=item.get("id", ""),
            title=item.get("summary") or "(no title)",
            starts_at=starts_at,
            location=item.get("location") or "",
            html_link=item.get("htmlLink"),
        )


def external_items(items: list[dict[str, Any]]) -> list[ExternalCalendarItem]:
    """Convert Google entries, skipping any that cannot be placed on a day."""
    converted: list[ExternalCalendarItem] = []
    for item in items:
        try:
            converted.append(ExternalCalendarItem.from_google(item))
        except ValueError as exc:
            logger.warning(
                "calendar_entry_skipped", external_id=item.get("id"), error=str(exc)
            )
    return converted


CalendarItem = Annotated[
    InquiryCalendarItem | EventCalendarItem | ExternalCalendarItem,
    Field(discriminator="kind"),
]


def items_on(items: list[CalendarItem], day: date) -> list[CalendarItem]:
    """Items starting on `day` (local date of the start), earliest first."""
    selected = [item for item in items if item.starts_at.date() == day]
    return sorted(selected, key=lambda item: item.starts_at.replace(tzinfo=None))
