"""Pydantic models for entity input and output.

Attributes are snake_case; the wire format is camelCase through aliases so
the SPA can post and read the same shapes it always has.
"""

from datetime import date, datetime
from typing import Literal
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from eventdesk.core.config import settings
from eventdesk.models import EventStatus, InquiryStage, LeadStatus

StageBuild = Literal[
    "None", "Base Stage", "Totem Stage", "SL 100", "SL 75", "SL260", "Custom Rig"
]
PowerOption = Literal["None", "Gas Generators", "20kW Diesel", "36kW", "Provided"]
AudioOption = Literal["QSC Rig", "4 Arrays 2 Subs", "8 Arrays 4 Subs", "Custom"]


class CamelModel(BaseModel):
    """Base model with camelCase aliases that also accepts field names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class TaskItem(CamelModel):
    """One checklist item on an inquiry or event."""

    id: str
    name: str
    completed: bool = False


class InquiryDetails(CamelModel):
    """Editable inquiry fields (everything except id, client, tasks, progress)."""

    school: str = Field(min_length=1, max_length=255)
    fraternity: str = Field(min_length=1, max_length=255)
    main_contact: str = Field(min_length=1, max_length=255)
    phone_number: str = Field(default="", max_length=32)
    address_of_event: str = Field(default="", max_length=500)
    capacity: int = Field(default=0, ge=0)
    budget: float = Field(default=0, ge=0)
    inquiry_date: date
    inquiry_time: str = Field(default="00:00", pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    stage_build: StageBuild = "None"
    power: PowerOption = "None"
    gates: bool = False
    security: bool = False
    co2_tanks: int = Field(default=0, ge=0)
    cdjs: int = Field(default=0, ge=0)
    audio: AudioOption = "QSC Rig"

    @field_validator("inquiry_date", mode="before")
    @classmethod
    def drop_time_component(cls, value: object) -> object:
        """Keep only the calendar date; the wall-clock time lives in inquiry_time."""
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, str) and "T" in value:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
        return value


class ClientDetails(CamelModel):
    """Editable client fields; counts and score are derived."""

    fraternity: str = Field(min_length=1, max_length=255)
    school: str = Field(min_length=1, max_length=255)
    main_contact_name: str = Field(default="", max_length=255)
    phone_number: str = Field(default="", max_length=32)
    instagram_handle: str = Field(default="N/A", max_length=255)
    average_event_size: float = Field(default=0, ge=0)


class EventUpdate(CamelModel):
    """Partial update of an event's editable fields."""

    event_name: str | None = Field(default=None, min_length=2, max_length=255)
    event_date: datetime | None = None
    address_of_event: str | None = Field(default=None, max_length=500)
    capacity: int | None = Field(default=None, ge=0)
    budget: float | None = Field(default=None, ge=0)
    stage_build: StageBuild | None = None
    status: EventStatus | None = None

    @field_validator("event_date")
    @classmethod
    def to_local_wall_clock(cls, value: datetime | None) -> datetime | None:
        """Store event times as naive wall-clock time in the configured timezone."""
        if value is not None and value.tzinfo is not None:
            return value.astimezone(ZoneInfo(settings.timezone)).replace(tzinfo=None)
        return value


class LeadDetails(CamelModel):
    """Lead fields supplied on create and CSV import."""

    name: str = Field(min_length=1, max_length=255)
    email: str | None = Field(default=None, max_length=255)
    phone_number: str | None = Field(default=None, max_length=32)
    school: str | None = Field(default=None, max_length=255)
    fraternity: str | None = Field(default=None, max_length=255)
    instagram_handle: str | None = Field(default=None, max_length=255)
    status: LeadStatus = LeadStatus.GENERAL
    notes: str | None = None
    election_date: str | None = Field(default=None, max_length=32)


class LeadUpdate(CamelModel):
    """Partial lead update."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    email: str | None = Field(default=None, max_length=255)
    phone_number: str | None = Field(default=None, max_length=32)
    school: str | None = Field(default=None, max_length=255)
    fraternity: str | None = Field(default=None, max_length=255)
    instagram_handle: str | None = Field(default=None, max_length=255)
    status: LeadStatus | None = None
    notes: str | None = None
    election_date: str | None = Field(default=None, max_length=32)


class LeadConversion(CamelModel):
    """Booking details the user supplies when turning a lead into an inquiry."""

    address_of_event: str = Field(default="", max_length=500)
    capacity: int = Field(default=0, ge=0)
    budget: float = Field(default=0, ge=0)
    inquiry_date: date
    inquiry_time: str = Field(default="00:00", pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    stage_build: StageBuild = "None"
    power: PowerOption = "None"
    gates: bool = False
    security: bool = False
    co2_tanks: int = Field(default=0, ge=0)
    cdjs: int = Field(default=0, ge=0)
    audio: AudioOption = "QSC Rig"


class ClientOut(CamelModel):
    """Client as returned to the presentation layer."""

    id: int
    fraternity: str
    school: str
    main_contact_name: str
    phone_number: str
    instagram_handle: str
    average_event_size: float
    number_of_events: int
    client_score: float


class InquiryOut(InquiryDetails):
    """Inquiry as returned to the presentation layer."""

    id: int
    client_id: int
    tasks: list[TaskItem]
    progress: float
    stage: InquiryStage = InquiryStage.OPEN


class EventOut(CamelModel):
    """Event as returned to the presentation layer."""

    id: int
    client_id: int
    fraternity: str
    school: str
    event_name: str
    event_date: datetime
    address_of_event: str
    capacity: int
    budget: float
    stage_build: str
    status: EventStatus
    tasks: list[TaskItem]
    progress: float


class LeadOut(LeadDetails):
    """Lead as returned to the presentation layer."""

    id: int
    created_at: datetime
    updated_at: datetime | None = None


class OAuthStartRequest(CamelModel):
    """Body of a provider /auth call: where to send the browser afterwards."""

    client_origin: str = ""


class OAuthStartResponse(CamelModel):
    authorize_url: str
