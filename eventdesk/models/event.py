"""Event model."""

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from eventdesk.models.base import Base, JSONType, OwnedMixin, TimestampMixin


class EventStatus(enum.Enum):
    """Booking status of a scheduled event."""

    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class Event(Base, OwnedMixin, TimestampMixin):
    """A booked event, created only by promoting a completed inquiry."""

    __tablename__ = "events"

    id: Mapped[int] = mapped_column(primary_key=True)
    client_id: Mapped[int] = mapped_column(ForeignKey("clients.id"), nullable=False)
    source_inquiry_id: Mapped[int | None] = mapped_column(Integer, unique=True)
    fraternity: Mapped[str] = mapped_column(String(255), nullable=False)
    school: Mapped[str] = mapped_column(String(255), nullable=False)
    event_name: Mapped[str] = mapped_column(String(255), nullable=False)
    event_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    address_of_event: Mapped[str] = mapped_column(String(500), default="", nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    budget: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    stage_build: Mapped[str] = mapped_column(String(50), default="None", nullable=False)
    status: Mapped[EventStatus] = mapped_column(
        Enum(EventStatus), default=EventStatus.PENDING, nullable=False
    )

    tasks: Mapped[list[dict]] = mapped_column(JSONType, default=list, nullable=False)
    progress: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
