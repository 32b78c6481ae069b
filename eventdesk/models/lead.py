"""Lead model."""

import enum

from sqlalchemy import Enum, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from eventdesk.models.base import Base, OwnedMixin, TimestampMixin


class LeadStatus(enum.Enum):
    """Qualification status of a cold lead."""

    GENERAL = "General"
    INTERESTED = "Interested"
    NOT_INTERESTED = "Not Interested"


class Lead(Base, OwnedMixin, TimestampMixin):
    """An unqualified contact, optionally converted into an inquiry by hand."""

    __tablename__ = "leads"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255))
    phone_number: Mapped[str | None] = mapped_column(String(32))
    school: Mapped[str | None] = mapped_column(String(255))
    fraternity: Mapped[str | None] = mapped_column(String(255))
    instagram_handle: Mapped[str | None] = mapped_column(String(255))
    status: Mapped[LeadStatus] = mapped_column(
        Enum(LeadStatus), default=LeadStatus.GENERAL, nullable=False
    )
    notes: Mapped[str | None] = mapped_column(Text)
    election_date: Mapped[str | None] = mapped_column(String(32))
