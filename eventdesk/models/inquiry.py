"""Inquiry model."""

import enum
from datetime import date

from sqlalchemy import Boolean, Date, Enum, Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from eventdesk.models.base import Base, JSONType, OwnedMixin, TimestampMixin


class InquiryStage(enum.Enum):
    """Lifecycle stage persisted on the inquiry row.

    Promoted inquiries are deleted, so only the two live stages are stored.
    """

    OPEN = "open"
    PROMOTING = "promoting"
    PROMOTED = "promoted"


class Inquiry(Base, OwnedMixin, TimestampMixin):
    """A prospective booking that becomes an Event once every task is done."""

    __tablename__ = "inquiries"

    id: Mapped[int] = mapped_column(primary_key=True)
    client_id: Mapped[int] = mapped_column(ForeignKey("clients.id"), nullable=False)
    school: Mapped[str] = mapped_column(String(255), nullable=False)
    fraternity: Mapped[str] = mapped_column(String(255), nullable=False)
    main_contact: Mapped[str] = mapped_column(String(255), nullable=False)
    phone_number: Mapped[str] = mapped_column(String(32), default="", nullable=False)
    address_of_event: Mapped[str] = mapped_column(String(500), default="", nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    budget: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    inquiry_date: Mapped[date] = mapped_column(Date, nullable=False)
    inquiry_time: Mapped[str] = mapped_column(String(5), default="00:00", nullable=False)

    stage_build: Mapped[str] = mapped_column(String(50), default="None", nullable=False)
    power: Mapped[str] = mapped_column(String(50), default="None", nullable=False)
    gates: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    security: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    co2_tanks: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    cdjs: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    audio: Mapped[str] = mapped_column(String(50), default="QSC Rig", nullable=False)

    tasks: Mapped[list[dict]] = mapped_column(JSONType, default=list, nullable=False)
    progress: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)

    # Promotion bookkeeping, see eventdesk.lifecycle.engine
    stage: Mapped[InquiryStage] = mapped_column(
        Enum(InquiryStage), default=InquiryStage.OPEN, nullable=False
    )
    client_stats_applied: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
