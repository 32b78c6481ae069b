"""Client model."""

from sqlalchemy import Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from eventdesk.models.base import Base, OwnedMixin, TimestampMixin


class Client(Base, OwnedMixin, TimestampMixin):
    """A fraternity at a school that books events.

    `fraternity` + `school` is the identity key, matched case-insensitively.
    The three aggregate columns are maintained by the lifecycle engine.
    """

    __tablename__ = "clients"

    id: Mapped[int] = mapped_column(primary_key=True)
    fraternity: Mapped[str] = mapped_column(String(255), nullable=False)
    school: Mapped[str] = mapped_column(String(255), nullable=False)
    main_contact_name: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    phone_number: Mapped[str] = mapped_column(String(32), default="", nullable=False)
    instagram_handle: Mapped[str] = mapped_column(String(255), default="N/A", nullable=False)

    number_of_events: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    average_event_size: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    client_score: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
