"""Event model for persisted goods events."""

from enum import Enum

from sqlalchemy import Boolean, Integer, String, Text
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column

from cinegoods.models.base import Base, TimestampMixin


class CinemaId(int, Enum):
    """Numeric cinema identifiers stored in ``events.cinema_id``."""

    CGV = 1
    MEGABOX = 2
    LOTTE = 3


class EventStatus(str, Enum):
    """Lifecycle status values, stored as the Korean labels the web app displays."""

    SCHEDULED = "예정"
    ACTIVE = "진행중"
    CLOSING_SOON = "마감임박"
    ENDED = "종료"


class Event(Base, TimestampMixin):
    """
    Goods event model.

    One row per merchandise promotion found on a cinema website.
    ``official_url`` is the deduplication key shared by all cinemas.
    New rows stay hidden (``is_visible=False``) until approved in the admin
    page unless the source policy says otherwise.
    """

    __tablename__ = "events"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    event_title: Mapped[str] = mapped_column(Text, nullable=False)
    movie_title: Mapped[str | None] = mapped_column(Text, nullable=True)
    cinema_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    goods_type: Mapped[str | None] = mapped_column(Text, nullable=True)
    period: Mapped[str | None] = mapped_column(String(200), nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    locations: Mapped[list[str]] = mapped_column(ARRAY(Text), nullable=False, default=list)
    official_url: Mapped[str] = mapped_column(
        String(1000), nullable=False, unique=True, index=True
    )

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=EventStatus.SCHEDULED.value
    )
    is_visible: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_new: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<Event(id={self.id!r}, cinema_id={self.cinema_id!r}, "
            f"event_title={self.event_title!r})>"
        )
