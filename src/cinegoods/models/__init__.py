"""SQLAlchemy ORM models."""

from cinegoods.models.base import Base
from cinegoods.models.event import CinemaId, Event, EventStatus

__all__ = ["Base", "CinemaId", "Event", "EventStatus"]
