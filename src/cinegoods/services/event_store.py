"""Event persistence: dedup lookups and inserts against the events table."""

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cinegoods.models import Event

logger = logging.getLogger(__name__)


class EventStore:
    """Reads known event URLs and inserts new events."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """
        Args:
            session_factory: Factory from ``create_engine_and_sessionmaker``
        """
        self.session_factory = session_factory

    async def fetch_known_references(self) -> set[str]:
        """
        Return every stored ``official_url``, across all cinemas.

        Returns an empty set if the query fails, so the run continues; in that
        case events that are already stored may be processed and inserted again.
        """
        try:
            async with self.session_factory() as db:
                result = await db.execute(select(Event.official_url))
                urls = {url for url in result.scalars().all() if url}
        except Exception as e:
            logger.error(
                f"Could not load existing event URLs, continuing WITHOUT dedup. "
                f"Stored events may be processed and inserted again: {e}",
                exc_info=True,
            )
            return set()

        logger.info(f"Found {len(urls)} existing events in DB")
        return urls

    async def insert_event(self, row: dict[str, Any]) -> bool:
        """
        Insert one event row.

        Returns:
            True if the row was committed, False on any error (logged, not raised)
        """
        try:
            async with self.session_factory() as db:
                db.add(Event(**row))
                await db.commit()
        except IntegrityError as e:
            logger.warning(f"Event already stored, not inserted: {row.get('official_url')} ({e.orig})")
            return False
        except Exception as e:
            logger.error(f"Error saving {row.get('event_title')!r} to DB: {e}", exc_info=True)
            return False

        logger.info(f"Saved {row.get('event_title')!r} to DB")
        return True
