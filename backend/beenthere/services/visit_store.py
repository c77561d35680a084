"""
Visit Store - persistence and queries for user visits.

The store owns the lifecycle of a visit: it normalises the state code, stamps
the creation time and assigns the id. Nothing the client sends for those
fields is trusted. Visits are never updated, only created and deleted.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from ..core.changefeed import ChangeFeedHub, Subscription
from ..core.database import session_scope
from ..core.errors import MissingField, StoreFailure
from ..models.visit import Visit as VisitModel, new_visit_id
from ..schemas.visit import Visit

logger = logging.getLogger(__name__)


class VisitFeed:
    """
    Live feed of created visits.

    Deletions reach the underlying change feed as records without a new value;
    those are skipped so a consumer only ever sees real visits.
    """

    def __init__(self, subscription: Subscription):
        self._subscription = subscription

    async def next(self, timeout: Optional[float] = None) -> Optional[Visit]:
        """
        Wait for the next created visit.

        Returns the visit, or None once the feed has ended. A broken feed
        raises StoreFailure and an idle one asyncio.TimeoutError after
        ``timeout`` seconds.
        """
        while True:
            change = await self._subscription.get(timeout)
            if change is None:
                return None
            document = change.new_val
            if not document or not document.get("id"):
                continue
            return Visit.model_validate(document)

    def close(self) -> None:
        self._subscription.close()

    def __aiter__(self):
        return self

    async def __anext__(self) -> Visit:
        visit = await self.next()
        if visit is None:
            raise StopAsyncIteration
        return visit

    async def __aenter__(self) -> "VisitFeed":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()


class VisitStore:

    def __init__(self, session_factory: sessionmaker, changefeed: ChangeFeedHub):
        self._sessions = session_factory
        self._changefeed = changefeed

    def validate(self, visit: Visit) -> None:
        if not visit.city.strip():
            raise MissingField("missing 'city' field")
        if not visit.state.strip():
            raise MissingField("missing 'state' field")

    def add(self, visit: Visit) -> Visit:
        """
        Store a new visit.

        The passed visit is updated in place with its uppercased state, the
        creation timestamp and the generated id, and returned for convenience.
        """
        self.validate(visit)
        if not visit.user:
            raise MissingField("missing 'user' field")

        # Store states in uppercase for consistency
        visit.state = visit.state.strip().upper()
        visit.city = visit.city.strip()
        visit.timestamp = datetime.now(timezone.utc)
        visit.id = new_visit_id()

        record = VisitModel(
            id=visit.id,
            city=visit.city,
            state=visit.state,
            user=visit.user,
            timestamp=visit.timestamp,
        )
        try:
            with session_scope(self._sessions) as db:
                db.add(record)
                db.commit()
        except SQLAlchemyError as e:
            visit.id = ""
            raise StoreFailure(f"unable to add visit: {e}") from e

        logger.debug(f"Added visit {visit.id} for user {visit.user}")
        return visit

    def delete(self, visit_id: str) -> None:
        """Remove a visit. Deleting an unknown id is a no-op."""
        try:
            with session_scope(self._sessions) as db:
                record = db.get(VisitModel, visit_id)
                if record is None:
                    return
                db.delete(record)
                db.commit()
        except SQLAlchemyError as e:
            raise StoreFailure(f"unable to delete visit: {e}") from e

    def get_visits(self, user_id: str, start: int, limit: int) -> List[Visit]:
        """A user's visits, newest first, sliced to [start, start + limit)."""
        try:
            with session_scope(self._sessions) as db:
                records = db.query(VisitModel).filter(
                    VisitModel.user == user_id
                ).order_by(
                    desc(VisitModel.timestamp), VisitModel.id
                ).offset(start).limit(limit).all()
                return [Visit.model_validate(record) for record in records]
        except SQLAlchemyError as e:
            raise StoreFailure(f"unable to get visits: {e}") from e

    def get_states(self, user_id: str) -> List[str]:
        """Unique state codes visited by a user."""
        return self._distinct(VisitModel.state, user_id)

    def get_cities(self, user_id: str) -> List[str]:
        """Unique city names visited by a user."""
        return self._distinct(VisitModel.city, user_id)

    def _distinct(self, column, user_id: str) -> List[str]:
        try:
            with session_scope(self._sessions) as db:
                rows = db.query(column).filter(
                    VisitModel.user == user_id
                ).distinct().order_by(column).all()
        except SQLAlchemyError as e:
            raise StoreFailure(f"unable to get visits: {e}") from e
        return [row[0] for row in rows]

    def stream(self) -> VisitFeed:
        """Open a live feed of visits. Must be called from the consuming event loop."""
        try:
            subscription = self._changefeed.subscribe(VisitModel.__tablename__)
        except RuntimeError as e:
            # No running event loop
            raise StoreFailure(f"unable to open visits change-feed: {e}") from e
        return VisitFeed(subscription)
