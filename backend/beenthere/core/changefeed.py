"""
In-process change feed.

Rows written through a session are captured at flush time and published to a
ChangeFeedHub once the transaction commits, so subscribers only ever see
durable changes. Each change carries the old and new document of the row; a
deletion has no new document and an insert has no old one.

Publishing may happen on any thread (sync routes run in a worker pool), while
each subscription belongs to the event loop that created it. Changes are
handed over with ``loop.call_soon_threadsafe``.
"""

import asyncio
import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from sqlalchemy import event, inspect
from sqlalchemy.orm import sessionmaker

from .errors import StoreFailure

logger = logging.getLogger(__name__)

PENDING_CHANGES_KEY = "beenthere.pending_changes"

_END = object()


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    old_val: Optional[Dict[str, Any]] = None
    new_val: Optional[Dict[str, Any]] = None


class Subscription:
    """Receiving end of the hub for one table, bound to one event loop."""

    def __init__(self, hub: "ChangeFeedHub", table: str, loop: asyncio.AbstractEventLoop, max_pending: int):
        self.table = table
        self._hub = hub
        self._loop = loop
        self._max_pending = max_pending
        self._queue: asyncio.Queue = asyncio.Queue()
        self._error: Optional[StoreFailure] = None
        self._ended = False
        self._closed = False

    def _deliver(self, item) -> None:
        """Runs on the subscription's loop."""
        if self._error is not None or self._ended:
            return
        if item is not _END and self._queue.qsize() >= self._max_pending:
            self._error = StoreFailure(
                f"change feed for '{self.table}' overflowed after {self._max_pending} pending changes"
            )
            self._hub.unsubscribe(self)
            return
        self._queue.put_nowait(item)

    def offer(self, item) -> bool:
        """Hand an item to the owning loop. Returns False once that loop is gone."""
        try:
            self._loop.call_soon_threadsafe(self._deliver, item)
        except RuntimeError:
            return False
        return True

    async def get(self, timeout: Optional[float] = None) -> Optional[ChangeEvent]:
        """
        Wait for the next change.

        Returns None once the feed has ended, raises StoreFailure when the feed
        broke, and asyncio.TimeoutError when nothing arrived within ``timeout``.
        """
        if self._queue.empty():
            if self._error is not None:
                raise self._error
            if self._ended or self._closed:
                return None
        if timeout is None:
            item = await self._queue.get()
        else:
            item = await asyncio.wait_for(self._queue.get(), timeout)
        if item is _END:
            self._ended = True
            return None
        return item

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._hub.unsubscribe(self)


class ChangeFeedHub:
    """Fan-out of committed changes to every live subscription of a table."""

    def __init__(self, max_pending: int = 256):
        self.max_pending = max_pending
        self._lock = threading.Lock()
        self._subscriptions: Dict[str, List[Subscription]] = {}
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, table: str) -> Subscription:
        """Open a subscription. Must be called from the consuming event loop."""
        loop = asyncio.get_running_loop()
        with self._lock:
            if self._closed:
                raise StoreFailure("change feed is closed")
            subscription = Subscription(self, table, loop, self.max_pending)
            self._subscriptions.setdefault(table, []).append(subscription)
        logger.debug(f"Opened change feed subscription on '{table}'")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            subscriptions = self._subscriptions.get(subscription.table, [])
            if subscription in subscriptions:
                subscriptions.remove(subscription)

    def subscriber_count(self, table: str) -> int:
        with self._lock:
            return len(self._subscriptions.get(table, []))

    def publish(self, change: ChangeEvent) -> None:
        with self._lock:
            if self._closed:
                return
            subscriptions = list(self._subscriptions.get(change.table, []))
        for subscription in subscriptions:
            if not subscription.offer(change):
                logger.warning(f"Dropping change feed subscription on '{change.table}': event loop closed")
                self.unsubscribe(subscription)

    def close(self) -> None:
        """End every subscription and refuse new ones."""
        with self._lock:
            self._closed = True
            subscriptions = [s for subs in self._subscriptions.values() for s in subs]
            self._subscriptions.clear()
        for subscription in subscriptions:
            subscription.offer(_END)
        logger.info(f"Change feed closed ({len(subscriptions)} subscriptions ended)")


def _document(obj) -> Dict[str, Any]:
    # Only loaded values: server-side defaults are not fetched back mid-flush
    state = inspect(obj)
    return {
        attr.key: state.dict[attr.key]
        for attr in state.mapper.column_attrs
        if attr.key in state.dict
    }


def capture_changes(session_factory: sessionmaker, hub: ChangeFeedHub) -> None:
    """Publish every row committed through ``session_factory`` to ``hub``."""

    @event.listens_for(session_factory, "after_flush")
    def _collect(session, flush_context):
        # new/dirty/deleted still describe what this flush wrote
        pending = session.info.setdefault(PENDING_CHANGES_KEY, [])
        for obj in session.new:
            pending.append(ChangeEvent(obj.__tablename__, new_val=_document(obj)))
        for obj in session.dirty:
            if session.is_modified(obj):
                pending.append(ChangeEvent(obj.__tablename__, new_val=_document(obj)))
        for obj in session.deleted:
            pending.append(ChangeEvent(obj.__tablename__, old_val=_document(obj)))

    @event.listens_for(session_factory, "after_commit")
    def _publish(session):
        for change in session.info.pop(PENDING_CHANGES_KEY, []):
            hub.publish(change)

    @event.listens_for(session_factory, "after_soft_rollback")
    def _discard(session, previous_transaction):
        session.info.pop(PENDING_CHANGES_KEY, None)
