"""
services/changes.py
────────────────────────────────────────────────────────────────────────
In-process change notification stream.

Every store write publishes one `ChangeEvent`.  Subscribers receive events
through their own asyncio.Queue, so a slow reader never blocks a writer.
Revisions are taken from one monotonically increasing counter per feed,
which gives per-id ordering to anyone applying the events.
"""
from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Literal

_LOG = logging.getLogger(__name__)

Table = Literal["dishes", "schedule"]
Kind = Literal["insert", "update", "delete"]


@dataclass(frozen=True)
class ChangeEvent:
    table: Table
    kind: Kind
    record_id: str
    revision: int
    record: dict[str, Any] | None = field(default=None, compare=False)


class Subscription:
    """Async iterator over one subscriber's events; ends once `close()` is called."""

    def __init__(self, feed: "ChangeFeed") -> None:
        self._feed = feed
        self.closed = False
        # None is the end-of-stream marker put there by close()
        self.queue: asyncio.Queue[ChangeEvent | None] = asyncio.Queue()

    def __aiter__(self) -> "Subscription":
        return self

    async def __anext__(self) -> ChangeEvent:
        if self.closed and self.queue.empty():
            raise StopAsyncIteration
        event = await self.queue.get()
        if event is None:
            raise StopAsyncIteration
        return event

    def pending(self) -> list[ChangeEvent]:
        """Drain whatever is queued without waiting."""
        out: list[ChangeEvent] = []
        while not self.queue.empty():
            event = self.queue.get_nowait()
            if event is not None:
                out.append(event)
        return out

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._feed._subscribers.discard(self)
        self.queue.put_nowait(None)


class ChangeFeed:
    def __init__(self) -> None:
        self._subscribers: set[Subscription] = set()
        self._revisions = itertools.count(1)

    def subscribe(self) -> Subscription:
        sub = Subscription(self)
        self._subscribers.add(sub)
        return sub

    def publish(
        self,
        table: Table,
        kind: Kind,
        record_id: str,
        record: dict[str, Any] | None = None,
    ) -> ChangeEvent:
        event = ChangeEvent(table, kind, record_id, next(self._revisions), record)
        for sub in list(self._subscribers):
            sub.queue.put_nowait(event)
        _LOG.debug("change %s %s %s rev=%d", table, kind, record_id, event.revision)
        return event


# one feed per user, shared by every request scoped to that user
_FEEDS: dict[str, ChangeFeed] = {}


def feed_for(user_id: str) -> ChangeFeed:
    feed = _FEEDS.get(user_id)
    if feed is None:
        feed = _FEEDS[user_id] = ChangeFeed()
    return feed
