"""
core/mirror.py
────────────────────────────────────────────────────────────────────────
In-memory cache of one user's dishes and schedule, kept current from a
change feed.  Events are applied by id and are idempotent: an event whose
revision is not newer than the last one applied for the same record is
dropped, whatever order events arrive in across different records.
"""
from __future__ import annotations

import logging

from core.models.dish import Dish
from core.models.schedule import ScheduleSlot
from services.changes import ChangeEvent, Subscription

_LOG = logging.getLogger(__name__)


class StoreMirror:
    def __init__(self) -> None:
        self.dishes: dict[str, Dish] = {}
        self.slots: dict[str, ScheduleSlot] = {}
        self._seen: dict[tuple[str, str], int] = {}

    def load(self, dishes: list[Dish], slots: list[ScheduleSlot]) -> None:
        self.dishes = {d.id: d for d in dishes}
        self.slots = {s.id: s for s in slots}

    def apply(self, event: ChangeEvent) -> bool:
        """Returns False when the event was stale and ignored."""
        key = (event.table, event.record_id)
        if event.revision <= self._seen.get(key, 0):
            return False
        self._seen[key] = event.revision

        if event.table == "dishes":
            if event.kind == "delete":
                self.dishes.pop(event.record_id, None)
            else:
                self.dishes[event.record_id] = Dish.model_validate(event.record)
        else:
            if event.kind == "delete":
                self.slots.pop(event.record_id, None)
            else:
                self.slots[event.record_id] = ScheduleSlot.model_validate(event.record)
        return True

    def drain(self, subscription: Subscription) -> int:
        """Apply everything already queued; returns how many events changed state."""
        return sum(self.apply(e) for e in subscription.pending())

    async def follow(self, subscription: Subscription) -> None:
        async for event in subscription:
            self.apply(event)

    def snapshot(self) -> tuple[list[Dish], list[ScheduleSlot]]:
        return list(self.dishes.values()), list(self.slots.values())
