"""
services/store.py
────────────────────────────────────────────────────────────────────────
Persistence collaborator contract + an in-memory implementation.

A store is always scoped to one user.  Conventions shared by every
implementation:

* insert of an existing id            → ConflictError
* insert of a second slot for the same (date, meal_type) → ConflictError
* update of a missing id              → NotFoundError
* delete of a missing id              → silently ignored
* every successful write publishes on `store.changes`
"""
from __future__ import annotations

import datetime as dt
from abc import ABC, abstractmethod

from core.errors import ConflictError, NotAuthenticatedError, NotFoundError
from core.models.dish import Dish
from core.models.schedule import MealType, ScheduleSlot
from services.changes import ChangeFeed


class PlannerStore(ABC):
    def __init__(self, user_id: str | None, changes: ChangeFeed | None = None) -> None:
        if not user_id:
            raise NotAuthenticatedError()
        self.user_id = user_id
        self.changes = changes or ChangeFeed()

    # ─── dishes ──────────────────────────────────────────────────────
    @abstractmethod
    async def list_dishes(self) -> list[Dish]: ...

    @abstractmethod
    async def get_dish(self, dish_id: str) -> Dish | None: ...

    @abstractmethod
    async def insert_dish(self, dish: Dish) -> Dish: ...

    @abstractmethod
    async def update_dish(self, dish: Dish) -> None: ...

    @abstractmethod
    async def delete_dish(self, dish_id: str) -> None: ...

    # ─── schedule slots ──────────────────────────────────────────────
    @abstractmethod
    async def list_slots(self) -> list[ScheduleSlot]: ...

    @abstractmethod
    async def get_slot(self, slot_id: str) -> ScheduleSlot | None: ...

    @abstractmethod
    async def insert_slot(self, slot: ScheduleSlot) -> ScheduleSlot: ...

    @abstractmethod
    async def update_slot(self, slot: ScheduleSlot) -> None: ...

    @abstractmethod
    async def delete_slot(self, slot_id: str) -> None: ...

    async def find_slot(self, date: dt.date, meal_type: MealType) -> ScheduleSlot | None:
        for slot in await self.list_slots():
            if slot.date == date and slot.meal_type == meal_type:
                return slot
        return None

    async def snapshot(self) -> tuple[list[Dish], list[ScheduleSlot]]:
        return await self.list_dishes(), await self.list_slots()


class MemoryPlannerStore(PlannerStore):
    """Dict-backed store.  Hands out copies so callers never alias rows."""

    def __init__(self, user_id: str | None, changes: ChangeFeed | None = None) -> None:
        super().__init__(user_id, changes)
        self._dishes: dict[str, Dish] = {}
        self._slots: dict[str, ScheduleSlot] = {}

    async def list_dishes(self) -> list[Dish]:
        return [d.model_copy(deep=True) for d in self._dishes.values()]

    async def get_dish(self, dish_id: str) -> Dish | None:
        dish = self._dishes.get(dish_id)
        return dish.model_copy(deep=True) if dish else None

    async def insert_dish(self, dish: Dish) -> Dish:
        if dish.id in self._dishes:
            raise ConflictError(f"Dish {dish.id} already exists")
        self._dishes[dish.id] = dish.model_copy(deep=True)
        self.changes.publish("dishes", "insert", dish.id, dish.to_wire())
        return dish.model_copy(deep=True)

    async def update_dish(self, dish: Dish) -> None:
        if dish.id not in self._dishes:
            raise NotFoundError(f"Dish {dish.id} not found")
        self._dishes[dish.id] = dish.model_copy(deep=True)
        self.changes.publish("dishes", "update", dish.id, dish.to_wire())

    async def delete_dish(self, dish_id: str) -> None:
        if self._dishes.pop(dish_id, None) is not None:
            self.changes.publish("dishes", "delete", dish_id)

    async def list_slots(self) -> list[ScheduleSlot]:
        return [s.model_copy(deep=True) for s in self._slots.values()]

    async def get_slot(self, slot_id: str) -> ScheduleSlot | None:
        slot = self._slots.get(slot_id)
        return slot.model_copy(deep=True) if slot else None

    async def insert_slot(self, slot: ScheduleSlot) -> ScheduleSlot:
        if slot.id in self._slots:
            raise ConflictError(f"Schedule slot {slot.id} already exists")
        if any(s.key == slot.key for s in self._slots.values()):
            raise ConflictError(
                f"A {slot.meal_type.value} slot already exists on {slot.date.isoformat()}"
            )
        self._slots[slot.id] = slot.model_copy(deep=True)
        self.changes.publish("schedule", "insert", slot.id, slot.to_wire())
        return slot.model_copy(deep=True)

    async def update_slot(self, slot: ScheduleSlot) -> None:
        if slot.id not in self._slots:
            raise NotFoundError(f"Schedule slot {slot.id} not found")
        self._slots[slot.id] = slot.model_copy(deep=True)
        self.changes.publish("schedule", "update", slot.id, slot.to_wire())

    async def delete_slot(self, slot_id: str) -> None:
        if self._slots.pop(slot_id, None) is not None:
            self.changes.publish("schedule", "delete", slot_id)
