"""
core/schedule_engine.py
────────────────────────────────────────────────────────────────────────
Add / move / retype / resize / remove dish placements.

Invariants kept on every write:

1. at most one slot per (date, meal_type)
2. a slot whose last item is removed is deleted, never stored empty
3. servings never drop below 1

Placement policy is **append-always**: dropping a dish into a slot that
already holds it adds a second, independent entry.  The same rule is used
for fresh placements, moves and meal-type changes.

Every operation re-reads the slots it touches right before writing and
issues its writes one after another (remove before add).
"""
from __future__ import annotations

import datetime as dt
import logging
from contextlib import contextmanager
from typing import Iterator

from core.errors import (
    NotAuthenticatedError,
    NotFoundError,
    ScheduleMutationError,
    ValidationError,
)
from core.models.schedule import MealType, PlacedDish, ScheduleSlot, as_date, as_meal_type
from services.store import PlannerStore

_LOG = logging.getLogger(__name__)

# re-raised as the same type, message prefixed with the action
_RETAGGED = (NotFoundError, ValidationError)


@contextmanager
def _action(name: str) -> Iterator[None]:
    try:
        yield
    except NotAuthenticatedError:
        raise
    except _RETAGGED as exc:
        raise type(exc)(f"Failed to {name}: {exc}") from exc
    except Exception as exc:
        _LOG.error("schedule write failed during %s: %s", name, exc)
        raise ScheduleMutationError(name, exc) from exc


def _slot_label(date: dt.date, meal_type: MealType) -> str:
    return f"{meal_type.value} slot on {date.isoformat()}"


class ScheduleMutationEngine:
    def __init__(self, store: PlannerStore) -> None:
        self._store = store

    # ─────────────────────────────── helpers ──────────────────────── #
    async def _require_slot(self, date: dt.date, meal_type: MealType) -> ScheduleSlot:
        slot = await self._store.find_slot(date, meal_type)
        if slot is None:
            raise NotFoundError(f"No {_slot_label(date, meal_type)}")
        return slot

    async def _append(self, date: dt.date, meal_type: MealType, item: PlacedDish) -> ScheduleSlot:
        slot = await self._store.find_slot(date, meal_type)
        if slot is None:
            slot = ScheduleSlot(date=date, meal_type=meal_type, items=[item])
            return await self._store.insert_slot(slot)
        slot.items.append(item)
        await self._store.update_slot(slot)
        return slot

    async def _take(self, slot: ScheduleSlot, index: int) -> PlacedDish:
        item = slot.items.pop(index)
        if slot.items:
            await self._store.update_slot(slot)
        else:
            await self._store.delete_slot(slot.id)
        return item

    @staticmethod
    def _index_of(slot: ScheduleSlot, dish_id: str) -> int:
        for idx, item in enumerate(slot.items):
            if item.dish_id == dish_id:
                return idx
        raise NotFoundError(f"Dish {dish_id} is not in the {_slot_label(slot.date, slot.meal_type)}")

    # ─────────────────────────────── place ────────────────────────── #
    async def place_dish(
        self,
        date: dt.date | str,
        meal_type: MealType | str,
        dish_id: str,
        servings: int = 1,
    ) -> ScheduleSlot:
        date, meal_type = as_date(date), as_meal_type(meal_type)
        with _action("add dish to schedule"):
            if servings < 1:
                raise ValidationError("servings must be at least 1")
            if await self._store.get_dish(dish_id) is None:
                raise NotFoundError(f"Dish {dish_id} not found")
            slot = await self._append(date, meal_type, PlacedDish(dish_id=dish_id, servings=servings))
        _LOG.info("placed dish %s x%d in %s", dish_id, servings, _slot_label(date, meal_type))
        return slot

    # ─────────────────────────────── move ─────────────────────────── #
    async def move_dish(
        self,
        from_date: dt.date | str,
        from_meal_type: MealType | str,
        from_index: int,
        to_date: dt.date | str,
        to_meal_type: MealType | str,
    ) -> ScheduleSlot | None:
        """Returns the destination slot, or None when the drop landed on its origin."""
        src_key = (as_date(from_date), as_meal_type(from_meal_type))
        dst_key = (as_date(to_date), as_meal_type(to_meal_type))
        if src_key == dst_key:
            _LOG.debug("move onto origin %s ignored", _slot_label(*src_key))
            return None

        with _action("move dish"):
            src = await self._require_slot(*src_key)
            if not 0 <= from_index < len(src.items):
                raise NotFoundError(f"No item #{from_index} in the {_slot_label(*src_key)}")
            item = await self._take(src, from_index)
            slot = await self._append(*dst_key, item)
        _LOG.info("moved dish %s from %s to %s", item.dish_id, _slot_label(*src_key), _slot_label(*dst_key))
        return slot

    # ─────────────────────────── meal type ────────────────────────── #
    async def change_meal_type(
        self,
        date: dt.date | str,
        from_meal_type: MealType | str,
        to_meal_type: MealType | str,
        dish_id: str,
    ) -> ScheduleSlot | None:
        """Moves the FIRST placement of `dish_id`; later duplicates stay put."""
        date = as_date(date)
        from_meal_type, to_meal_type = as_meal_type(from_meal_type), as_meal_type(to_meal_type)
        if from_meal_type == to_meal_type:
            return None

        with _action("change meal type"):
            src = await self._require_slot(date, from_meal_type)
            item = await self._take(src, self._index_of(src, dish_id))
            slot = await self._append(date, to_meal_type, item)
        _LOG.info(
            "dish %s on %s: %s -> %s", dish_id, date.isoformat(), from_meal_type.value, to_meal_type.value
        )
        return slot

    # ─────────────────────────── servings ─────────────────────────── #
    async def update_servings(
        self,
        date: dt.date | str,
        meal_type: MealType | str,
        dish_id: str,
        delta: int,
    ) -> PlacedDish:
        date, meal_type = as_date(date), as_meal_type(meal_type)
        with _action("update servings"):
            slot = await self._require_slot(date, meal_type)
            item = slot.items[self._index_of(slot, dish_id)]
            item.servings = max(1, item.servings + delta)
            await self._store.update_slot(slot)
        return item

    # ─────────────────────────── removal ──────────────────────────── #
    async def remove_at(
        self,
        date: dt.date | str,
        meal_type: MealType | str,
        index: int,
    ) -> PlacedDish:
        date, meal_type = as_date(date), as_meal_type(meal_type)
        with _action("remove dish"):
            slot = await self._require_slot(date, meal_type)
            if not 0 <= index < len(slot.items):
                raise NotFoundError(f"No item #{index} in the {_slot_label(date, meal_type)}")
            item = await self._take(slot, index)
        _LOG.info("removed dish %s from %s", item.dish_id, _slot_label(date, meal_type))
        return item

    async def delete_dish(self, dish_id: str) -> int:
        """Strip every placement of `dish_id`; returns how many were removed."""
        removed = 0
        with _action("remove dish from schedule"):
            for slot in await self._store.list_slots():
                kept = [i for i in slot.items if i.dish_id != dish_id]
                if len(kept) == len(slot.items):
                    continue
                removed += len(slot.items) - len(kept)
                if kept:
                    slot.items = kept
                    await self._store.update_slot(slot)
                else:
                    await self._store.delete_slot(slot.id)
        if removed:
            _LOG.info("cascade removed %d placement(s) of dish %s", removed, dish_id)
        return removed
