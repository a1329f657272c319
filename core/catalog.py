"""
core/catalog.py
────────────────────────────────────────────────────────────────────────
Dish library operations.  Deleting a dish first strips its placements from
the schedule so no slot is ever left pointing at a missing dish.
"""
from __future__ import annotations

import logging

from core.errors import NotFoundError, ValidationError
from core.models.dish import Dish
from core.schedule_engine import ScheduleMutationEngine
from services.store import PlannerStore

_LOG = logging.getLogger(__name__)


def _validated(dish: Dish) -> Dish:
    name = dish.name.strip()
    if not name:
        raise ValidationError("Dish name is required")
    for ing in dish.ingredients:
        if not ing.name.strip():
            raise ValidationError(f"Ingredient {ing.id} of '{name}' has no name")
    return dish.model_copy(update={"name": name})


class DishCatalog:
    def __init__(self, store: PlannerStore, schedule: ScheduleMutationEngine | None = None) -> None:
        self._store = store
        self._schedule = schedule or ScheduleMutationEngine(store)

    async def list_dishes(self) -> list[Dish]:
        return await self._store.list_dishes()

    async def get_dish(self, dish_id: str) -> Dish:
        dish = await self._store.get_dish(dish_id)
        if dish is None:
            raise NotFoundError(f"Dish {dish_id} not found")
        return dish

    async def add_dish(self, dish: Dish) -> Dish:
        created = await self._store.insert_dish(_validated(dish))
        _LOG.info("added dish %s (%s)", created.id, created.name)
        return created

    async def update_dish(self, dish: Dish) -> Dish:
        dish = _validated(dish)
        await self._store.update_dish(dish)
        return dish

    async def delete_dish(self, dish_id: str) -> int:
        """Returns the number of schedule placements removed with the dish."""
        removed = await self._schedule.delete_dish(dish_id)
        await self._store.delete_dish(dish_id)
        _LOG.info("deleted dish %s", dish_id)
        return removed
