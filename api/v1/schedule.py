# api/v1/schedule.py
from __future__ import annotations

import datetime as dt

from fastapi import APIRouter, Depends, status

from core.aggregation import slots_in_range
from core.models.schedule import MealType, PlacedDish, ScheduleSlot
from core.schedule_engine import ScheduleMutationEngine
from services.store import PlannerStore
from api.v1.deps import get_schedule_engine, get_store
from api.v1.schemas import (
    ChangeMealTypeIn,
    MoveDishIn,
    MutationOut,
    PlaceDishIn,
    ServingsDeltaIn,
)

router = APIRouter()


@router.get("", response_model=list[ScheduleSlot], summary="List schedule slots")
async def list_slots(
    start: dt.date | None = None,
    end: dt.date | None = None,
    store: PlannerStore = Depends(get_store),
) -> list[ScheduleSlot]:
    slots = await store.list_slots()
    if start or end:
        slots = list(slots_in_range(slots, start or dt.date.min, end or dt.date.max))
    return slots


@router.post("/place", response_model=ScheduleSlot, status_code=status.HTTP_201_CREATED)
async def place_dish(
    body: PlaceDishIn,
    engine: ScheduleMutationEngine = Depends(get_schedule_engine),
) -> ScheduleSlot:
    return await engine.place_dish(body.date, body.meal_type, body.dish_id, body.servings)


@router.post("/move", response_model=MutationOut, summary="Move one placement to another slot")
async def move_dish(
    body: MoveDishIn,
    engine: ScheduleMutationEngine = Depends(get_schedule_engine),
) -> MutationOut:
    slot = await engine.move_dish(
        body.from_date, body.from_meal_type, body.from_index, body.to_date, body.to_meal_type
    )
    return MutationOut(changed=slot is not None, slot=slot)


@router.post("/meal-type", response_model=MutationOut)
async def change_meal_type(
    body: ChangeMealTypeIn,
    engine: ScheduleMutationEngine = Depends(get_schedule_engine),
) -> MutationOut:
    slot = await engine.change_meal_type(
        body.date, body.from_meal_type, body.to_meal_type, body.dish_id
    )
    return MutationOut(changed=slot is not None, slot=slot)


@router.post("/servings", response_model=PlacedDish)
async def update_servings(
    body: ServingsDeltaIn,
    engine: ScheduleMutationEngine = Depends(get_schedule_engine),
) -> PlacedDish:
    return await engine.update_servings(body.date, body.meal_type, body.dish_id, body.delta)


@router.delete(
    "/{date}/{meal_type}/{index}",
    response_model=PlacedDish,
    summary="Remove the placement at `index` and return it",
)
async def remove_at(
    date: dt.date,
    meal_type: MealType,
    index: int,
    engine: ScheduleMutationEngine = Depends(get_schedule_engine),
) -> PlacedDish:
    return await engine.remove_at(date, meal_type, index)
