from __future__ import annotations

import datetime as dt

from pydantic import Field

from core.models.dish import WireModel
from core.models.schedule import MealType, ScheduleSlot


class PlaceDishIn(WireModel):
    date: dt.date
    dish_id: str
    # a dish dropped from the library lands in "others" unless told otherwise
    meal_type: MealType = MealType.others
    servings: int = Field(1, ge=1)


class MoveDishIn(WireModel):
    from_date: dt.date
    from_meal_type: MealType
    from_index: int = Field(..., ge=0)
    to_date: dt.date
    to_meal_type: MealType


class ChangeMealTypeIn(WireModel):
    date: dt.date
    from_meal_type: MealType
    to_meal_type: MealType
    dish_id: str


class ServingsDeltaIn(WireModel):
    date: dt.date
    meal_type: MealType
    dish_id: str
    delta: int = Field(..., examples=[1, -1])


class MutationOut(WireModel):
    """`changed` is False when the request was a no-op (drop on origin, same meal type)."""

    changed: bool
    slot: ScheduleSlot | None = None
