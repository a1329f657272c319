from __future__ import annotations

import datetime as dt
from enum import Enum

from pydantic import Field

from core.errors import ValidationError
from core.models.dish import WireModel, new_id


class MealType(str, Enum):
    breakfast = "breakfast"
    lunch = "lunch"
    dinner = "dinner"
    others = "others"


MEAL_TYPES: tuple[MealType, ...] = tuple(MealType)

# listing order for scheduled-dish exports; dinner sorts after others
MEAL_ORDER: dict[MealType, int] = {
    MealType.breakfast: 0,
    MealType.lunch: 1,
    MealType.others: 2,
    MealType.dinner: 3,
}


class PlacedDish(WireModel):
    dish_id: str
    servings: int = Field(default=1, ge=1)


class ScheduleSlot(WireModel):
    """One (date, meal type) calendar cell.  Never persisted empty."""

    id: str = Field(default_factory=new_id)
    date: dt.date
    meal_type: MealType
    items: list[PlacedDish] = Field(default_factory=list)

    @property
    def key(self) -> tuple[dt.date, MealType]:
        return (self.date, self.meal_type)


def as_date(value: dt.date | dt.datetime | str) -> dt.date:
    """Calendar date of `value`; time-of-day is dropped, never compared."""
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    try:
        return dt.date.fromisoformat(value[:10])
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid date: {value!r}") from exc


def as_meal_type(value: MealType | str) -> MealType:
    try:
        return MealType(value)
    except ValueError as exc:
        choices = ", ".join(m.value for m in MealType)
        raise ValidationError(f"Invalid meal type {value!r} (expected one of {choices})") from exc
