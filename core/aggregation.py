"""
core/aggregation.py
────────────────────────────────────────────────────────────────────────
Read-only views over a schedule for a date window.

Responsibilities
----------------
1.   `slots_in_range()` – calendar-date filter, both bounds inclusive.
2.   `aggregate()` – grocery totals: every ingredient of every placed dish,
     scaled by the placement's servings and merged on lower(name)-lower(unit).
3.   `scheduled_dishes()` – one labelled entry per placement, for the
     scheduled-dish export.

Everything here is a pure function of its inputs; nothing is cached.
Placements whose dish no longer exists are skipped.
"""
from __future__ import annotations

import datetime as dt
import logging
from typing import Iterable, Iterator, Literal
from zoneinfo import ZoneInfo

from pydantic import Field

from core.errors import ValidationError
from core.models.dish import Dish, WireModel
from core.models.schedule import MEAL_ORDER, MealType, ScheduleSlot, as_date

_LOG = logging.getLogger(__name__)

Locale = Literal["zh", "en"]


class AggregatedIngredient(WireModel):
    key: str
    name: str
    unit: str
    total_amount: float = 0.0
    # dish name -> servings that pulled this ingredient in
    dish_servings_map: dict[str, int] = Field(default_factory=dict)


class ScheduledDish(WireModel):
    title: str
    notes: str
    due_date: dt.datetime | None = None


# ──────────────────────────────────────────────────────────────────────
#  Date window
# ──────────────────────────────────────────────────────────────────────
def date_window(
    start: dt.date | dt.datetime | str,
    end: dt.date | dt.datetime | str,
) -> tuple[dt.date, dt.date]:
    start, end = as_date(start), as_date(end)
    if start > end:
        raise ValidationError(f"Start date {start} is after end date {end}")
    return start, end


def slots_in_range(
    schedule: Iterable[ScheduleSlot],
    start: dt.date | dt.datetime | str,
    end: dt.date | dt.datetime | str,
) -> Iterator[ScheduleSlot]:
    start, end = date_window(start, end)
    return (slot for slot in schedule if start <= slot.date <= end)


# ──────────────────────────────────────────────────────────────────────
#  Grocery aggregation
# ──────────────────────────────────────────────────────────────────────
def aggregate(
    schedule: Iterable[ScheduleSlot],
    dishes: Iterable[Dish],
    start: dt.date | dt.datetime | str,
    end: dt.date | dt.datetime | str,
) -> list[AggregatedIngredient]:
    by_id = {d.id: d for d in dishes}
    totals: dict[str, AggregatedIngredient] = {}

    for slot in slots_in_range(schedule, start, end):
        for item in slot.items:
            dish = by_id.get(item.dish_id)
            if dish is None:
                _LOG.debug("skipping stale dish %s in slot %s", item.dish_id, slot.id)
                continue
            for ing in dish.ingredients:
                agg = totals.get(ing.merge_key)
                if agg is None:
                    agg = totals[ing.merge_key] = AggregatedIngredient(
                        key=ing.merge_key, name=ing.name, unit=ing.unit
                    )
                # unparsed amounts add nothing but still credit the dish
                agg.total_amount += ing.quantity.value * item.servings
                agg.dish_servings_map[dish.name] = (
                    agg.dish_servings_map.get(dish.name, 0) + item.servings
                )

    return sorted(totals.values(), key=lambda a: a.name.casefold())


# ──────────────────────────────────────────────────────────────────────
#  Scheduled-dish listing
# ──────────────────────────────────────────────────────────────────────
# indexed by date.weekday(): Monday == 0
_DAY_NAMES: dict[str, tuple[str, ...]] = {
    "zh": ("周一", "周二", "周三", "周四", "周五", "周六", "周日"),
    "en": ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"),
}

_MEAL_NAMES: dict[str, dict[MealType, str]] = {
    "zh": {
        MealType.breakfast: "早饭",
        MealType.lunch: "午饭",
        MealType.dinner: "晚饭",
        MealType.others: "其他",
    },
    "en": {
        MealType.breakfast: "Breakfast",
        MealType.lunch: "Lunch",
        MealType.dinner: "Dinner",
        MealType.others: "Others",
    },
}

_LABEL_SEP = {"zh": "", "en": " "}

DUE_TIMES: dict[MealType, dt.time] = {
    MealType.lunch: dt.time(11, 0),
    MealType.dinner: dt.time(17, 0),
}


def meal_label(date: dt.date, meal_type: MealType, locale: Locale = "zh") -> str:
    if locale not in _DAY_NAMES:
        raise ValidationError(f"Unsupported locale {locale!r}")
    day = _DAY_NAMES[locale][date.weekday()]
    return f"{day}{_LABEL_SEP[locale]}{_MEAL_NAMES[locale][meal_type]}"


def due_date(date: dt.date, meal_type: MealType, tz: dt.tzinfo) -> dt.datetime | None:
    """Local due time for lunch / dinner, expressed in UTC; None otherwise."""
    at = DUE_TIMES.get(meal_type)
    if at is None:
        return None
    return dt.datetime.combine(date, at, tzinfo=tz).astimezone(dt.timezone.utc)


def scheduled_dishes(
    schedule: Iterable[ScheduleSlot],
    dishes: Iterable[Dish],
    start: dt.date | dt.datetime | str,
    end: dt.date | dt.datetime | str,
    locale: Locale = "zh",
    tz: dt.tzinfo | str = "UTC",
) -> list[ScheduledDish]:
    if isinstance(tz, str):
        tz = ZoneInfo(tz)
    by_id = {d.id: d for d in dishes}
    slots = sorted(
        slots_in_range(schedule, start, end),
        key=lambda s: (s.date, MEAL_ORDER[s.meal_type]),
    )

    out: list[ScheduledDish] = []
    for slot in slots:
        notes = meal_label(slot.date, slot.meal_type, locale)
        due = due_date(slot.date, slot.meal_type, tz)
        for item in slot.items:
            dish = by_id.get(item.dish_id)
            if dish is None:
                continue
            out.append(ScheduledDish(title=dish.name, notes=notes, due_date=due))
    return out
