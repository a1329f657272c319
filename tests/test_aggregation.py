# tests/test_aggregation.py
from __future__ import annotations

import datetime as dt
import math

import pytest

from core.aggregation import aggregate, date_window, meal_label, scheduled_dishes
from core.errors import ValidationError
from core.models.dish import Dish, Ingredient, parse_amount
from core.models.schedule import MealType, PlacedDish, ScheduleSlot

PANCAKES = Dish(
    id="1",
    name="Pancakes",
    ingredients=[Ingredient(id="i1", name="Flour", amount="2", unit="cups")],
)
OMELETTE = Dish(
    id="2",
    name="Omelette",
    ingredients=[
        Ingredient(name="eggs", amount=3, unit="pcs"),
        Ingredient(name="Salt", amount="a pinch", unit=""),
        Ingredient(name="FLOUR", amount="0.25", unit="Cups"),
    ],
)
DISHES = [PANCAKES, OMELETTE]


def _slot(date: str, meal: str, *items: tuple[str, int]) -> ScheduleSlot:
    return ScheduleSlot(
        date=dt.date.fromisoformat(date),
        meal_type=MealType(meal),
        items=[PlacedDish(dish_id=d, servings=n) for d, n in items],
    )


# ── amount parsing happens once, at ingress ──────────────────────────
@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2", (2.0, True)),
        (1.5, (1.5, True)),
        ("1.5 cups", (1.5, True)),
        (" .5", (0.5, True)),
        ("a pinch", (0.0, False)),
        ("", (0.0, False)),
        (None, (0.0, False)),
        (float("nan"), (0.0, False)),
    ],
)
def test_parse_amount(raw, expected):
    assert tuple(parse_amount(raw)) == expected


def test_ingredient_keeps_raw_amount():
    ing = Ingredient(name="Milk", amount="1.5", unit="cups")
    assert ing.amount == "1.5"
    assert ing.quantity.value == 1.5 and ing.quantity.parsed


# ── the worked example ────────────────────────────────────────────────
def test_pancake_flour_example():
    schedule = [
        _slot("2024-01-01", "breakfast", ("1", 3)),
        _slot("2024-01-03", "lunch", ("1", 1)),
    ]
    [flour] = aggregate(schedule, [PANCAKES], dt.date(2024, 1, 1), dt.date(2024, 1, 3))

    assert flour.name == "Flour"
    assert flour.unit == "cups"
    assert flour.key == "flour-cups"
    assert math.isclose(flour.total_amount, 8.0)
    assert flour.dish_servings_map == {"Pancakes": 4}


# ── date window ───────────────────────────────────────────────────────
def test_range_bounds_inclusive_and_time_of_day_ignored():
    schedule = [
        _slot("2023-12-31", "lunch", ("1", 1)),
        _slot("2024-01-01", "lunch", ("1", 1)),
        _slot("2024-01-07", "dinner", ("1", 1)),
        _slot("2024-01-08", "lunch", ("1", 1)),
    ]
    # a start bound carrying a non-midnight time must not drop Jan 1
    [flour] = aggregate(
        schedule, DISHES, dt.datetime(2024, 1, 1, 15, 45), dt.datetime(2024, 1, 7, 0, 0)
    )
    assert flour.dish_servings_map == {"Pancakes": 2}
    assert math.isclose(flour.total_amount, 4.0)


def test_reversed_range_rejected():
    with pytest.raises(ValidationError):
        aggregate([], DISHES, "2024-01-05", "2024-01-01")


# ── merging, scaling, stale references ────────────────────────────────
def test_merge_key_ignores_case_and_keeps_first_spelling():
    schedule = [_slot("2024-01-01", "lunch", ("1", 1), ("2", 2))]
    result = {a.key: a for a in aggregate(schedule, DISHES, "2024-01-01", "2024-01-01")}

    flour = result["flour-cups"]
    assert flour.name == "Flour"
    assert math.isclose(flour.total_amount, 2 * 1 + 0.25 * 2)
    assert flour.dish_servings_map == {"Pancakes": 1, "Omelette": 2}


def test_unparsed_amount_contributes_zero_but_keeps_attribution():
    schedule = [
        _slot("2024-01-01", "lunch", ("2", 1)),
        _slot("2024-01-02", "lunch", ("2", 2)),
    ]
    result = {a.key: a for a in aggregate(schedule, DISHES, "2024-01-01", "2024-01-02")}
    assert result["salt-"].total_amount == 0
    assert result["salt-"].dish_servings_map == {"Omelette": 3}


def test_linear_in_servings():
    base = [_slot("2024-01-01", "lunch", ("2", 1)), _slot("2024-01-02", "dinner", ("2", 2))]
    scaled = [_slot("2024-01-01", "lunch", ("2", 3)), _slot("2024-01-02", "dinner", ("2", 6))]

    a = {x.key: x.total_amount for x in aggregate(base, DISHES, "2024-01-01", "2024-01-02")}
    b = {x.key: x.total_amount for x in aggregate(scaled, DISHES, "2024-01-01", "2024-01-02")}
    for key in a:
        assert math.isclose(b[key], 3 * a[key])


def test_stale_dish_skipped_and_sorted_case_insensitive():
    schedule = [_slot("2024-01-01", "lunch", ("2", 1), ("deleted", 4))]
    names = [a.name for a in aggregate(schedule, DISHES, "2024-01-01", "2024-01-01")]
    assert names == ["eggs", "FLOUR", "Salt"]


def test_empty_range_yields_nothing():
    assert aggregate([_slot("2024-02-01", "lunch", ("1", 1))], DISHES, "2024-01-01", "2024-01-31") == []


# ── scheduled dishes ──────────────────────────────────────────────────
def test_scheduled_dishes_order_labels_and_due_dates():
    schedule = [
        _slot("2024-01-02", "breakfast", ("2", 1)),
        _slot("2024-01-01", "dinner", ("1", 1), ("2", 1)),
        _slot("2024-01-01", "others", ("2", 1)),
        _slot("2024-01-01", "lunch", ("1", 1), ("gone", 1)),
        _slot("2024-01-01", "breakfast", ("1", 1)),
    ]
    entries = scheduled_dishes(schedule, DISHES, "2024-01-01", "2024-01-02", locale="zh", tz="UTC")

    # 2024-01-01 is a Monday
    assert [(e.title, e.notes) for e in entries] == [
        ("Pancakes", "周一早饭"),
        ("Pancakes", "周一午饭"),
        ("Omelette", "周一其他"),
        ("Pancakes", "周一晚饭"),
        ("Omelette", "周一晚饭"),
        ("Omelette", "周二早饭"),
    ]
    due = [e.due_date for e in entries]
    assert due[0] is None and due[2] is None and due[5] is None
    assert due[1] == dt.datetime(2024, 1, 1, 11, tzinfo=dt.timezone.utc)
    assert due[3] == dt.datetime(2024, 1, 1, 17, tzinfo=dt.timezone.utc)


def test_due_dates_follow_local_timezone():
    schedule = [_slot("2024-01-01", "lunch", ("1", 1))]
    [entry] = scheduled_dishes(schedule, DISHES, "2024-01-01", "2024-01-01", tz="Asia/Shanghai")
    # 11:00 in UTC+8
    assert entry.due_date == dt.datetime(2024, 1, 1, 3, tzinfo=dt.timezone.utc)


def test_english_labels():
    assert meal_label(dt.date(2024, 1, 7), MealType.dinner, "en") == "Sunday Dinner"


def test_date_window_accepts_dates_datetimes_and_iso_strings():
    assert date_window(dt.datetime(2024, 1, 1, 23, 59), "2024-01-03") == (
        dt.date(2024, 1, 1),
        dt.date(2024, 1, 3),
    )
    with pytest.raises(ValidationError):
        date_window(dt.date(2024, 1, 2), dt.date(2024, 1, 1))
