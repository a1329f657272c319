# tests/test_export.py
from __future__ import annotations

import datetime as dt
import json

import pytest

from core.aggregation import AggregatedIngredient, ScheduledDish
from core.errors import ValidationError
from core.export import (
    ExportFormat,
    ExportItem,
    ExportKind,
    format_amount,
    grocery_line,
    render_exports,
    render_grocery_json,
    render_grocery_text,
    render_schedule_json,
    render_schedule_text,
)
from core.models.dish import Dish, Ingredient
from core.models.schedule import MealType, PlacedDish, ScheduleSlot

START = dt.date(2024, 1, 1)
END = dt.date(2024, 1, 3)
NOW = dt.datetime(2024, 1, 5, 14, 3)

FLOUR = AggregatedIngredient(
    key="flour-cups",
    name="Flour",
    unit="cups",
    total_amount=8.0,
    dish_servings_map={"Pancakes": 4, "Crepes": 1},
)
SALT = AggregatedIngredient(key="salt-", name="Salt", unit="", dish_servings_map={"Omelette": 2})
THIRDS = AggregatedIngredient(key="oil-tbsp", name="Oil", unit="tbsp", total_amount=1 / 3)


# ── amounts ───────────────────────────────────────────────────────────
@pytest.mark.parametrize(
    "value, text",
    [(8.0, "8"), (1.5, "1.5"), (1 / 3, "0.33"), (2.005, "2"), (0.1 + 0.2, "0.3"), (1250.0, "1250")],
)
def test_format_amount(value, text):
    assert format_amount(value) == text


# ── grocery text ──────────────────────────────────────────────────────
def test_grocery_lines():
    assert grocery_line(FLOUR) == "[ ] 8 cups Flour - Pancakes(4), Crepes(1)"
    assert grocery_line(SALT) == "[ ] Salt - Omelette(2)"
    assert grocery_line(THIRDS) == "[ ] 0.33 tbsp Oil"


def test_grocery_text_layout():
    text = render_grocery_text([FLOUR, SALT], START, END, NOW)
    assert text.splitlines() == [
        "Grocery List",
        "Range: Jan 1, 2024 - Jan 3, 2024",
        "Generated on: Jan 5, 2024 14:03",
        "",
        "-" * 40,
        "",
        "[ ] 8 cups Flour - Pancakes(4), Crepes(1)",
        "[ ] Salt - Omelette(2)",
    ]


def test_grocery_text_empty():
    text = render_grocery_text([], START, END, NOW)
    assert text.rstrip("\n").endswith("No items found for this period.")


# ── grocery json ──────────────────────────────────────────────────────
def test_grocery_json_shape():
    payload = json.loads(render_grocery_json([FLOUR, SALT], "Weekly Shopping"))
    assert payload == {
        "listName": "Weekly Shopping",
        "items": [
            {"title": "Flour", "notes": "8 cups - Pancakes(4), Crepes(1)"},
            {"title": "Salt", "notes": "Omelette(2)"},
        ],
    }


@pytest.mark.parametrize("name", ["", "   ", None])
def test_json_requires_list_name(name):
    with pytest.raises(ValidationError):
        render_grocery_json([FLOUR], name)
    with pytest.raises(ValidationError):
        render_schedule_json([], name)


# ── scheduled dishes ──────────────────────────────────────────────────
ENTRIES = [
    ScheduledDish(title="Pancakes", notes="周一早饭"),
    ScheduledDish(
        title="Soup",
        notes="周一午饭",
        due_date=dt.datetime(2024, 1, 1, 11, tzinfo=dt.timezone.utc),
    ),
]


def test_schedule_text():
    lines = render_schedule_text(ENTRIES, START, END, NOW).splitlines()
    assert lines[0] == "Scheduled Dishes"
    assert lines[-2:] == ["[ ] Pancakes (周一早饭)", "[ ] Soup (周一午饭)"]
    empty = render_schedule_text([], START, END, NOW)
    assert "No scheduled dishes found for this period." in empty


def test_schedule_json_omits_missing_due_date():
    payload = json.loads(render_schedule_json(ENTRIES, "Meals"))
    assert payload["listName"] == "Meals"
    assert payload["items"][0] == {"title": "Pancakes", "notes": "周一早饭"}
    assert payload["items"][1]["dueDate"].startswith("2024-01-01T11:00:00")


# ── multi-item export ─────────────────────────────────────────────────
DISH = Dish(id="1", name="Pancakes", ingredients=[Ingredient(name="Flour", amount=2, unit="cups")])
SCHEDULE = [
    ScheduleSlot(date=START, meal_type=MealType.lunch, items=[PlacedDish(dish_id="1", servings=2)])
]


def test_render_exports_both_kinds():
    files = render_exports(
        [
            ExportItem(ExportKind.grocery, ExportFormat.txt),
            ExportItem(ExportKind.schedule, ExportFormat.json, "Meals"),
        ],
        SCHEDULE,
        [DISH],
        START,
        END,
        now=NOW,
    )
    grocery, sched = files
    assert grocery.filename == "grocery-list-20240101-20240103.txt"
    assert grocery.media_type.startswith("text/plain")
    assert "[ ] 4 cups Flour - Pancakes(2)" in grocery.content
    assert sched.filename == "scheduled-dishes-20240105-140300.json"
    assert json.loads(sched.content)["items"][0]["title"] == "Pancakes"


def test_render_exports_validates_before_rendering():
    with pytest.raises(ValidationError):
        render_exports([], SCHEDULE, [DISH], START, END, now=NOW)
    with pytest.raises(ValidationError):
        render_exports(
            [
                ExportItem(ExportKind.grocery, ExportFormat.txt),
                ExportItem(ExportKind.grocery, ExportFormat.json, ""),
            ],
            SCHEDULE,
            [DISH],
            START,
            END,
            now=NOW,
        )
