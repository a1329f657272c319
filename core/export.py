"""
core/export.py
────────────────────────────────────────────────────────────────────────
Renders grocery lists and scheduled-dish lists as checklist text or as a
JSON list payload.  Amounts are rounded here, and only here.
"""
from __future__ import annotations

import datetime as dt
import json
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Sequence

from core.aggregation import (
    AggregatedIngredient,
    Locale,
    ScheduledDish,
    aggregate,
    date_window,
    scheduled_dishes,
)
from core.errors import ValidationError
from core.models.dish import Dish
from core.models.schedule import ScheduleSlot

SEPARATOR = "-" * 40


class ExportFormat(str, Enum):
    txt = "txt"
    json = "json"


class ExportKind(str, Enum):
    grocery = "grocery"
    schedule = "schedule"


_MEDIA_TYPES = {
    ExportFormat.txt: "text/plain; charset=utf-8",
    ExportFormat.json: "application/json; charset=utf-8",
}

_FILE_STEMS = {
    ExportKind.grocery: "grocery-list",
    ExportKind.schedule: "scheduled-dishes",
}


@dataclass(frozen=True)
class ExportItem:
    kind: ExportKind
    format: ExportFormat = ExportFormat.txt
    list_name: str = ""


@dataclass(frozen=True)
class RenderedExport:
    filename: str
    media_type: str
    content: str


# ───────────────────────── formatting ───────────────────────────────
def format_amount(value: float) -> str:
    """2 decimals max, no trailing zeros: 8.0 -> "8", 1.505 -> "1.5"."""
    text = f"{round(value, 2):.2f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def _day(d: dt.date) -> str:
    return f"{d:%b} {d.day}, {d.year}"


def _stamp(now: dt.datetime) -> str:
    return f"{_day(now)} {now:%H:%M}"


def _header(title: str, start: dt.date, end: dt.date, now: dt.datetime) -> list[str]:
    return [
        title,
        f"Range: {_day(start)} - {_day(end)}",
        f"Generated on: {_stamp(now)}",
        "",
        SEPARATOR,
        "",
    ]


def dish_attribution(agg: AggregatedIngredient) -> str:
    return ", ".join(f"{name}({n})" for name, n in agg.dish_servings_map.items())


def quantity_text(agg: AggregatedIngredient) -> str:
    if agg.total_amount <= 0:
        return ""
    return " ".join(p for p in (format_amount(agg.total_amount), agg.unit) if p)


def require_list_name(list_name: str | None) -> str:
    name = (list_name or "").strip()
    if not name:
        raise ValidationError("List name is required for JSON export.")
    return name


# ───────────────────────── grocery ──────────────────────────────────
def grocery_line(agg: AggregatedIngredient) -> str:
    line = " ".join(p for p in ("[ ]", quantity_text(agg), agg.name) if p)
    attribution = dish_attribution(agg)
    return f"{line} - {attribution}" if attribution else line


def render_grocery_text(
    items: Sequence[AggregatedIngredient],
    start: dt.date,
    end: dt.date,
    now: dt.datetime,
) -> str:
    lines = _header("Grocery List", start, end, now)
    if not items:
        lines.append("No items found for this period.")
    else:
        lines.extend(grocery_line(agg) for agg in items)
    return "\n".join(lines) + "\n"


def render_grocery_json(items: Sequence[AggregatedIngredient], list_name: str) -> str:
    payload = {
        "listName": require_list_name(list_name),
        "items": [
            {
                "title": agg.name,
                "notes": " - ".join(p for p in (quantity_text(agg), dish_attribution(agg)) if p),
            }
            for agg in items
        ],
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)


# ───────────────────────── scheduled dishes ─────────────────────────
def render_schedule_text(
    entries: Sequence[ScheduledDish],
    start: dt.date,
    end: dt.date,
    now: dt.datetime,
) -> str:
    lines = _header("Scheduled Dishes", start, end, now)
    if not entries:
        lines.append("No scheduled dishes found for this period.")
    else:
        lines.extend(f"[ ] {e.title} ({e.notes})" for e in entries)
    return "\n".join(lines) + "\n"


def render_schedule_json(entries: Sequence[ScheduledDish], list_name: str) -> str:
    payload = {
        "listName": require_list_name(list_name),
        "items": [e.model_dump(mode="json", by_alias=True, exclude_none=True) for e in entries],
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)


# ───────────────────────── files ────────────────────────────────────
def export_filename(
    kind: ExportKind,
    fmt: ExportFormat,
    start: dt.date,
    end: dt.date,
    now: dt.datetime,
) -> str:
    stem = _FILE_STEMS[kind]
    if fmt == ExportFormat.json:
        return f"{stem}-{now:%Y%m%d-%H%M%S}.json"
    return f"{stem}-{start:%Y%m%d}-{end:%Y%m%d}.txt"


def render_exports(
    requests: Iterable[ExportItem],
    schedule: Sequence[ScheduleSlot],
    dishes: Sequence[Dish],
    start: dt.date | dt.datetime | str,
    end: dt.date | dt.datetime | str,
    now: dt.datetime,
    locale: Locale = "zh",
    tz: dt.tzinfo | str = "UTC",
) -> list[RenderedExport]:
    """Validate every requested item first, then render them all."""
    requests = list(requests)
    if not requests:
        raise ValidationError("Please select at least one export item.")
    start, end = date_window(start, end)
    for req in requests:
        if req.format == ExportFormat.json:
            require_list_name(req.list_name)

    out: list[RenderedExport] = []
    for req in requests:
        if req.kind == ExportKind.grocery:
            items = aggregate(schedule, dishes, start, end)
            content = (
                render_grocery_json(items, req.list_name)
                if req.format == ExportFormat.json
                else render_grocery_text(items, start, end, now)
            )
        else:
            entries = scheduled_dishes(schedule, dishes, start, end, locale, tz)
            content = (
                render_schedule_json(entries, req.list_name)
                if req.format == ExportFormat.json
                else render_schedule_text(entries, start, end, now)
            )
        out.append(
            RenderedExport(
                filename=export_filename(req.kind, req.format, start, end, now),
                media_type=_MEDIA_TYPES[req.format],
                content=content,
            )
        )
    return out
