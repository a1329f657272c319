"""
core/backup.py
────────────────────────────────────────────────────────────────────────
Backup snapshot codec + merge-on-restore.

File format (UTF-8 JSON):

    {"version": "1.0", "exportedAt": "<ISO-8601>", "dishes": [...], "schedule": [...]}

Parsing is fail-fast (FormatError before any write).  Restoring is
best-effort: an entity whose id already exists is skipped, an entity whose
write fails is logged and skipped, and the tallies are always returned.
"""
from __future__ import annotations

import datetime as dt
import json
import logging
from dataclasses import dataclass

import pydantic

from core.errors import FormatError, NotAuthenticatedError
from core.models.dish import Dish, WireModel
from core.models.schedule import ScheduleSlot
from services.store import PlannerStore

_LOG = logging.getLogger(__name__)

BACKUP_VERSION = "1.0"


class BackupSnapshot(WireModel):
    version: str
    exported_at: dt.datetime | None = None
    dishes: list[Dish]
    schedule: list[ScheduleSlot]


@dataclass
class RestoreSummary:
    dishes_added: int = 0
    dishes_skipped: int = 0
    schedule_added: int = 0
    schedule_skipped: int = 0

    def message(self) -> str:
        return (
            "Restore complete!\n"
            f"Dishes: {self.dishes_added} added, {self.dishes_skipped} skipped\n"
            f"Schedule: {self.schedule_added} added, {self.schedule_skipped} skipped"
        )


# ───────── export ────────────────────────────────────────────────────
def export_snapshot(
    dishes: list[Dish],
    schedule: list[ScheduleSlot],
    now: dt.datetime | None = None,
) -> BackupSnapshot:
    return BackupSnapshot(
        version=BACKUP_VERSION,
        exported_at=now or dt.datetime.now(dt.timezone.utc),
        dishes=dishes,
        schedule=schedule,
    )


def encode_snapshot(snapshot: BackupSnapshot) -> bytes:
    return json.dumps(snapshot.to_wire(), indent=2, ensure_ascii=False).encode("utf-8")


def backup_filename(now: dt.datetime) -> str:
    return f"meal-planner-backup-{now:%Y-%m-%d}.json"


# ───────── import ────────────────────────────────────────────────────
def parse_snapshot(raw: bytes | str) -> BackupSnapshot:
    try:
        data = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise FormatError(f"Failed to parse backup file: {exc}") from exc

    if (
        not isinstance(data, dict)
        or not data.get("version")
        or not isinstance(data.get("dishes"), list)
        or not isinstance(data.get("schedule"), list)
    ):
        raise FormatError("Failed to parse backup file: Invalid backup file format")

    # any truthy version is accepted, numeric ones included
    data = {**data, "version": str(data["version"])}

    try:
        return BackupSnapshot.model_validate(data)
    except pydantic.ValidationError as exc:
        raise FormatError(
            f"Failed to parse backup file: {exc.error_count()} invalid field(s)"
        ) from exc


# ───────── restore ───────────────────────────────────────────────────
async def restore_merge(snapshot: BackupSnapshot, store: PlannerStore) -> RestoreSummary:
    """Add what is missing, dishes first.  Safe to run again on the same file."""
    summary = RestoreSummary()

    existing = {d.id for d in await store.list_dishes()}
    for dish in snapshot.dishes:
        if dish.id in existing:
            summary.dishes_skipped += 1
            continue
        try:
            await store.insert_dish(dish)
        except NotAuthenticatedError:
            raise
        except Exception as exc:
            _LOG.warning("restore: failed to add dish %s (%s): %s", dish.id, dish.name, exc)
            summary.dishes_skipped += 1
            continue
        existing.add(dish.id)
        summary.dishes_added += 1

    existing = {s.id for s in await store.list_slots()}
    for slot in snapshot.schedule:
        if slot.id in existing or not slot.items:
            summary.schedule_skipped += 1
            continue
        try:
            await store.insert_slot(slot)
        except NotAuthenticatedError:
            raise
        except Exception as exc:
            _LOG.warning("restore: failed to add schedule slot %s: %s", slot.id, exc)
            summary.schedule_skipped += 1
            continue
        existing.add(slot.id)
        summary.schedule_added += 1

    _LOG.info(
        "restore finished: dishes +%d/~%d, schedule +%d/~%d",
        summary.dishes_added,
        summary.dishes_skipped,
        summary.schedule_added,
        summary.schedule_skipped,
    )
    return summary
