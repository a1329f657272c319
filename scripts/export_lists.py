"""
Write grocery / scheduled-dish exports for a user to disk.

Usage
-----

    python -m scripts.export_lists <USER_ID> 2024-01-01 2024-01-07
    python -m scripts.export_lists <USER_ID> 2024-01-01 2024-01-07 \
        --kind grocery --format json --list-name "Weekly Shopping" --out exports/
"""
from __future__ import annotations

import argparse
import asyncio
import datetime as dt
from pathlib import Path
from zoneinfo import ZoneInfo

from config import settings
from core.export import ExportFormat, ExportItem, ExportKind, render_exports
from services.db import SqlPlannerStore, session_scope


async def _export(args: argparse.Namespace) -> None:
    async with session_scope() as db:
        dishes, slots = await SqlPlannerStore(db, args.user_id).snapshot()

    kinds = [ExportKind(k) for k in args.kind] if args.kind else list(ExportKind)
    items = [
        ExportItem(kind=k, format=ExportFormat(args.format), list_name=args.list_name or "")
        for k in kinds
    ]
    files = render_exports(
        items,
        slots,
        dishes,
        args.start,
        args.end,
        now=dt.datetime.now(ZoneInfo(settings.timezone)),
        locale=settings.export_locale,
        tz=settings.timezone,
    )

    args.out.mkdir(parents=True, exist_ok=True)
    for f in files:
        path = args.out / f.filename
        path.write_text(f.content, encoding="utf-8")
        print(f"✓ wrote {path}")


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("user_id", help="whose schedule to export")
    parser.add_argument("start", type=dt.date.fromisoformat, help="first day (YYYY-MM-DD)")
    parser.add_argument("end", type=dt.date.fromisoformat, help="last day, inclusive")
    parser.add_argument(
        "--kind",
        action="append",
        choices=[k.value for k in ExportKind],
        help="repeatable; default exports both",
    )
    parser.add_argument("--format", choices=[f.value for f in ExportFormat], default="txt")
    parser.add_argument("--list-name", help="required with --format json")
    parser.add_argument("--out", type=Path, default=Path("."))
    args = parser.parse_args()

    asyncio.run(_export(args))


if __name__ == "__main__":
    main()
