# api/v1/exports.py
from __future__ import annotations

import datetime as dt

from fastapi import APIRouter, Depends, Response

from config import settings
from core.aggregation import AggregatedIngredient, ScheduledDish, aggregate, scheduled_dishes
from core.export import ExportFormat, ExportItem, ExportKind, RenderedExport, render_exports
from services.store import PlannerStore
from api.v1.deps import get_store, local_now
from api.v1.schemas import ExportFileOut, ExportItemIn, ExportRequest

router = APIRouter()

_DEFAULT_LIST_NAMES = {
    ExportKind.grocery: lambda: settings.grocery_list_name,
    ExportKind.schedule: lambda: settings.schedule_list_name,
}


def _item(body: ExportItemIn) -> ExportItem:
    name = body.list_name if body.list_name is not None else _DEFAULT_LIST_NAMES[body.kind]()
    return ExportItem(kind=body.kind, format=body.format, list_name=name)


async def _render(
    store: PlannerStore,
    items: list[ExportItem],
    start: dt.date,
    end: dt.date,
) -> list[RenderedExport]:
    dishes, slots = await store.snapshot()
    return render_exports(
        items,
        slots,
        dishes,
        start,
        end,
        now=local_now(),
        locale=settings.export_locale,
        tz=settings.timezone,
    )


@router.get(
    "/grocery",
    response_model=list[AggregatedIngredient],
    summary="Aggregated ingredient totals for a date range",
)
async def grocery_totals(
    start: dt.date,
    end: dt.date,
    store: PlannerStore = Depends(get_store),
) -> list[AggregatedIngredient]:
    dishes, slots = await store.snapshot()
    return aggregate(slots, dishes, start, end)


@router.get("/scheduled", response_model=list[ScheduledDish], response_model_exclude_none=True)
async def scheduled_list(
    start: dt.date,
    end: dt.date,
    store: PlannerStore = Depends(get_store),
) -> list[ScheduledDish]:
    dishes, slots = await store.snapshot()
    return scheduled_dishes(
        slots, dishes, start, end, settings.export_locale, settings.timezone
    )


@router.post("", response_model=list[ExportFileOut], summary="Render one or more export files")
async def export_files(
    body: ExportRequest,
    store: PlannerStore = Depends(get_store),
) -> list[ExportFileOut]:
    files = await _render(store, [_item(i) for i in body.items], body.start, body.end)
    return [
        ExportFileOut(filename=f.filename, media_type=f.media_type, content=f.content)
        for f in files
    ]


@router.get("/download", summary="Download a single export file")
async def download(
    kind: ExportKind,
    start: dt.date,
    end: dt.date,
    format: ExportFormat = ExportFormat.txt,
    list_name: str | None = None,
    store: PlannerStore = Depends(get_store),
) -> Response:
    item = _item(ExportItemIn(kind=kind, format=format, list_name=list_name))
    [rendered] = await _render(store, [item], start, end)
    return Response(
        content=rendered.content.encode("utf-8"),
        media_type=rendered.media_type,
        headers={"Content-Disposition": f'attachment; filename="{rendered.filename}"'},
    )
