# api/v1/backup.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from core.backup import backup_filename, encode_snapshot, export_snapshot, parse_snapshot, restore_merge
from services.store import PlannerStore
from api.v1.deps import get_store, local_now
from api.v1.schemas import RestoreSummaryOut

router = APIRouter()


@router.get("", summary="Download a full backup of dishes and schedule")
async def download_backup(store: PlannerStore = Depends(get_store)) -> Response:
    dishes, slots = await store.snapshot()
    snapshot = export_snapshot(dishes, slots)
    return Response(
        content=encode_snapshot(snapshot),
        media_type="application/json",
        headers={
            "Content-Disposition": f'attachment; filename="{backup_filename(local_now())}"'
        },
    )


@router.post(
    "/restore",
    response_model=RestoreSummaryOut,
    summary="Merge a backup file into the current data (existing ids are kept)",
)
async def restore_backup(
    request: Request,
    store: PlannerStore = Depends(get_store),
) -> RestoreSummaryOut:
    # parse before touching the store: a bad file writes nothing
    snapshot = parse_snapshot(await request.body())
    summary = await restore_merge(snapshot, store)
    return RestoreSummaryOut(
        dishes_added=summary.dishes_added,
        dishes_skipped=summary.dishes_skipped,
        schedule_added=summary.schedule_added,
        schedule_skipped=summary.schedule_skipped,
        message=summary.message(),
    )
