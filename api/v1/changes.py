# api/v1/changes.py
"""
Server-Sent Events feed of the caller's dish and schedule changes.

The stream opens with one `snapshot` event holding every dish and slot,
then sends a `change` event per store write.  Each connection keeps its
own StoreMirror; events it would drop as stale are not forwarded.
"""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, AsyncIterator

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from core.mirror import StoreMirror
from services.changes import ChangeEvent, Subscription
from services.store import PlannerStore
from api.v1.deps import get_store

_LOG = logging.getLogger(__name__)

router = APIRouter()

HEARTBEAT_SECONDS = 15.0


def _sse(event: str, data: dict[str, Any]) -> str:
    return f"event: {event}\ndata: {json.dumps(data, ensure_ascii=False)}\n\n"


def change_payload(event: ChangeEvent) -> dict[str, Any]:
    return {
        "table": event.table,
        "kind": event.kind,
        "recordId": event.record_id,
        "revision": event.revision,
        "record": event.record,
    }


async def event_stream(
    subscription: Subscription,
    mirror: StoreMirror,
    heartbeat: float = HEARTBEAT_SECONDS,
) -> AsyncIterator[str]:
    try:
        dishes, slots = mirror.snapshot()
        yield _sse(
            "snapshot",
            {
                "dishes": [d.to_wire() for d in dishes],
                "schedule": [s.to_wire() for s in slots],
            },
        )
        while True:
            try:
                event = await asyncio.wait_for(subscription.__anext__(), heartbeat)
            except StopAsyncIteration:
                break
            except asyncio.TimeoutError:
                yield _sse("ping", {})
                continue
            if mirror.apply(event):
                yield _sse("change", change_payload(event))
    finally:
        subscription.close()
        _LOG.debug("change stream closed")


@router.get("/stream", summary="Live dish and schedule changes (text/event-stream)")
async def stream_changes(store: PlannerStore = Depends(get_store)) -> StreamingResponse:
    # subscribe before reading so no write between the two is missed
    subscription = store.changes.subscribe()
    mirror = StoreMirror()
    try:
        mirror.load(*await store.snapshot())
    except Exception:
        subscription.close()
        raise
    return StreamingResponse(event_stream(subscription, mirror), media_type="text/event-stream")
