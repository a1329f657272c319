# api/v1/deps.py
from __future__ import annotations

import datetime as dt
from zoneinfo import ZoneInfo

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from core.catalog import DishCatalog
from core.schedule_engine import ScheduleMutationEngine
from services.auth import current_user_id
from services.changes import feed_for
from services.db import SqlPlannerStore, get_session
from services.store import PlannerStore


async def get_store(
    user_id: str = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> PlannerStore:
    return SqlPlannerStore(db, user_id, changes=feed_for(user_id))


def get_schedule_engine(store: PlannerStore = Depends(get_store)) -> ScheduleMutationEngine:
    return ScheduleMutationEngine(store)


def get_catalog(
    store: PlannerStore = Depends(get_store),
    engine: ScheduleMutationEngine = Depends(get_schedule_engine),
) -> DishCatalog:
    return DishCatalog(store, engine)


def local_now() -> dt.datetime:
    return dt.datetime.now(ZoneInfo(settings.timezone))
