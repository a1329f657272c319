"""
services/db.py
────────────────────────────────────────────────────────────────────────
* Async SQLAlchemy v2 setup
* Tables for dishes and schedule slots (list-valued fields as JSON)
* `SqlPlannerStore` – the PlannerStore used by the API and scripts
"""
from __future__ import annotations

import datetime as dt
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator

from sqlalchemy import JSON, Date, DateTime, Integer, String, Text, UniqueConstraint, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import (
    AsyncAttrs,
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

from config import settings
from core.errors import ConflictError, NotFoundError
from core.models.dish import Dish
from core.models.schedule import MealType, ScheduleSlot
from services.changes import ChangeFeed
from services.store import PlannerStore

_LOG = logging.getLogger(__name__)

# ───────── connection helper ────────────────────────────────────────
_ENGINE: AsyncEngine | None = None
_SESSIONS: async_sessionmaker[AsyncSession] | None = None


def engine() -> AsyncEngine:
    global _ENGINE
    if _ENGINE is None:
        _ENGINE = create_async_engine(settings.database_url, pool_pre_ping=True)
    return _ENGINE


def session_factory() -> async_sessionmaker[AsyncSession]:
    global _SESSIONS
    if _SESSIONS is None:
        _SESSIONS = async_sessionmaker(engine(), expire_on_commit=False)
    return _SESSIONS


# ───────── declarative base ──────────────────────────────────────────
Base = declarative_base(cls=AsyncAttrs)


class DishRow(Base):
    __tablename__ = "dishes"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(200))
    ingredients: Mapped[list] = mapped_column(JSON, default=list)   # wire dicts
    seasonings: Mapped[list] = mapped_column(JSON, default=list)
    video_link: Mapped[str | None] = mapped_column(Text)
    servings: Mapped[int | None] = mapped_column(Integer)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )


class ScheduleSlotRow(Base):
    __tablename__ = "schedule_slots"
    __table_args__ = (
        UniqueConstraint("user_id", "date", "meal_type", name="uq_slot_per_meal"),
    )

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    date: Mapped[dt.date] = mapped_column(Date, index=True)
    meal_type: Mapped[str] = mapped_column(String(16))
    items: Mapped[list] = mapped_column(JSON, default=list)         # [{dishId, servings}]


async def init_models(eng: AsyncEngine | None = None) -> None:
    async with (eng or engine()).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# ───────── row <-> model ─────────────────────────────────────────────
def _dish(row: DishRow) -> Dish:
    return Dish.model_validate(
        {
            "id": row.id,
            "name": row.name,
            "ingredients": row.ingredients or [],
            "seasonings": row.seasonings or [],
            "videoLink": row.video_link,
            "servings": row.servings,
        }
    )


def _slot(row: ScheduleSlotRow) -> ScheduleSlot:
    return ScheduleSlot.model_validate(
        {"id": row.id, "date": row.date, "mealType": row.meal_type, "items": row.items or []}
    )


def _dish_columns(dish: Dish) -> dict:
    wire = dish.to_wire()
    return {
        "name": dish.name,
        "ingredients": wire["ingredients"],
        "seasonings": wire["seasonings"],
        "video_link": dish.video_link,
        "servings": dish.servings,
    }


def _slot_columns(slot: ScheduleSlot) -> dict:
    return {
        "date": slot.date,
        "meal_type": slot.meal_type.value,
        "items": slot.to_wire()["items"],
    }


# ───────── store ─────────────────────────────────────────────────────
class SqlPlannerStore(PlannerStore):
    def __init__(
        self,
        session: AsyncSession,
        user_id: str | None,
        changes: ChangeFeed | None = None,
    ) -> None:
        super().__init__(user_id, changes)
        self._db = session

    async def _commit(self, what: str) -> None:
        try:
            await self._db.commit()
        except IntegrityError as exc:
            await self._db.rollback()
            _LOG.warning("integrity error writing %s: %s", what, exc.orig)
            raise ConflictError(f"{what} conflicts with an existing row") from exc

    # ─── dishes ──────────────────────────────────────────────────────
    async def list_dishes(self) -> list[Dish]:
        rows = await self._db.scalars(
            select(DishRow)
            .where(DishRow.user_id == self.user_id)
            .order_by(DishRow.created_at, DishRow.name)
        )
        return [_dish(r) for r in rows]

    async def get_dish(self, dish_id: str) -> Dish | None:
        row = await self._db.get(DishRow, (self.user_id, dish_id))
        return _dish(row) if row else None

    async def insert_dish(self, dish: Dish) -> Dish:
        if await self._db.get(DishRow, (self.user_id, dish.id)):
            raise ConflictError(f"Dish {dish.id} already exists")
        self._db.add(DishRow(user_id=self.user_id, id=dish.id, **_dish_columns(dish)))
        await self._commit(f"Dish {dish.id}")
        self.changes.publish("dishes", "insert", dish.id, dish.to_wire())
        return dish

    async def update_dish(self, dish: Dish) -> None:
        row = await self._db.get(DishRow, (self.user_id, dish.id))
        if row is None:
            raise NotFoundError(f"Dish {dish.id} not found")
        for key, value in _dish_columns(dish).items():
            setattr(row, key, value)
        await self._commit(f"Dish {dish.id}")
        self.changes.publish("dishes", "update", dish.id, dish.to_wire())

    async def delete_dish(self, dish_id: str) -> None:
        row = await self._db.get(DishRow, (self.user_id, dish_id))
        if row is None:
            return
        await self._db.delete(row)
        await self._db.commit()
        self.changes.publish("dishes", "delete", dish_id)

    # ─── schedule slots ──────────────────────────────────────────────
    async def list_slots(self) -> list[ScheduleSlot]:
        rows = await self._db.scalars(
            select(ScheduleSlotRow)
            .where(ScheduleSlotRow.user_id == self.user_id)
            .order_by(ScheduleSlotRow.date, ScheduleSlotRow.meal_type)
        )
        return [_slot(r) for r in rows]

    async def get_slot(self, slot_id: str) -> ScheduleSlot | None:
        row = await self._db.get(ScheduleSlotRow, (self.user_id, slot_id))
        return _slot(row) if row else None

    async def find_slot(self, date: dt.date, meal_type: MealType) -> ScheduleSlot | None:
        row = (
            await self._db.execute(
                select(ScheduleSlotRow).where(
                    ScheduleSlotRow.user_id == self.user_id,
                    ScheduleSlotRow.date == date,
                    ScheduleSlotRow.meal_type == MealType(meal_type).value,
                )
            )
        ).scalar_one_or_none()
        return _slot(row) if row else None

    async def insert_slot(self, slot: ScheduleSlot) -> ScheduleSlot:
        if await self._db.get(ScheduleSlotRow, (self.user_id, slot.id)):
            raise ConflictError(f"Schedule slot {slot.id} already exists")
        self._db.add(ScheduleSlotRow(user_id=self.user_id, id=slot.id, **_slot_columns(slot)))
        await self._commit(f"{slot.meal_type.value} slot on {slot.date.isoformat()}")
        self.changes.publish("schedule", "insert", slot.id, slot.to_wire())
        return slot

    async def update_slot(self, slot: ScheduleSlot) -> None:
        row = await self._db.get(ScheduleSlotRow, (self.user_id, slot.id))
        if row is None:
            raise NotFoundError(f"Schedule slot {slot.id} not found")
        for key, value in _slot_columns(slot).items():
            setattr(row, key, value)
        await self._commit(f"{slot.meal_type.value} slot on {slot.date.isoformat()}")
        self.changes.publish("schedule", "update", slot.id, slot.to_wire())

    async def delete_slot(self, slot_id: str) -> None:
        row = await self._db.get(ScheduleSlotRow, (self.user_id, slot_id))
        if row is None:
            return
        await self._db.delete(row)
        await self._db.commit()
        self.changes.publish("schedule", "delete", slot_id)


# ───────── session helpers ───────────────────────────────────────────
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with session_factory()() as session:
        yield session


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    """Same as `get_session` for code running outside FastAPI (scripts)."""
    async with session_factory()() as session:
        yield session
