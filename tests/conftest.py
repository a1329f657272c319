# tests/conftest.py
from __future__ import annotations

import os

# must be set before config.settings is first imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret-0123456789abcdef0123456789")

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from services import db as db_module
from services.store import MemoryPlannerStore

from tests.sample_data import PANCAKES, SALAD


@pytest_asyncio.fixture
async def store() -> MemoryPlannerStore:
    s = MemoryPlannerStore("user-1")
    await s.insert_dish(PANCAKES)
    await s.insert_dish(SALAD)
    return s


def _test_engine():
    return create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


@pytest_asyncio.fixture
async def sql_session():
    eng = _test_engine()
    await db_module.init_models(eng)
    sessions = async_sessionmaker(eng, expire_on_commit=False)
    async with sessions() as session:
        yield session
    await eng.dispose()


@pytest.fixture
def client():
    """API client on a private in-memory database; tables built by the app lifespan."""
    from main import app

    eng = _test_engine()
    db_module._ENGINE = eng
    db_module._SESSIONS = async_sessionmaker(eng, expire_on_commit=False)
    with TestClient(app) as c:
        yield c
    db_module._ENGINE = None
    db_module._SESSIONS = None
