"""Pytest configuration and fixtures for FarmLog tests.

Stores run against the in-memory backend unless a test asks for the SQL
backend explicitly (aiosqlite).  The API client talks to the ASGI app
in-process; the lifespan is not run, so the registry is installed on
``app.state`` by the fixture.
"""

from datetime import date, timedelta
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from farmlog.database import init_models, make_engine, make_sessionmaker
from farmlog.main import app
from farmlog.store.backend import MemoryBackend
from farmlog.store.registry import StoreRegistry
from farmlog.store.service import FarmStore
from farmlog.store.sql import SqlBackend
from farmlog.utils.dates import today


# ── Payload factories ────────────────────────────────────────────

def crop_payload(
    name: str = "Tomato",
    planting_date: date = date(2024, 1, 1),
    expected_harvest_date: date = date(2024, 3, 1),
    **extra,
) -> dict:
    payload = {
        "name": name,
        "variety": extra.pop("variety", "Momotaro"),
        "location": extra.pop("location", "Greenhouse A"),
        "plantingDate": planting_date.isoformat(),
        "expectedHarvestDate": expected_harvest_date.isoformat(),
    }
    payload.update(extra)
    return payload


def task_payload(crop_id: str, due_date: date, title: str = "Water", **extra) -> dict:
    return {
        "cropId": crop_id,
        "type": extra.pop("type", "watering"),
        "title": title,
        "dueDate": due_date.isoformat(),
        **extra,
    }


def record_payload(crop_id: str, on: date, **extra) -> dict:
    return {"cropId": crop_id, "date": on.isoformat(), "notes": "", **extra}


@pytest.fixture
def current_day() -> date:
    return today()


@pytest.fixture
def next_week(current_day: date) -> date:
    return current_day + timedelta(days=7)


# ── Stores ───────────────────────────────────────────────────────

@pytest.fixture
def memory_backend() -> MemoryBackend:
    return MemoryBackend()


@pytest_asyncio.fixture
async def store(memory_backend: MemoryBackend) -> AsyncGenerator[FarmStore, None]:
    """A loaded store for user ``alice``."""
    farm_store = FarmStore(memory_backend, "alice")
    await farm_store.initialize()
    yield farm_store
    await farm_store.dispose()


@pytest_asyncio.fixture
async def sql_backend(tmp_path) -> AsyncGenerator[SqlBackend, None]:
    """SQL backend on a fresh SQLite database file."""
    engine = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'farmlog.db'}")
    await init_models(engine)
    backend = SqlBackend(make_sessionmaker(engine))
    yield backend
    await backend.close()


# ── API client ───────────────────────────────────────────────────

@pytest_asyncio.fixture
async def registry() -> AsyncGenerator[StoreRegistry, None]:
    stores = StoreRegistry(MemoryBackend())
    yield stores
    await stores.dispose()


@pytest_asyncio.fixture
async def client(registry: StoreRegistry) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the app with an in-memory store registry."""
    app.state.stores = registry
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
