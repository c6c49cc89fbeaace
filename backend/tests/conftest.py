"""
QuickNotes Backend — Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── clock: FakeClock advancing one second per reading
    ├── sequential_ids: id generator yielding n1, n2, n3, ...
    ├── memory_store: InMemoryNoteStore using sequential_ids
    ├── note_service: NoteService over memory_store and clock
    ├── db_store: DatabaseNoteStore on a temporary SQLite file
    └── test_client: HTTPX AsyncClient talking to create_app(memory_store)
"""

import itertools
import os
from datetime import datetime, timedelta, timezone

# Override settings for testing BEFORE any quicknotes imports
os.environ["STORE_BACKEND"] = "memory"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["CORS_ORIGINS"] = "*"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from quicknotes.database import build_engine
from quicknotes.main import create_app
from quicknotes.services.note_service import NoteService
from quicknotes.stores.database import DatabaseNoteStore
from quicknotes.stores.memory import InMemoryNoteStore

START = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Returns START, START+1s, START+2s, ... on successive calls."""

    def __init__(self, start: datetime = START, step: timedelta = timedelta(seconds=1)):
        self.now = start
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        return current


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sequential_ids():
    counter = itertools.count(1)
    return lambda: f"n{next(counter)}"


@pytest.fixture
def memory_store(sequential_ids):
    return InMemoryNoteStore(id_generator=sequential_ids)


@pytest.fixture
def note_service(memory_store, clock):
    return NoteService(memory_store, clock=clock)


@pytest_asyncio.fixture
async def db_store(tmp_path):
    """
    A DatabaseNoteStore on a fresh SQLite file, schema already created.
    The engine is disposed after the test.
    """
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'notes.db'}", echo=False)
    store = DatabaseNoteStore(engine)
    await store.initialize()
    yield store
    await store.close()


@pytest_asyncio.fixture
async def test_client(memory_store, clock):
    """
    HTTPX AsyncClient bound to a fresh app over memory_store.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    app = create_app(store=memory_store, clock=clock)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
