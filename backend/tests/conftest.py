"""
Pytest configuration and fixtures for Pitcrew tests.
"""

from datetime import date
from typing import Any, Mapping

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlmodel import SQLModel

import pitcrew.models  # noqa: F401 - registers the tables on SQLModel.metadata
from pitcrew.exceptions import NotFoundError, StoreError
from pitcrew.main import app
from pitcrew.models.common import new_id
from pitcrew.schemas import MilestoneRead, TaskRead
from pitcrew.store import get_store
from pitcrew.store.base import (
    MILESTONES,
    TASKS,
    DocumentStore,
    coerce_filters,
    schemas_for,
    validate_create,
    validate_update,
)
from pitcrew.store.sql import SqlDocumentStore
from pitcrew.timeline.sessions import SessionRegistry

# A Wednesday; the surrounding week starts on Sunday 2024-03-10
TODAY = date(2024, 3, 13)


class FakeClock:
    """Monotonic clock under test control."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class InMemoryStore(DocumentStore):
    """
    Dict-backed store holding read schemas.

    Records every update call; reads and writes can be made to fail.
    """

    def __init__(self):
        self.records: dict[str, dict[str, Any]] = {TASKS: {}, MILESTONES: {}}
        self.updates: list[tuple[str, str, dict]] = []
        self.fail_reads = False
        self.fail_updates = False

    def add(self, *records) -> None:
        for record in records:
            collection = TASKS if isinstance(record, TaskRead) else MILESTONES
            self.records[collection][record.id] = record

    async def get_all(self, collection: str):
        if self.fail_reads:
            raise StoreError("store offline", collection)
        return list(self.records[collection].values())

    async def query(self, collection: str, filters: Mapping[str, Any] | None = None):
        records = await self.get_all(collection)
        for key, value in coerce_filters(collection, filters).items():
            if isinstance(value, list):
                records = [r for r in records if getattr(r, key) in value]
            else:
                records = [r for r in records if getattr(r, key) == value]
        return records

    async def get_by_id(self, collection: str, record_id: str):
        return self.records[collection].get(record_id)

    async def create(self, collection: str, data: Mapping[str, Any]):
        read = schemas_for(collection).read
        record = read(id=new_id(), **validate_create(collection, data))
        self.records[collection][record.id] = record
        return record

    async def update(self, collection: str, record_id: str, fields: Mapping[str, Any]):
        self.updates.append((collection, record_id, dict(fields)))
        if self.fail_updates:
            raise StoreError("write rejected", collection)
        current = self.records[collection].get(record_id)
        if current is None:
            raise NotFoundError(schemas_for(collection).resource, record_id)
        record = current.model_copy(update=validate_update(collection, fields))
        self.records[collection][record_id] = record
        return record

    async def remove(self, collection: str, record_id: str) -> bool:
        return self.records[collection].pop(record_id, None) is not None


@pytest.fixture
def make_task():
    def factory(task_id: str, **fields) -> TaskRead:
        fields.setdefault("title", f"Task {task_id}")
        return TaskRead(id=task_id, **fields)
    return factory


@pytest.fixture
def make_milestone():
    def factory(milestone_id: str, **fields) -> MilestoneRead:
        fields.setdefault("name", f"Milestone {milestone_id}")
        return MilestoneRead(id=milestone_id, **fields)
    return factory


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_store():
    return InMemoryStore()


@pytest_asyncio.fixture(scope="function")
async def test_engine(tmp_path):
    """Create a throwaway SQLite database engine."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'pitcrew_test.db'}", echo=False)

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def sql_store(test_engine):
    """SQL document store bound to the test database."""
    session_maker = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    return SqlDocumentStore(session_maker)


@pytest_asyncio.fixture(scope="function")
async def client(sql_store):
    """Create an async test client backed by the test database."""
    app.dependency_overrides[get_store] = lambda: sql_store
    # ASGITransport does not run the lifespan
    app.state.sessions = SessionRegistry()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    await app.state.sessions.close_all()
    app.dependency_overrides.clear()
