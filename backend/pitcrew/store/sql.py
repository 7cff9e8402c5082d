"""
SQL-backed document store (local fallback when Firestore is not configured).

Each collection maps to a SQLModel table; rows are returned as read schemas.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlmodel import SQLModel, select

from pitcrew.database import get_session_context
from pitcrew.exceptions import NotFoundError, StoreError
from pitcrew.logging_config import get_logger
from pitcrew.models import Milestone, Task
from pitcrew.models.common import utcnow
from pitcrew.store.base import (
    MILESTONES,
    TASKS,
    DocumentStore,
    coerce_filters,
    schemas_for,
    validate_create,
    validate_update,
)

logger = get_logger(__name__)

TABLES: dict[str, type[SQLModel]] = {
    TASKS: Task,
    MILESTONES: Milestone,
}


class SqlDocumentStore(DocumentStore):

    def __init__(self, session_maker: Optional[async_sessionmaker] = None):
        self._session_maker = session_maker

    def _table(self, collection: str) -> type[SQLModel]:
        schemas_for(collection)  # rejects unknown collections
        return TABLES[collection]

    @asynccontextmanager
    async def _session(self, collection: str) -> AsyncGenerator[AsyncSession, None]:
        try:
            async with get_session_context(self._session_maker) as session:
                yield session
        except SQLAlchemyError as e:
            logger.error(f"SQL store error on {collection}: {e}")
            raise StoreError(f"Could not access {collection}", collection) from e

    def _read(self, collection: str, row: SQLModel):
        return schemas_for(collection).read.model_validate(row)

    async def get_all(self, collection: str):
        return await self.query(collection)

    async def query(self, collection: str, filters: Mapping[str, Any] | None = None):
        table = self._table(collection)
        statement = select(table)
        for key, value in coerce_filters(collection, filters).items():
            column = getattr(table, key)
            if isinstance(value, (list, tuple, set)):
                statement = statement.where(column.in_(list(value)))
            else:
                statement = statement.where(column == value)

        async with self._session(collection) as session:
            result = await session.execute(statement)
            rows = list(result.scalars().all())

        logger.debug(f"Fetched {len(rows)} {collection}")
        return [self._read(collection, row) for row in rows]

    async def get_by_id(self, collection: str, record_id: str):
        table = self._table(collection)
        async with self._session(collection) as session:
            row = await session.get(table, record_id)
            return self._read(collection, row) if row else None

    async def create(self, collection: str, data: Mapping[str, Any]):
        table = self._table(collection)
        row = table(**validate_create(collection, data))
        async with self._session(collection) as session:
            session.add(row)
            await session.flush()
            await session.refresh(row)
            record = self._read(collection, row)

        logger.info(f"Created {collection}/{record.id}")
        return record

    async def update(self, collection: str, record_id: str, fields: Mapping[str, Any]):
        table = self._table(collection)
        update_data = validate_update(collection, fields)
        async with self._session(collection) as session:
            row = await session.get(table, record_id)
            if row is None:
                raise NotFoundError(schemas_for(collection).resource, record_id)
            for field, value in update_data.items():
                setattr(row, field, value)
            row.updated_at = utcnow()
            await session.flush()
            await session.refresh(row)
            return self._read(collection, row)

    async def remove(self, collection: str, record_id: str) -> bool:
        table = self._table(collection)
        async with self._session(collection) as session:
            row = await session.get(table, record_id)
            if row is None:
                return False
            await session.delete(row)
        logger.info(f"Deleted {collection}/{record_id}")
        return True
