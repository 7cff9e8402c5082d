"""
Document store contract.

The timeline and the CRUD routes only talk to collections through this
interface: fetch all, equality query, get, create, partial update, remove.
The store owns merging partial updates and stamping ``updated_at``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Type

from pydantic import BaseModel

from pitcrew.exceptions import NotFoundError, ValidationError
from pitcrew.schemas.milestone import MilestoneCreate, MilestoneRead, MilestoneUpdate
from pitcrew.schemas.task import TaskCreate, TaskRead, TaskUpdate

TASKS = "tasks"
MILESTONES = "milestones"


@dataclass(frozen=True)
class CollectionSchemas:
    resource: str
    create: Type[BaseModel]
    update: Type[BaseModel]
    read: Type[BaseModel]


COLLECTIONS = {
    TASKS: CollectionSchemas("Task", TaskCreate, TaskUpdate, TaskRead),
    MILESTONES: CollectionSchemas("Milestone", MilestoneCreate, MilestoneUpdate, MilestoneRead),
}


def schemas_for(collection: str) -> CollectionSchemas:
    try:
        return COLLECTIONS[collection]
    except KeyError:
        raise ValidationError(f"Unknown collection '{collection}'")


def clean_filters(filters: Mapping[str, Any] | None) -> dict[str, Any]:
    """Drop None / empty-string filters; list values mean "one of"."""
    if not filters:
        return {}
    return {
        key: value
        for key, value in filters.items()
        if value is not None and value != ""
    }


def coerce_filters(collection: str, filters: Mapping[str, Any] | None) -> dict[str, Any]:
    """
    Clean filters and turn raw strings into enum members for enum fields
    (e.g. status="Completed" -> TaskStatus.COMPLETED).
    """
    read_schema = schemas_for(collection).read
    coerced = {}
    for key, value in clean_filters(filters).items():
        field = read_schema.model_fields.get(key)
        if field is None:
            raise ValidationError(f"Unknown field '{key}' for {collection}")
        annotation = field.annotation
        if isinstance(annotation, type) and issubclass(annotation, Enum):
            try:
                if isinstance(value, (list, tuple, set)):
                    value = [annotation(item) for item in value]
                else:
                    value = annotation(value)
            except ValueError:
                raise ValidationError(f"Invalid value for '{key}': {value!r}")
        coerced[key] = value
    return coerced


def validate_update(collection: str, fields: Mapping[str, Any]) -> dict[str, Any]:
    """Coerce a partial update, keeping only the fields that were sent."""
    schema = schemas_for(collection).update
    return schema.model_validate(dict(fields)).model_dump(exclude_unset=True)


def validate_create(collection: str, data: Mapping[str, Any]) -> dict[str, Any]:
    schema = schemas_for(collection).create
    return schema.model_validate(dict(data)).model_dump()


class DocumentStore(ABC):
    """Generic CRUD over named collections."""

    @abstractmethod
    async def get_all(self, collection: str) -> list[BaseModel]: ...

    @abstractmethod
    async def query(self, collection: str, filters: Mapping[str, Any] | None = None) -> list[BaseModel]: ...

    @abstractmethod
    async def get_by_id(self, collection: str, record_id: str) -> BaseModel | None: ...

    @abstractmethod
    async def create(self, collection: str, data: Mapping[str, Any]) -> BaseModel: ...

    @abstractmethod
    async def update(self, collection: str, record_id: str, fields: Mapping[str, Any]) -> BaseModel: ...

    @abstractmethod
    async def remove(self, collection: str, record_id: str) -> bool: ...

    async def get_or_404(self, collection: str, record_id: str) -> BaseModel:
        record = await self.get_by_id(collection, record_id)
        if record is None:
            raise NotFoundError(schemas_for(collection).resource, record_id)
        return record
