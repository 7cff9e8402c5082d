"""
Firestore-backed document store.

Documents keep the shape the dashboard has always written: enums as their
display strings, timestamps as ISO strings (server timestamps for
created_at/updated_at).
"""

from typing import Any, Mapping

from firebase_admin import firestore, firestore_async
from google.api_core.exceptions import GoogleAPIError
from google.cloud.firestore import FieldFilter

from pitcrew.exceptions import NotFoundError, StoreError
from pitcrew.firebase import get_firebase_app
from pitcrew.logging_config import get_logger
from pitcrew.store.base import (
    DocumentStore,
    coerce_filters,
    schemas_for,
    validate_create,
    validate_update,
)

logger = get_logger(__name__)


def _to_document(data: Mapping[str, Any]) -> dict[str, Any]:
    document = {}
    for key, value in data.items():
        if hasattr(value, "isoformat"):
            value = value.isoformat()
        elif hasattr(value, "value"):  # enum
            value = value.value
        document[key] = value
    return document


class FirestoreDocumentStore(DocumentStore):

    def __init__(self, client=None):
        self._client = client or firestore_async.client(get_firebase_app())

    def _read(self, collection: str, snapshot):
        return schemas_for(collection).read.model_validate(
            {**(snapshot.to_dict() or {}), "id": snapshot.id}
        )

    def _collection(self, collection: str):
        schemas_for(collection)  # rejects unknown collections
        return self._client.collection(collection)

    async def get_all(self, collection: str):
        try:
            snapshots = await self._collection(collection).get()
        except GoogleAPIError as e:
            logger.error(f"Error getting {collection}: {e}")
            raise StoreError(f"Could not read {collection}", collection) from e
        return [self._read(collection, snap) for snap in snapshots]

    async def query(self, collection: str, filters: Mapping[str, Any] | None = None):
        conditions = coerce_filters(collection, filters)
        if not conditions:
            return await self.get_all(collection)

        query = self._collection(collection)
        for key, value in conditions.items():
            if isinstance(value, list):
                query = query.where(filter=FieldFilter(key, "in", [getattr(v, "value", v) for v in value]))
            else:
                query = query.where(filter=FieldFilter(key, "==", getattr(value, "value", value)))

        try:
            snapshots = await query.get()
        except GoogleAPIError as e:
            logger.error(f"Error querying {collection}: {e}")
            raise StoreError(f"Could not query {collection}", collection) from e
        return [self._read(collection, snap) for snap in snapshots]

    async def get_by_id(self, collection: str, record_id: str):
        try:
            snapshot = await self._collection(collection).document(record_id).get()
        except GoogleAPIError as e:
            logger.error(f"Error getting {collection}/{record_id}: {e}")
            raise StoreError(f"Could not read {collection}/{record_id}", collection) from e
        return self._read(collection, snapshot) if snapshot.exists else None

    async def create(self, collection: str, data: Mapping[str, Any]):
        document = _to_document(validate_create(collection, data))
        document["created_at"] = firestore.SERVER_TIMESTAMP
        document["updated_at"] = firestore.SERVER_TIMESTAMP
        try:
            _, doc_ref = await self._collection(collection).add(document)
            snapshot = await doc_ref.get()
        except GoogleAPIError as e:
            logger.error(f"Error creating in {collection}: {e}")
            raise StoreError(f"Could not create in {collection}", collection) from e

        logger.info(f"Created {collection}/{doc_ref.id}")
        return self._read(collection, snapshot)

    async def update(self, collection: str, record_id: str, fields: Mapping[str, Any]):
        document = _to_document(validate_update(collection, fields))
        document["updated_at"] = firestore.SERVER_TIMESTAMP
        doc_ref = self._collection(collection).document(record_id)
        try:
            if not (await doc_ref.get()).exists:
                raise NotFoundError(schemas_for(collection).resource, record_id)
            await doc_ref.update(document)
            snapshot = await doc_ref.get()
        except GoogleAPIError as e:
            logger.error(f"Error updating {collection}/{record_id}: {e}")
            raise StoreError(f"Could not update {collection}/{record_id}", collection) from e
        return self._read(collection, snapshot)

    async def remove(self, collection: str, record_id: str) -> bool:
        doc_ref = self._collection(collection).document(record_id)
        try:
            if not (await doc_ref.get()).exists:
                return False
            await doc_ref.delete()
        except GoogleAPIError as e:
            logger.error(f"Error deleting {collection}/{record_id}: {e}")
            raise StoreError(f"Could not delete {collection}/{record_id}", collection) from e

        logger.info(f"Deleted {collection}/{record_id}")
        return True
