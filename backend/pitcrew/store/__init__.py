"""
Document store selection.

Firestore is used when it is enabled and a Firebase project is configured;
otherwise the SQL store is the local fallback.
"""

from pitcrew.config import get_settings
from pitcrew.firebase import is_firebase_configured
from pitcrew.logging_config import get_logger
from pitcrew.store.base import (
    COLLECTIONS,
    MILESTONES,
    TASKS,
    DocumentStore,
)
from pitcrew.store.sql import SqlDocumentStore

logger = get_logger(__name__)

_store: DocumentStore | None = None


def should_use_firestore() -> bool:
    return get_settings().use_firestore and is_firebase_configured()


def build_store() -> DocumentStore:
    if should_use_firestore():
        from pitcrew.store.firestore import FirestoreDocumentStore

        logger.info("Using Firestore document store")
        return FirestoreDocumentStore()

    logger.info("Using SQL document store")
    return SqlDocumentStore()


def get_store() -> DocumentStore:
    """Dependency returning the process-wide store."""
    global _store
    if _store is None:
        _store = build_store()
    return _store


__all__ = [
    "COLLECTIONS",
    "MILESTONES",
    "TASKS",
    "DocumentStore",
    "SqlDocumentStore",
    "build_store",
    "get_store",
    "should_use_firestore",
]
