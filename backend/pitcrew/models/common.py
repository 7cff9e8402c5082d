import uuid
from datetime import datetime, timezone


def new_id() -> str:
    """Opaque document id, same shape for SQL rows and local fallbacks."""
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
