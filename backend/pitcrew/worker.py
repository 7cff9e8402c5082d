"""
ARQ Worker for background task processing.

This worker handles:
- persist_update: writes a drag-triggered partial update to the store

Drag writes go through the queue when write_backend = "queue"; otherwise they
run in-process on the API's event loop.

Usage:
    arq pitcrew.worker.WorkerSettings
"""

from typing import Any

from arq import create_pool
from arq.connections import RedisSettings, ArqRedis

from pitcrew.config import get_settings
from pitcrew.logging_config import setup_logging, get_logger
from pitcrew.store import DocumentStore, get_store
from pitcrew.timeline.interaction import UpdateWriter

logger = get_logger(__name__)

settings = get_settings()


def parse_redis_url(url: str) -> RedisSettings:
    """Parse a redis URL into RedisSettings."""
    return RedisSettings.from_dsn(url)


async def persist_update(ctx: dict, collection: str, record_id: str, fields: dict[str, Any]) -> str:
    """
    ARQ job: apply a partial update to one record.

    Failures are logged and not retried; the timeline reverts on its next
    unsuppressed refresh.
    """
    store: DocumentStore = ctx.get("store") or get_store()
    try:
        await store.update(collection, record_id, fields)
    except Exception as e:
        logger.error(f"Failed to update {collection}/{record_id}: {e}")
        return f"Failed: {e}"
    return f"Updated {collection}/{record_id}"


async def startup(ctx: dict) -> None:
    """Worker startup - initialize logging and the store."""
    setup_logging()
    logger.info("ARQ Worker starting up...")
    logger.info(f"Redis: {settings.redis_url}")
    ctx["store"] = get_store()


async def shutdown(ctx: dict) -> None:
    """Worker shutdown - cleanup."""
    logger.info("ARQ Worker shutting down...")


class WorkerSettings:
    """ARQ Worker configuration."""

    functions = [persist_update]
    on_startup = startup
    on_shutdown = shutdown
    redis_settings = parse_redis_url(settings.redis_url)
    max_jobs = 10
    job_timeout = 60
    max_tries = 1  # no automatic retry


# Redis pool for enqueuing jobs from the API
_arq_pool: ArqRedis | None = None


async def get_arq_pool() -> ArqRedis:
    """Get or create the ARQ Redis pool for enqueuing jobs."""
    global _arq_pool
    if _arq_pool is None:
        logger.debug("Creating ARQ Redis pool")
        _arq_pool = await create_pool(parse_redis_url(settings.redis_url))
    return _arq_pool


async def enqueue_update(collection: str, record_id: str, fields: dict[str, Any]) -> None:
    """Enqueue a persist_update job."""
    pool = await get_arq_pool()
    logger.debug(f"Enqueuing update job: {collection}/{record_id} fields={sorted(fields)}")
    await pool.enqueue_job("persist_update", collection, record_id, fields)


def update_writer(store: DocumentStore) -> UpdateWriter:
    """Writer used by timeline sessions for drag-triggered updates."""
    if settings.write_backend == "queue":
        return enqueue_update
    return store.update
