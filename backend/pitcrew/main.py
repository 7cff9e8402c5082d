"""
Pitcrew - robotics team dashboard API with an interactive project timeline.
"""

import asyncio
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI

from pitcrew import __version__
from pitcrew.auth import require_user
from pitcrew.config import get_settings
from pitcrew.database import init_db
from pitcrew.exceptions import register_exception_handlers
from pitcrew.logging_config import setup_logging, get_logger
from pitcrew.routes import milestones, tasks, timeline
from pitcrew.store import should_use_firestore
from pitcrew.timeline.sessions import SessionRegistry

# Initialize logging
setup_logging()
logger = get_logger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    logger.info("Starting Pitcrew API...")
    if should_use_firestore():
        logger.info("Firestore configured, skipping SQL table setup")
    else:
        await init_db()
        logger.info("Database initialized")
    idle_timeout = settings.session_idle_timeout_seconds
    app.state.sessions = SessionRegistry(idle_timeout=idle_timeout)
    sweeper = None
    if idle_timeout > 0:
        sweeper = asyncio.create_task(app.state.sessions.run_sweeper(idle_timeout / 2))
    yield
    logger.info("Shutting down Pitcrew API...")
    if sweeper is not None:
        sweeper.cancel()
        try:
            await sweeper
        except asyncio.CancelledError:
            pass
    await app.state.sessions.close_all()


app = FastAPI(
    title=settings.app_name,
    description="Robotics team dashboard API with an interactive project timeline",
    version=__version__,
    lifespan=lifespan,
)

# Register custom exception handlers
register_exception_handlers(app)

# Include routers
protected = [Depends(require_user)]
app.include_router(milestones.router, prefix="/milestones", tags=["Milestones"], dependencies=protected)
app.include_router(tasks.router, prefix="/tasks", tags=["Tasks"], dependencies=protected)
app.include_router(timeline.router, prefix="/timeline", tags=["Timeline"], dependencies=protected)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "store": "firestore" if should_use_firestore() else "sql"}
