"""
Timeline routes for the Pitcrew API.

A UI shell opens a session, then posts pointer outcomes (clicks, drag
releases, toolbar actions, resizes) and gets back the updated view.
"""

from fastapi import APIRouter, Depends, Request, status

from pitcrew.config import get_settings
from pitcrew.logging_config import get_logger
from pitcrew.schemas import (
    AddTaskPrompt,
    ClickResult,
    DateChangeRequest,
    NavigationResult,
    ProgressChangeRequest,
    SessionCreate,
    TimelineView,
    ViewportUpdate,
    ZoomUpdate,
)
from pitcrew.store import DocumentStore, get_store
from pitcrew.timeline.interaction import SuppressionScope
from pitcrew.timeline.scheduler import TimelineScheduler
from pitcrew.timeline.sessions import SessionRegistry
from pitcrew.timeline.viewport import ZoomLevel
from pitcrew.worker import update_writer

logger = get_logger(__name__)

router = APIRouter()


def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.sessions


def build_scheduler(
    store: DocumentStore,
    category: str | None,
    zoom: ZoomLevel,
    viewport_width: float,
) -> TimelineScheduler:
    settings = get_settings()
    return TimelineScheduler(
        store,
        category=category,
        zoom=zoom,
        viewport_width=viewport_width,
        writer=update_writer(store),
        window=settings.suppression_window_seconds,
        scope=SuppressionScope(settings.suppression_scope),
    )


@router.get("", response_model=TimelineView)
async def render_timeline(
    category: str | None = None,
    zoom: ZoomLevel = ZoomLevel.WEEK,
    viewport_width: float = 0,
    store: DocumentStore = Depends(get_store),
) -> TimelineView:
    """One-shot render without opening a session."""
    scheduler = build_scheduler(store, category, zoom, viewport_width)
    try:
        await scheduler.load()
        return scheduler.snapshot()
    finally:
        await scheduler.close()


@router.post("/sessions", response_model=TimelineView, status_code=status.HTTP_201_CREATED)
async def open_session(
    session_in: SessionCreate,
    store: DocumentStore = Depends(get_store),
    registry: SessionRegistry = Depends(get_registry),
) -> TimelineView:
    """
    Open a timeline session.

    The initial fetch must succeed; a store failure is returned to the caller
    and no session is created.
    """
    scheduler = build_scheduler(
        store, session_in.category, session_in.zoom, session_in.viewport_width
    )
    await scheduler.load()

    session_id = await registry.open(scheduler)
    if session_in.poll:
        scheduler.start_polling(get_settings().refresh_interval_seconds)
    return scheduler.snapshot(session_id)


@router.get("/sessions/{session_id}", response_model=TimelineView)
async def get_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> TimelineView:
    return registry.get(session_id).snapshot(session_id)


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> None:
    await registry.close(session_id)


@router.post("/sessions/{session_id}/refresh", response_model=TimelineView)
async def refresh_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> TimelineView:
    """Refetch now. Bars inside a drag's suppression window keep their position."""
    scheduler = registry.get(session_id)
    await scheduler.refresh()
    return scheduler.snapshot(session_id)


@router.post("/sessions/{session_id}/bars/{bar_id}/click", response_model=ClickResult)
async def click_bar(
    session_id: str,
    bar_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> ClickResult:
    """
    Click on a bar.

    A click that trails a drag on the same bar is dropped (dispatched=False).
    """
    scheduler = registry.get(session_id)
    bar = scheduler.bar(bar_id)
    record = scheduler.click(bar_id)

    result = ClickResult(bar_id=bar_id, dispatched=record is not None, kind=bar.kind.value)
    if record is not None:
        if bar.is_task:
            result.task = record
        else:
            result.milestone = record
    return result


@router.post("/sessions/{session_id}/bars/{bar_id}/dates", response_model=TimelineView)
async def change_dates(
    session_id: str,
    bar_id: str,
    change: DateChangeRequest,
    registry: SessionRegistry = Depends(get_registry),
) -> TimelineView:
    """Drag release of a date range. The write happens in the background."""
    scheduler = registry.get(session_id)
    scheduler.drag_dates(bar_id, change.start, change.end)
    logger.debug(f"Session {session_id}: {bar_id} moved to {change.start}..{change.end}")
    return scheduler.snapshot(session_id)


@router.post("/sessions/{session_id}/bars/{bar_id}/progress", response_model=TimelineView)
async def change_progress(
    session_id: str,
    bar_id: str,
    change: ProgressChangeRequest,
    registry: SessionRegistry = Depends(get_registry),
) -> TimelineView:
    """Drag release of a progress edge. Tasks only; written as a status."""
    scheduler = registry.get(session_id)
    scheduler.drag_progress(bar_id, change.progress)
    return scheduler.snapshot(session_id)


@router.post("/sessions/{session_id}/milestones/{milestone_id}/toggle", response_model=TimelineView)
async def toggle_milestone(
    session_id: str,
    milestone_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> TimelineView:
    scheduler = registry.get(session_id)
    scheduler.toggle_milestone(milestone_id)
    return scheduler.snapshot(session_id)


@router.post("/sessions/{session_id}/milestones/{milestone_id}/add-task", response_model=AddTaskPrompt)
async def request_add_task(
    session_id: str,
    milestone_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> AddTaskPrompt:
    """Values to pre-fill the task form with when "Add Task" is chosen."""
    scheduler = registry.get(session_id)
    milestone = scheduler.request_add_task(milestone_id)
    return AddTaskPrompt(
        milestone=milestone,
        milestone_id=milestone.id,
        category=milestone.category or scheduler.category,
    )


@router.put("/sessions/{session_id}/zoom", response_model=TimelineView)
async def set_zoom(
    session_id: str,
    update: ZoomUpdate,
    registry: SessionRegistry = Depends(get_registry),
) -> TimelineView:
    scheduler = registry.get(session_id)
    scheduler.set_zoom(update.zoom)
    return scheduler.snapshot(session_id)


@router.put("/sessions/{session_id}/viewport", response_model=TimelineView)
async def resize_viewport(
    session_id: str,
    update: ViewportUpdate,
    registry: SessionRegistry = Depends(get_registry),
) -> TimelineView:
    scheduler = registry.get(session_id)
    scheduler.resize(update.width)
    return scheduler.snapshot(session_id)


@router.post("/sessions/{session_id}/navigate/today", response_model=NavigationResult)
async def navigate_today(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> NavigationResult:
    scheduler = registry.get(session_id)
    moved = scheduler.scroll_to_today()
    return NavigationResult(moved=moved, scroll_left=scheduler.viewport.scroll_left)


@router.post("/sessions/{session_id}/navigate/first", response_model=NavigationResult)
async def navigate_first(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> NavigationResult:
    scheduler = registry.get(session_id)
    moved = scheduler.scroll_to_first_item()
    return NavigationResult(moved=moved, scroll_left=scheduler.viewport.scroll_left)
