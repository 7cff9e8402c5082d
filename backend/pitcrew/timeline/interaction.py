"""
Interaction coordinator for timeline bars.

Resolves pointer outcomes on bars into one of:
- select (open the task or milestone detail view)
- reschedule (date-range drag)
- progress change (edge drag, tasks only; written back as a status)

Drag gestures arm a short suppression window for the dragged bar:
- the trailing click the drag library fires on release is swallowed
- background refreshes inside the window keep the optimistic bar instead of
  snapping back to data that predates the write

Suppression is a time-windowed predicate evaluated on read. Nothing is
scheduled to clear it.
"""

import asyncio
import time
from dataclasses import dataclass
from datetime import date, datetime, time as dt_time, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from pitcrew.logging_config import get_logger
from pitcrew.schemas.milestone import MilestoneRead
from pitcrew.schemas.task import TaskRead
from pitcrew.store.base import MILESTONES, TASKS
from pitcrew.timeline.layout import (
    BarDescriptor,
    as_day,
    status_for_progress,
    visual_class_for,
)

logger = get_logger(__name__)

DEFAULT_WINDOW_SECONDS = 1.0
GLOBAL_KEY = "*"

# (collection, record_id, partial_fields) -> awaitable
UpdateWriter = Callable[[str, str, dict[str, Any]], Awaitable[Any]]
WriteCallback = Callable[[str, str], None]


class InteractionState(str, Enum):
    IDLE = "idle"
    SUPPRESSED = "suppressed"


class SuppressionScope(str, Enum):
    RECORD = "record"  # each bar has its own window
    GLOBAL = "global"  # any drag suppresses every bar


@dataclass
class Suppression:
    armed_at: float
    click_pending: bool = True


def _as_timestamp(day: date) -> datetime:
    return datetime.combine(day, dt_time.min, tzinfo=timezone.utc)


class InteractionCoordinator:
    """
    Drag/click state machine plus fire-and-forget persistence writes.

    States per bar (or one shared state in global scope):
        Idle --drag--> Suppressed(now + window)
        Suppressed --click--> Idle (click dropped)
        Suppressed --window elapses--> Idle
        Idle --click--> Idle (click dispatched)
    """

    def __init__(
        self,
        writer: UpdateWriter,
        *,
        window: float = DEFAULT_WINDOW_SECONDS,
        scope: SuppressionScope = SuppressionScope.RECORD,
        clock: Callable[[], float] = time.monotonic,
        on_task_click: Optional[Callable[[TaskRead], Any]] = None,
        on_milestone_click: Optional[Callable[[MilestoneRead], Any]] = None,
        on_write_complete: Optional[WriteCallback] = None,
    ):
        self._writer = writer
        self.window = window
        self.scope = SuppressionScope(scope)
        self._clock = clock
        self._on_task_click = on_task_click
        self._on_milestone_click = on_milestone_click
        self._on_write_complete = on_write_complete
        self._suppressions: dict[str, Suppression] = {}
        self._pending: set[asyncio.Task] = set()
        self._closed = False

    # ------------------------------------------------------------------
    # Suppression bookkeeping
    # ------------------------------------------------------------------

    def _key(self, bar_id: str) -> str:
        return GLOBAL_KEY if self.scope == SuppressionScope.GLOBAL else bar_id

    def _active(self, bar_id: str) -> Suppression | None:
        key = self._key(bar_id)
        entry = self._suppressions.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.armed_at + self.window:
            del self._suppressions[key]
            return None
        return entry

    def arm(self, bar_id: str) -> None:
        """Enter Suppressed for this bar, restarting the window."""
        self._suppressions[self._key(bar_id)] = Suppression(armed_at=self._clock())

    def state(self, bar_id: str) -> InteractionState:
        entry = self._active(bar_id)
        if entry is not None and entry.click_pending:
            return InteractionState.SUPPRESSED
        return InteractionState.IDLE

    def is_refresh_suppressed(self, bar_id: str) -> bool:
        return self._active(bar_id) is not None

    @property
    def pending_writes(self) -> int:
        return len(self._pending)

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Gestures
    # ------------------------------------------------------------------

    def handle_click(self, bar: BarDescriptor) -> TaskRead | MilestoneRead | None:
        """
        Dispatch a click, or drop it when it trails a drag on the same bar.

        Returns the record that was opened, or None when the click was
        swallowed. A genuine fast follow-up click inside the window is
        indistinguishable from the trailing one and is dropped too.
        """
        entry = self._active(bar.id)
        if entry is not None and entry.click_pending:
            entry.click_pending = False
            logger.debug(f"Swallowed trailing click on {bar.id}")
            return None

        if bar.is_task:
            if self._on_task_click:
                self._on_task_click(bar.source)
        elif self._on_milestone_click:
            self._on_milestone_click(bar.source)
        return bar.source

    def handle_date_change(
        self,
        bar: BarDescriptor,
        start: date | datetime,
        end: date | datetime,
    ) -> asyncio.Task | None:
        """
        Reschedule a bar: optimistic local move plus an update to the store.

        Tasks write start_date/due_date, milestones write start_date/end_date.
        """
        self.arm(bar.id)

        new_start, new_end = as_day(start), as_day(end)
        end_field = "due_date" if bar.is_task else "end_date"
        fields = {
            "start_date": _as_timestamp(new_start),
            end_field: _as_timestamp(new_end),
        }

        bar.start = new_start
        bar.end = new_end
        bar.source = bar.source.model_copy(update=fields)

        collection = TASKS if bar.is_task else MILESTONES
        return self._fire(collection, bar.record_id, fields)

    def handle_progress_change(
        self,
        bar: BarDescriptor,
        progress: float,
    ) -> asyncio.Task | None:
        """
        Apply an edge drag. Only tasks accept progress; it is written back
        as a status. Milestone drags still arm suppression.
        """
        self.arm(bar.id)

        if not bar.is_task:
            logger.debug(f"Ignoring progress change on milestone bar {bar.id}")
            return None

        clamped = max(0.0, min(100.0, float(progress)))
        new_status = status_for_progress(clamped)
        shown = round(clamped)
        if 0 < clamped < 100:
            # A partial drag never displays as empty or full
            shown = min(99, max(1, shown))
        bar.source = bar.source.model_copy(update={"status": new_status})
        bar.progress = shown
        bar.visual_class = visual_class_for(bar.source)

        return self._fire(TASKS, bar.record_id, {"status": new_status})

    # ------------------------------------------------------------------
    # Refresh filtering
    # ------------------------------------------------------------------

    def reconcile(
        self,
        current: list[BarDescriptor],
        incoming: list[BarDescriptor],
    ) -> list[BarDescriptor] | None:
        """
        Decide what a background refresh may show.

        Global scope: None (skip this cycle entirely) while any drag is inside
        its window. Record scope: incoming bars, except that every suppressed
        bar keeps its currently displayed descriptor.
        """
        if self.scope == SuppressionScope.GLOBAL:
            if self.is_refresh_suppressed(GLOBAL_KEY):
                logger.debug("Refresh skipped: drag suppression active")
                return None
            return list(incoming)

        displayed = {bar.id: bar for bar in current}
        merged = []
        for bar in incoming:
            kept = displayed.get(bar.id)
            if kept is not None and self.is_refresh_suppressed(bar.id):
                logger.debug(f"Refresh kept optimistic bar {bar.id}")
                merged.append(kept)
            else:
                merged.append(bar)
        return merged

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _fire(self, collection: str, record_id: str, fields: dict[str, Any]) -> asyncio.Task | None:
        if self._closed:
            logger.warning(f"Coordinator closed, not writing {collection}/{record_id}")
            return None
        task = asyncio.create_task(self._persist(collection, record_id, fields))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _persist(self, collection: str, record_id: str, fields: dict[str, Any]) -> None:
        try:
            await self._writer(collection, record_id, fields)
        except Exception as e:
            # No retry: the bar reverts on the next unsuppressed refresh
            logger.error(f"Failed to update {collection}/{record_id}: {e}")
            return

        if self._closed:
            logger.debug(f"Discarding write result for {collection}/{record_id} after close")
            return

        logger.info(f"Updated {collection}/{record_id}: {sorted(fields)}")
        if self._on_write_complete:
            self._on_write_complete(collection, record_id)

    async def drain(self) -> None:
        """Wait for in-flight writes to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def close(self) -> None:
        """
        Detach from the owner. In-flight writes still complete, but their
        results no longer reach the owner.
        """
        self._closed = True
        self._on_write_complete = None
