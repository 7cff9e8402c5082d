"""
Timeline scheduler - the component that ties the timeline together.

Holds the state of one open timeline view:
- the displayed hierarchy entries and bars
- the interaction coordinator (drag/click, suppression, writes)
- the viewport controller (zoom, width, scroll)
- the renderer (column grid and bar geometry)
- which milestones are expanded in the name panel
"""

import asyncio
from datetime import date, datetime
from typing import Any, Callable, Optional

from pitcrew.exceptions import NotFoundError, ValidationError
from pitcrew.logging_config import get_logger
from pitcrew.schemas.milestone import MilestoneRead
from pitcrew.schemas.task import TaskRead
from pitcrew.schemas.timeline import BarRead, EntryRead, RowRead, TimelineView
from pitcrew.store.base import MILESTONES, TASKS, DocumentStore
from pitcrew.timeline.hierarchy import (
    HierarchyEntry,
    HierarchyRow,
    build_hierarchy,
    filter_by_category,
    visible_rows,
)
from pitcrew.timeline.interaction import (
    DEFAULT_WINDOW_SECONDS,
    InteractionCoordinator,
    SuppressionScope,
    UpdateWriter,
)
from pitcrew.timeline.layout import BarDescriptor, as_day, layout_bars
from pitcrew.timeline.renderer import RenderOptions, TimelineRenderer
from pitcrew.timeline.viewport import ViewportController, ZoomLevel

logger = get_logger(__name__)

EMPTY_MESSAGE = "No tasks or milestones to display. Create a milestone and add tasks with dates."


class TimelineScheduler:
    """
    One timeline view.

    Data flows store -> hierarchy -> bars -> renderer. Drag gestures flow
    back through the coordinator, which writes to the store and asks for a
    refetch once the write lands.
    """

    def __init__(
        self,
        store: DocumentStore,
        *,
        category: str | None = None,
        zoom: ZoomLevel = ZoomLevel.WEEK,
        viewport_width: float = 0,
        writer: Optional[UpdateWriter] = None,
        window: float = DEFAULT_WINDOW_SECONDS,
        scope: SuppressionScope = SuppressionScope.RECORD,
        clock: Optional[Callable[[], float]] = None,
        today: Callable[[], date] = date.today,
        renderer: Optional[TimelineRenderer] = None,
        on_task_click: Optional[Callable[[TaskRead], Any]] = None,
        on_milestone_click: Optional[Callable[[MilestoneRead], Any]] = None,
        on_add_task_requested: Optional[Callable[[MilestoneRead], Any]] = None,
    ):
        self.store = store
        self.category = category or None
        self._today = today
        self._on_add_task_requested = on_add_task_requested

        coordinator_options = {"clock": clock} if clock else {}
        self.coordinator = InteractionCoordinator(
            writer or store.update,
            window=window,
            scope=scope,
            on_task_click=on_task_click,
            on_milestone_click=on_milestone_click,
            on_write_complete=self._on_write_complete,
            **coordinator_options,
        )
        self.viewport = ViewportController(zoom=zoom, width=viewport_width)
        self.renderer = renderer or TimelineRenderer()

        self.entries: list[HierarchyEntry] = []
        self.bars: list[BarDescriptor] = []
        self.expanded: set[str] = set()
        self._known_milestones: set[str] = set()
        self.loaded = False

        self._closed = False
        self._stop = asyncio.Event()
        self._poll_task: asyncio.Task | None = None
        self._refresh_tasks: set[asyncio.Task] = set()
        self._scrolled_initially = False

    # ------------------------------------------------------------------
    # Data
    # ------------------------------------------------------------------

    @property
    def empty(self) -> bool:
        return not self.entries

    @property
    def closed(self) -> bool:
        return self._closed

    async def _fetch(self) -> tuple[list[TaskRead], list[MilestoneRead]]:
        tasks, milestones = await asyncio.gather(
            self.store.get_all(TASKS),
            self.store.get_all(MILESTONES),
        )
        return tasks, milestones

    async def load(self) -> bool:
        """Initial fetch. Store failures propagate to the caller."""
        tasks, milestones = await self._fetch()
        return self.apply_data(tasks, milestones)

    async def refresh(self) -> bool:
        """
        Background refetch. Failures are logged; a result that arrives after
        close() is discarded.
        """
        try:
            tasks, milestones = await self._fetch()
        except Exception as e:
            logger.warning(f"Timeline refresh failed: {e}")
            return False

        if self._closed:
            logger.debug("Timeline closed, discarding refresh result")
            return False
        return self.apply_data(tasks, milestones)

    def apply_data(self, tasks: list[TaskRead], milestones: list[MilestoneRead]) -> bool:
        """
        Rebuild hierarchy and bars from fresh records.

        Returns False when the coordinator suppressed the whole cycle.
        """
        tasks, milestones = filter_by_category(tasks, milestones, self.category)
        self.entries = build_hierarchy(tasks, milestones)
        self._track_expanded(milestones)

        incoming = layout_bars(self.entries, self._today())
        if self.loaded:
            bars = self.coordinator.reconcile(self.bars, incoming)
        else:
            bars = incoming
        self.loaded = True

        if bars is None:
            # Rows already show the fresh entries; bars catch up next unsuppressed cycle
            return False
        self.bars = bars
        self._render()
        return True

    def _track_expanded(self, milestones: list[MilestoneRead]) -> None:
        # New milestones start expanded; a collapsed one stays collapsed
        for milestone in milestones:
            if milestone.id not in self._known_milestones:
                self._known_milestones.add(milestone.id)
                self.expanded.add(milestone.id)

    def _on_write_complete(self, collection: str, record_id: str) -> None:
        if self._closed:
            return
        task = asyncio.create_task(self.refresh())
        self._refresh_tasks.add(task)
        task.add_done_callback(self._refresh_tasks.discard)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _options(self) -> RenderOptions:
        return RenderOptions(zoom=self.viewport.zoom, column_width=self.viewport.column_width)

    def _render(self, rebuild: bool = False) -> None:
        if not self.bars:
            self.renderer.teardown()
            return
        if not self.viewport.measured:
            return  # nothing to lay out against yet

        if rebuild or not self.renderer.constructed or len(self.renderer.bars) != len(self.bars):
            self.renderer.construct(self.bars, self._options())
            if not self._scrolled_initially:
                self._scrolled_initially = self.viewport.scroll_to_first_item(self.renderer, self.bars)
        else:
            self.renderer.refresh(self.bars)

    def rows(self) -> list[HierarchyRow]:
        return visible_rows(self.entries, self.expanded)

    def snapshot(self, session_id: str | None = None) -> TimelineView:
        """Serializable view for the UI shell."""
        bars = []
        for bar in self.bars:
            geometry = self.renderer.geometry(bar.id)
            bars.append(BarRead(
                id=bar.id,
                label=bar.label,
                start=bar.start,
                end=bar.end,
                progress=bar.progress,
                visual_class=bar.visual_class.value,
                kind=bar.kind.value,
                record_id=bar.record_id,
                x=geometry.x if geometry else None,
                width=geometry.width if geometry else None,
                row=geometry.row if geometry else None,
            ))

        return TimelineView(
            session_id=session_id,
            category=self.category,
            zoom=self.viewport.zoom,
            viewport_width=self.viewport.width,
            column_width=self.viewport.column_width,
            scroll_left=self.viewport.scroll_left,
            total_width=self.renderer.total_width,
            columns=list(self.renderer.columns),
            empty=self.empty,
            message=EMPTY_MESSAGE if self.empty else None,
            entries=[
                EntryRead(
                    id=entry.id,
                    kind=entry.kind.value,
                    name=entry.milestone.name,
                    color=entry.milestone.color,
                    task_ids=[task.id for task in entry.tasks],
                )
                for entry in self.entries
            ],
            rows=[
                RowRead(
                    kind=row.kind.value,
                    entry_id=row.entry_id,
                    label=row.label,
                    task_id=row.task.id if row.task else None,
                    expanded=row.expanded,
                )
                for row in self.rows()
            ],
            bars=bars,
        )

    # ------------------------------------------------------------------
    # Gestures
    # ------------------------------------------------------------------

    def bar(self, bar_id: str) -> BarDescriptor:
        for bar in self.bars:
            if bar.id == bar_id:
                return bar
        raise NotFoundError("Bar", bar_id)

    def click(self, bar_id: str) -> TaskRead | MilestoneRead | None:
        return self.coordinator.handle_click(self.bar(bar_id))

    def drag_dates(self, bar_id: str, start: date | datetime, end: date | datetime) -> BarDescriptor:
        if as_day(end) < as_day(start):
            raise ValidationError("End date must not precede start date")
        bar = self.bar(bar_id)
        self.coordinator.handle_date_change(bar, start, end)
        self._render()
        return bar

    def drag_progress(self, bar_id: str, progress: float) -> BarDescriptor:
        bar = self.bar(bar_id)
        self.coordinator.handle_progress_change(bar, progress)
        self._render()
        return bar

    def _milestone_entry(self, milestone_id: str) -> HierarchyEntry:
        for entry in self.entries:
            if entry.is_milestone and entry.id == milestone_id:
                return entry
        raise NotFoundError("Milestone", milestone_id)

    def toggle_milestone(self, milestone_id: str) -> bool:
        """Collapse or expand a milestone group. Returns the new state."""
        self._milestone_entry(milestone_id)
        if milestone_id in self.expanded:
            self.expanded.discard(milestone_id)
            return False
        self.expanded.add(milestone_id)
        return True

    def request_add_task(self, milestone_id: str) -> MilestoneRead:
        milestone = self._milestone_entry(milestone_id).milestone
        if self._on_add_task_requested:
            self._on_add_task_requested(milestone)
        return milestone

    # ------------------------------------------------------------------
    # Viewport
    # ------------------------------------------------------------------

    def set_zoom(self, zoom: ZoomLevel) -> None:
        if self.viewport.set_zoom(zoom):
            self._render(rebuild=True)

    def resize(self, width: float) -> None:
        if self.viewport.resize(width) or not self.renderer.constructed:
            self._render(rebuild=True)

    def scroll_to_today(self) -> bool:
        return self.viewport.scroll_to_today(self.renderer, self._today())

    def scroll_to_first_item(self) -> bool:
        return self.viewport.scroll_to_first_item(self.renderer, self.bars)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start_polling(self, interval: float) -> None:
        if interval <= 0 or self._poll_task is not None:
            return
        self._poll_task = asyncio.create_task(self._poll(interval))

    async def _poll(self, interval: float) -> None:
        while not self._stop.is_set():
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=interval)
                break
            except asyncio.TimeoutError:
                pass
            await self.refresh()

    async def drain(self) -> None:
        """Wait for in-flight writes and the refetches they triggered."""
        await self.coordinator.drain()
        if self._refresh_tasks:
            await asyncio.gather(*list(self._refresh_tasks), return_exceptions=True)

    async def close(self) -> None:
        """
        Tear down. In-flight writes still complete; their results and any
        in-flight refetch results are discarded.
        """
        self._closed = True
        self._stop.set()
        self.coordinator.close()
        self.renderer.teardown()
        if self._poll_task is not None:
            await self._poll_task
            self._poll_task = None
