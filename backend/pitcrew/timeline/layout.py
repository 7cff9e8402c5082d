"""
Bar layout engine.

Turns hierarchy entries into flat bar descriptors for the renderer:
- concrete start/end dates (display defaults for missing dates, never persisted)
- progress percentage derived from status
- visual class derived from status and priority
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Iterable

from pitcrew.models.milestone import MilestoneStatus
from pitcrew.models.task import Priority, TaskStatus
from pitcrew.schemas.milestone import MilestoneRead
from pitcrew.schemas.task import TaskRead
from pitcrew.timeline.hierarchy import HierarchyEntry

TASK_DEFAULT_DAYS = 3
MILESTONE_DEFAULT_DAYS = 7

TASK_PROGRESS = {
    TaskStatus.NOT_STARTED: 0,
    TaskStatus.IN_PROGRESS: 50,
    TaskStatus.BLOCKED: 50,  # same fill as In Progress, distinct class
    TaskStatus.COMPLETED: 100,
}

MILESTONE_PROGRESS = {
    MilestoneStatus.NOT_STARTED: 0,
    MilestoneStatus.IN_PROGRESS: 50,
    MilestoneStatus.COMPLETED: 100,
}


class BarKind(str, Enum):
    MILESTONE = "milestone"
    TASK = "task"


class VisualClass(str, Enum):
    MILESTONE = "milestone"
    COMPLETED = "completed"
    BLOCKED = "blocked"
    CRITICAL = "critical"
    HIGH = "high"
    TASK = "task"


@dataclass
class BarDescriptor:
    """
    A renderable bar.

    Mutable on purpose: drag gestures update start/end/progress in place
    before the store confirms the write.
    """
    id: str
    label: str
    start: date
    end: date
    progress: int
    visual_class: VisualClass
    kind: BarKind
    source: TaskRead | MilestoneRead

    @property
    def record_id(self) -> str:
        return self.source.id

    @property
    def is_task(self) -> bool:
        return self.kind == BarKind.TASK


def bar_id_for(kind: BarKind, record_id: str) -> str:
    """Prefix ids so task and milestone id spaces never collide."""
    return f"{kind.value}-{record_id}"


def as_day(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def resolve_dates(
    start: date | datetime | None,
    end: date | datetime | None,
    default_days: int,
    today: date,
) -> tuple[date, date]:
    """
    Resolve a record's display window at day granularity.

    Missing start -> today. Missing end -> today + default_days.
    The end never precedes the start.
    """
    resolved_start = as_day(start) if start is not None else today
    resolved_end = (
        as_day(end) if end is not None else today + timedelta(days=default_days)
    )
    if resolved_end < resolved_start:
        resolved_end = resolved_start
    return resolved_start, resolved_end


def progress_for_status(status: TaskStatus | MilestoneStatus) -> int:
    if isinstance(status, MilestoneStatus):
        return MILESTONE_PROGRESS[status]
    return TASK_PROGRESS[status]


def status_for_progress(progress: float) -> TaskStatus:
    """
    Map a dragged progress percentage back to a task status.

    Blocked cannot be recovered from progress alone.
    """
    if progress >= 100:
        return TaskStatus.COMPLETED
    if progress > 0:
        return TaskStatus.IN_PROGRESS
    return TaskStatus.NOT_STARTED


def visual_class_for(task: TaskRead) -> VisualClass:
    """First match wins: completed, blocked, critical, high, default."""
    if task.status == TaskStatus.COMPLETED:
        return VisualClass.COMPLETED
    if task.status == TaskStatus.BLOCKED:
        return VisualClass.BLOCKED
    if task.priority == Priority.CRITICAL:
        return VisualClass.CRITICAL
    if task.priority == Priority.HIGH:
        return VisualClass.HIGH
    return VisualClass.TASK


def milestone_bar(milestone: MilestoneRead, today: date) -> BarDescriptor:
    start, end = resolve_dates(
        milestone.start_date, milestone.end_date, MILESTONE_DEFAULT_DAYS, today
    )
    return BarDescriptor(
        id=bar_id_for(BarKind.MILESTONE, milestone.id),
        label=milestone.name,
        start=start,
        end=end,
        progress=progress_for_status(milestone.status),
        visual_class=VisualClass.MILESTONE,
        kind=BarKind.MILESTONE,
        source=milestone,
    )


def task_bar(task: TaskRead, today: date) -> BarDescriptor:
    start, end = resolve_dates(task.start_date, task.due_date, TASK_DEFAULT_DAYS, today)
    return BarDescriptor(
        id=bar_id_for(BarKind.TASK, task.id),
        label=task.title,
        start=start,
        end=end,
        progress=progress_for_status(task.status),
        visual_class=visual_class_for(task),
        kind=BarKind.TASK,
        source=task,
    )


def layout_bars(entries: Iterable[HierarchyEntry], today: date) -> list[BarDescriptor]:
    """
    Flatten entries into bars: each milestone bar directly followed by its
    task bars. The Unassigned group contributes task bars only.
    """
    bars: list[BarDescriptor] = []
    for entry in entries:
        if entry.is_milestone:
            bars.append(milestone_bar(entry.milestone, today))
        for task in entry.tasks:
            bars.append(task_bar(task, today))
    return bars
