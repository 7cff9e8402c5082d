from pitcrew.schemas.task import TaskCreate, TaskUpdate, TaskRead
from pitcrew.schemas.milestone import MilestoneCreate, MilestoneUpdate, MilestoneRead
from pitcrew.schemas.timeline import (
    AddTaskPrompt,
    BarRead,
    ClickResult,
    DateChangeRequest,
    EntryRead,
    NavigationResult,
    ProgressChangeRequest,
    RowRead,
    SessionCreate,
    TimelineView,
    ViewportUpdate,
    ZoomUpdate,
)

__all__ = [
    "AddTaskPrompt",
    "TaskCreate",
    "TaskUpdate",
    "TaskRead",
    "MilestoneCreate",
    "MilestoneUpdate",
    "MilestoneRead",
    "BarRead",
    "ClickResult",
    "DateChangeRequest",
    "EntryRead",
    "NavigationResult",
    "ProgressChangeRequest",
    "RowRead",
    "SessionCreate",
    "TimelineView",
    "ViewportUpdate",
    "ZoomUpdate",
]
