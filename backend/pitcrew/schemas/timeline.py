from datetime import date

from pydantic import BaseModel, Field

from pitcrew.schemas.milestone import MilestoneRead
from pitcrew.schemas.task import TaskRead
from pitcrew.timeline.viewport import ZoomLevel


class SessionCreate(BaseModel):
    """Schema for opening a timeline session."""
    category: str | None = None
    zoom: ZoomLevel = ZoomLevel.WEEK
    viewport_width: float = Field(default=0, ge=0)
    poll: bool = True  # periodic background refetch


class DateChangeRequest(BaseModel):
    """Bar dragged to a new date range (end inclusive)."""
    start: date
    end: date


class ProgressChangeRequest(BaseModel):
    """Progress edge dragged to a new percentage."""
    progress: float = Field(ge=0, le=100)


class ZoomUpdate(BaseModel):
    zoom: ZoomLevel


class ViewportUpdate(BaseModel):
    width: float = Field(ge=0)


class BarRead(BaseModel):
    """A bar descriptor plus its geometry once the renderer has laid it out."""
    id: str
    label: str
    start: date
    end: date
    progress: int
    visual_class: str
    kind: str
    record_id: str
    x: float | None = None
    width: float | None = None
    row: int | None = None


class EntryRead(BaseModel):
    id: str
    kind: str
    name: str
    color: str | None = None
    task_ids: list[str]


class RowRead(BaseModel):
    kind: str
    entry_id: str
    label: str
    task_id: str | None = None
    expanded: bool = False


class TimelineView(BaseModel):
    """Everything the UI shell needs to paint the timeline."""
    session_id: str | None = None
    category: str | None = None
    zoom: ZoomLevel
    viewport_width: float
    column_width: int
    scroll_left: float
    total_width: int
    columns: list[date]
    empty: bool
    message: str | None = None
    entries: list[EntryRead]
    rows: list[RowRead]
    bars: list[BarRead]


class ClickResult(BaseModel):
    """Outcome of a bar click: which detail view to open, if any."""
    bar_id: str
    dispatched: bool
    kind: str
    task: TaskRead | None = None
    milestone: MilestoneRead | None = None


class AddTaskPrompt(BaseModel):
    """Pre-filled values for the "Add Task" form of a milestone."""
    milestone: MilestoneRead
    milestone_id: str
    category: str | None = None


class NavigationResult(BaseModel):
    moved: bool
    scroll_left: float
