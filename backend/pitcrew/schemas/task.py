from datetime import datetime

from pydantic import BaseModel

from pitcrew.models.task import Priority, TaskStatus


class TaskCreate(BaseModel):
    """Schema for creating a new task."""
    title: str
    description: str | None = None
    team: str | None = None
    category: str | None = None
    department: str | None = None
    subsystem: str | None = None
    assigned_to: str | None = None
    needs_mentor: bool = False
    status: TaskStatus = TaskStatus.NOT_STARTED
    priority: Priority = Priority.MEDIUM
    start_date: datetime | None = None
    due_date: datetime | None = None
    milestone_id: str | None = None


class TaskUpdate(BaseModel):
    """Schema for a partial task update - only set fields are written."""
    title: str | None = None
    description: str | None = None
    team: str | None = None
    category: str | None = None
    department: str | None = None
    subsystem: str | None = None
    assigned_to: str | None = None
    needs_mentor: bool | None = None
    status: TaskStatus | None = None
    priority: Priority | None = None
    start_date: datetime | None = None
    due_date: datetime | None = None
    milestone_id: str | None = None


class TaskRead(BaseModel):
    """Schema for reading a task."""
    id: str
    title: str = ""
    description: str | None = None
    team: str | None = None
    category: str | None = None
    department: str | None = None
    subsystem: str | None = None
    assigned_to: str | None = None
    needs_mentor: bool = False
    status: TaskStatus = TaskStatus.NOT_STARTED
    priority: Priority = Priority.MEDIUM
    start_date: datetime | None = None
    due_date: datetime | None = None
    milestone_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}
