from datetime import datetime
from enum import Enum

from sqlmodel import SQLModel, Field

from pitcrew.models.common import new_id, utcnow


class TaskStatus(str, Enum):
    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    BLOCKED = "Blocked"
    COMPLETED = "Completed"


class Priority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class Task(SQLModel, table=True):
    """
    Task document as stored by the SQL fallback store.

    Key fields:
    - start_date / due_date: optional; the timeline synthesizes a display
      window when either is missing and never writes it back
    - milestone_id: weak reference, not a foreign key (milestones may be
      deleted without touching their tasks)
    """

    __tablename__ = "tasks"

    id: str = Field(default_factory=new_id, primary_key=True)
    title: str = Field(index=True)
    description: str | None = Field(default=None)
    team: str | None = Field(default=None, index=True)
    category: str | None = Field(default=None, index=True)
    department: str | None = Field(default=None)
    subsystem: str | None = Field(default=None)
    assigned_to: str | None = Field(default=None)
    needs_mentor: bool = Field(default=False)

    status: TaskStatus = Field(default=TaskStatus.NOT_STARTED)
    priority: Priority = Field(default=Priority.MEDIUM)

    start_date: datetime | None = Field(default=None)
    due_date: datetime | None = Field(default=None)
    milestone_id: str | None = Field(default=None, index=True)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
