from datetime import datetime
from enum import Enum

from sqlmodel import SQLModel, Field

from pitcrew.models.common import new_id, utcnow


class MilestoneStatus(str, Enum):
    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


class Milestone(SQLModel, table=True):
    """Milestone document - groups tasks on the timeline."""

    __tablename__ = "milestones"

    id: str = Field(default_factory=new_id, primary_key=True)
    name: str = Field(index=True)
    description: str | None = Field(default=None)
    category: str | None = Field(default=None, index=True)
    color: str | None = Field(default=None)
    status: MilestoneStatus = Field(default=MilestoneStatus.NOT_STARTED)

    start_date: datetime | None = Field(default=None)
    end_date: datetime | None = Field(default=None)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
