from datetime import datetime

from pydantic import BaseModel

from pitcrew.models.milestone import MilestoneStatus


class MilestoneCreate(BaseModel):
    """Schema for creating a new milestone."""
    name: str
    description: str | None = None
    category: str | None = None
    color: str | None = None
    status: MilestoneStatus = MilestoneStatus.NOT_STARTED
    start_date: datetime | None = None
    end_date: datetime | None = None


class MilestoneUpdate(BaseModel):
    """Schema for a partial milestone update."""
    name: str | None = None
    description: str | None = None
    category: str | None = None
    color: str | None = None
    status: MilestoneStatus | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None


class MilestoneRead(BaseModel):
    """Schema for reading a milestone."""
    id: str
    name: str = ""
    description: str | None = None
    category: str | None = None
    color: str | None = None
    status: MilestoneStatus = MilestoneStatus.NOT_STARTED
    start_date: datetime | None = None
    end_date: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}
