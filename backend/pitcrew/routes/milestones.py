"""
Milestone routes for the Pitcrew API.
"""

from fastapi import APIRouter, Depends, status

from pitcrew.exceptions import NotFoundError
from pitcrew.logging_config import get_logger
from pitcrew.models import MilestoneStatus
from pitcrew.schemas import MilestoneCreate, MilestoneUpdate, MilestoneRead
from pitcrew.store import MILESTONES, DocumentStore, get_store

logger = get_logger(__name__)

router = APIRouter()


@router.post("/", response_model=MilestoneRead, status_code=status.HTTP_201_CREATED)
async def create_milestone(
    milestone_in: MilestoneCreate,
    store: DocumentStore = Depends(get_store),
) -> MilestoneRead:
    """Create a new milestone."""
    milestone = await store.create(MILESTONES, milestone_in.model_dump())
    logger.info(f"Created milestone: id={milestone.id} name='{milestone.name}'")
    return milestone


@router.get("/", response_model=list[MilestoneRead])
async def list_milestones(
    category: str | None = None,
    status: MilestoneStatus | None = None,
    store: DocumentStore = Depends(get_store),
) -> list[MilestoneRead]:
    """List milestones, optionally filtered by category and status."""
    milestones = await store.query(MILESTONES, {"category": category, "status": status})
    logger.debug(f"Listed {len(milestones)} milestones")
    return milestones


@router.get("/{milestone_id}", response_model=MilestoneRead)
async def get_milestone(
    milestone_id: str,
    store: DocumentStore = Depends(get_store),
) -> MilestoneRead:
    """Get a milestone by ID."""
    return await store.get_or_404(MILESTONES, milestone_id)


@router.patch("/{milestone_id}", response_model=MilestoneRead)
async def update_milestone(
    milestone_id: str,
    milestone_in: MilestoneUpdate,
    store: DocumentStore = Depends(get_store),
) -> MilestoneRead:
    """Update a milestone."""
    update_data = milestone_in.model_dump(exclude_unset=True)
    logger.info(f"Updating milestone {milestone_id}: {update_data}")
    return await store.update(MILESTONES, milestone_id, update_data)


@router.delete("/{milestone_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_milestone(
    milestone_id: str,
    store: DocumentStore = Depends(get_store),
) -> None:
    """
    Delete a milestone.

    Its tasks are left alone; the timeline shows them under Unassigned.
    """
    if not await store.remove(MILESTONES, milestone_id):
        raise NotFoundError("Milestone", milestone_id)
    logger.info(f"Deleted milestone {milestone_id}")
