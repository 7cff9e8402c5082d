"""
Task routes for the Pitcrew API.
"""

from fastapi import APIRouter, Depends, status

from pitcrew.exceptions import NotFoundError
from pitcrew.logging_config import get_logger
from pitcrew.models import Priority, TaskStatus
from pitcrew.schemas import TaskCreate, TaskUpdate, TaskRead
from pitcrew.store import TASKS, DocumentStore, get_store

logger = get_logger(__name__)

router = APIRouter()


@router.post("/", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
async def create_task(
    task_in: TaskCreate,
    store: DocumentStore = Depends(get_store),
) -> TaskRead:
    """
    Create a new task.

    Dates are optional; the timeline shows a default window until they are set.
    """
    task = await store.create(TASKS, task_in.model_dump())
    logger.info(f"Created task: id={task.id} title='{task.title}' milestone={task.milestone_id}")
    return task


@router.get("/", response_model=list[TaskRead])
async def list_tasks(
    category: str | None = None,
    team: str | None = None,
    milestone_id: str | None = None,
    assigned_to: str | None = None,
    status: TaskStatus | None = None,
    priority: Priority | None = None,
    store: DocumentStore = Depends(get_store),
) -> list[TaskRead]:
    """
    List tasks.

    Every query parameter is an optional equality filter.
    """
    filters = {
        "category": category,
        "team": team,
        "milestone_id": milestone_id,
        "assigned_to": assigned_to,
        "status": status,
        "priority": priority,
    }
    tasks = await store.query(TASKS, filters)
    logger.debug(f"Listed {len(tasks)} tasks")
    return tasks


@router.get("/{task_id}", response_model=TaskRead)
async def get_task(
    task_id: str,
    store: DocumentStore = Depends(get_store),
) -> TaskRead:
    """Get a task by ID."""
    return await store.get_or_404(TASKS, task_id)


@router.patch("/{task_id}", response_model=TaskRead)
async def update_task(
    task_id: str,
    task_in: TaskUpdate,
    store: DocumentStore = Depends(get_store),
) -> TaskRead:
    """Update a task. Only the fields sent are written."""
    update_data = task_in.model_dump(exclude_unset=True)
    logger.info(f"Updating task {task_id}: {update_data}")
    return await store.update(TASKS, task_id, update_data)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: str,
    store: DocumentStore = Depends(get_store),
) -> None:
    """Delete a task."""
    if not await store.remove(TASKS, task_id):
        raise NotFoundError("Task", task_id)
