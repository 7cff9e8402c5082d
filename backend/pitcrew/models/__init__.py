from pitcrew.models.milestone import Milestone, MilestoneStatus
from pitcrew.models.task import Priority, Task, TaskStatus

__all__ = [
    "Milestone",
    "MilestoneStatus",
    "Priority",
    "Task",
    "TaskStatus",
]
