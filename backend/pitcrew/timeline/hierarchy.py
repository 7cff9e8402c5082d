"""
Hierarchy builder for the timeline.

Groups flat task and milestone records into a two-level tree:
- one group per milestone, in the order milestones were supplied
- one trailing "Unassigned" group for tasks without a resolvable milestone

Everything here is a pure function of its inputs.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from pitcrew.schemas.milestone import MilestoneRead
from pitcrew.schemas.task import TaskRead

UNASSIGNED_ID = "unassigned"
UNASSIGNED_NAME = "Unassigned"


class EntryKind(str, Enum):
    MILESTONE = "milestone"
    UNASSIGNED = "unassigned"


class RowKind(str, Enum):
    GROUP = "group"
    TASK = "task"
    ADD_TASK = "add_task"


@dataclass
class HierarchyEntry:
    """A milestone (or the Unassigned placeholder) with its child tasks."""
    kind: EntryKind
    milestone: MilestoneRead
    tasks: list[TaskRead] = field(default_factory=list)

    @property
    def id(self) -> str:
        return self.milestone.id

    @property
    def is_milestone(self) -> bool:
        return self.kind == EntryKind.MILESTONE


@dataclass(frozen=True)
class HierarchyRow:
    """One line of the left-hand name panel."""
    kind: RowKind
    entry_id: str
    label: str
    task: TaskRead | None = None
    expanded: bool = False


def unassigned_placeholder() -> MilestoneRead:
    return MilestoneRead(id=UNASSIGNED_ID, name=UNASSIGNED_NAME)


def filter_by_category(
    tasks: Iterable[TaskRead],
    milestones: Iterable[MilestoneRead],
    category: str | None,
) -> tuple[list[TaskRead], list[MilestoneRead]]:
    """Keep only records in ``category``; no category keeps everything."""
    if not category:
        return list(tasks), list(milestones)
    return (
        [t for t in tasks if t.category == category],
        [m for m in milestones if m.category == category],
    )


def build_hierarchy(
    tasks: Iterable[TaskRead],
    milestones: Iterable[MilestoneRead],
) -> list[HierarchyEntry]:
    """
    Build the ordered hierarchy entries.

    Every task lands in exactly one entry. A task whose ``milestone_id`` is
    empty or points at a milestone that is not loaded goes to Unassigned,
    which is only emitted when it has at least one task.
    """
    entries: list[HierarchyEntry] = []
    by_milestone: dict[str, HierarchyEntry] = {}

    for milestone in milestones:
        if milestone.id in by_milestone:
            continue
        entry = HierarchyEntry(kind=EntryKind.MILESTONE, milestone=milestone)
        by_milestone[milestone.id] = entry
        entries.append(entry)

    unassigned: list[TaskRead] = []
    for task in tasks:
        entry = by_milestone.get(task.milestone_id) if task.milestone_id else None
        if entry is None:
            unassigned.append(task)
        else:
            entry.tasks.append(task)

    if unassigned:
        entries.append(HierarchyEntry(
            kind=EntryKind.UNASSIGNED,
            milestone=unassigned_placeholder(),
            tasks=unassigned,
        ))

    return entries


def visible_rows(
    entries: Iterable[HierarchyEntry],
    expanded: set[str],
) -> list[HierarchyRow]:
    """
    Flatten entries into name-panel rows.

    Collapsed milestones show only their group row. Expanded milestones show
    their tasks followed by an "Add Task" row. Unassigned is never collapsible
    and never offers "Add Task".
    """
    rows: list[HierarchyRow] = []
    for entry in entries:
        is_open = entry.id in expanded if entry.is_milestone else True
        rows.append(HierarchyRow(
            kind=RowKind.GROUP,
            entry_id=entry.id,
            label=entry.milestone.name,
            expanded=is_open,
        ))
        if not is_open:
            continue
        for task in entry.tasks:
            rows.append(HierarchyRow(
                kind=RowKind.TASK,
                entry_id=entry.id,
                label=task.title,
                task=task,
            ))
        if entry.is_milestone:
            rows.append(HierarchyRow(
                kind=RowKind.ADD_TASK,
                entry_id=entry.id,
                label="Add Task",
            ))
    return rows
