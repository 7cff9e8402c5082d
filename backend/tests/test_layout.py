"""
Bar layout tests: date defaults, progress mapping and visual classes.
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from pitcrew.models import MilestoneStatus, Priority, TaskStatus
from pitcrew.timeline.hierarchy import build_hierarchy
from pitcrew.timeline.layout import (
    BarKind,
    VisualClass,
    layout_bars,
    milestone_bar,
    progress_for_status,
    resolve_dates,
    status_for_progress,
    task_bar,
)


class TestDateResolution:

    def test_present_dates_are_truncated_to_days(self, make_task, today):
        task = make_task(
            "t1",
            start_date=datetime(2024, 1, 1, 17, 45, tzinfo=timezone.utc),
            due_date=datetime(2024, 1, 5, 8, 0, tzinfo=timezone.utc),
        )

        bar = task_bar(task, today)

        assert bar.start == date(2024, 1, 1)
        assert bar.end == date(2024, 1, 5)

    def test_task_without_dates_uses_three_day_window(self, make_task, today):
        bar = task_bar(make_task("t1"), today)

        assert bar.start == today
        assert bar.end == today + timedelta(days=3)

    def test_milestone_without_dates_uses_seven_day_window(self, make_milestone, today):
        bar = milestone_bar(make_milestone("m1"), today)

        assert bar.start == today
        assert bar.end == today + timedelta(days=7)

    def test_defaults_follow_the_clock_not_a_previous_render(self, make_task, today):
        task = make_task("t1")
        later = today + timedelta(days=10)

        first = task_bar(task, today)
        second = task_bar(task, later)

        assert first.start == today
        assert second.start == later
        assert second.end == later + timedelta(days=3)
        # Defaults are display-only
        assert task.start_date is None and task.due_date is None

    def test_only_start_present(self, today):
        start, end = resolve_dates(date(2024, 3, 12), None, 3, today)

        assert start == date(2024, 3, 12)
        assert end == today + timedelta(days=3)

    def test_end_never_precedes_start(self, today):
        # Start far in the future, end defaulted from today
        start, end = resolve_dates(date(2025, 1, 1), None, 3, today)

        assert start == end == date(2025, 1, 1)


class TestProgressMapping:

    @pytest.mark.parametrize("status,expected", [
        (TaskStatus.NOT_STARTED, 0),
        (TaskStatus.IN_PROGRESS, 50),
        (TaskStatus.BLOCKED, 50),
        (TaskStatus.COMPLETED, 100),
    ])
    def test_every_task_status_has_a_percentage(self, status, expected):
        assert progress_for_status(status) == expected

    def test_milestone_statuses(self):
        assert progress_for_status(MilestoneStatus.NOT_STARTED) == 0
        assert progress_for_status(MilestoneStatus.IN_PROGRESS) == 50
        assert progress_for_status(MilestoneStatus.COMPLETED) == 100

    @pytest.mark.parametrize("progress,expected", [
        (0, TaskStatus.NOT_STARTED),
        (1, TaskStatus.IN_PROGRESS),
        (50, TaskStatus.IN_PROGRESS),
        (99, TaskStatus.IN_PROGRESS),
        (100, TaskStatus.COMPLETED),
    ])
    def test_thresholds(self, progress, expected):
        assert status_for_progress(progress) == expected

    def test_blocked_is_not_recoverable_from_progress(self):
        recovered = status_for_progress(progress_for_status(TaskStatus.BLOCKED))

        assert recovered == TaskStatus.IN_PROGRESS


class TestVisualClass:

    @pytest.mark.parametrize("status,priority,expected", [
        (TaskStatus.COMPLETED, Priority.CRITICAL, VisualClass.COMPLETED),
        (TaskStatus.BLOCKED, Priority.CRITICAL, VisualClass.BLOCKED),
        (TaskStatus.IN_PROGRESS, Priority.CRITICAL, VisualClass.CRITICAL),
        (TaskStatus.NOT_STARTED, Priority.HIGH, VisualClass.HIGH),
        (TaskStatus.NOT_STARTED, Priority.MEDIUM, VisualClass.TASK),
        (TaskStatus.IN_PROGRESS, Priority.LOW, VisualClass.TASK),
    ])
    def test_first_match_wins(self, make_task, today, status, priority, expected):
        bar = task_bar(make_task("t1", status=status, priority=priority), today)

        assert bar.visual_class == expected

    def test_milestones_always_get_milestone_class(self, make_milestone, today):
        bar = milestone_bar(make_milestone("m1", status=MilestoneStatus.COMPLETED), today)

        assert bar.visual_class == VisualClass.MILESTONE


class TestLayoutBars:

    def test_completed_task_under_milestone(self, make_task, make_milestone, today):
        """Milestone progress comes from its own status, not its children."""
        entries = build_hierarchy(
            [make_task("t1", milestone_id="m1", status=TaskStatus.COMPLETED)],
            [make_milestone("m1", name="Build")],
        )

        bars = layout_bars(entries, today)

        assert [bar.id for bar in bars] == ["milestone-m1", "task-t1"]
        milestone, task = bars
        assert milestone.kind == BarKind.MILESTONE
        assert milestone.label == "Build"
        assert milestone.progress == 0
        assert task.progress == 100
        assert task.visual_class == VisualClass.COMPLETED
        assert task.record_id == "t1"

    def test_each_milestone_followed_by_its_tasks(self, make_task, make_milestone, today):
        entries = build_hierarchy(
            [
                make_task("a", milestone_id="m2"),
                make_task("b", milestone_id="m1"),
                make_task("c"),
            ],
            [make_milestone("m1"), make_milestone("m2")],
        )

        bars = layout_bars(entries, today)

        assert [bar.id for bar in bars] == [
            "milestone-m1", "task-b",
            "milestone-m2", "task-a",
            "task-c",
        ]

    def test_colliding_ids_stay_distinct(self, make_task, make_milestone, today):
        entries = build_hierarchy([make_task("x", milestone_id="x")], [make_milestone("x")])

        bars = layout_bars(entries, today)

        assert {bar.id for bar in bars} == {"milestone-x", "task-x"}

    def test_every_bar_has_start_before_end(self, make_task, make_milestone, today):
        entries = build_hierarchy(
            [
                make_task("t1"),
                make_task("t2", start_date=datetime(2030, 1, 1)),
                make_task("t3", due_date=datetime(2020, 1, 1)),
            ],
            [make_milestone("m1", start_date=datetime(2031, 6, 1))],
        )

        for bar in layout_bars(entries, today):
            assert bar.start <= bar.end
