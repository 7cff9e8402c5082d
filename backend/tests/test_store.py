"""
Document store tests.

The SQL store runs against a throwaway SQLite database; the Firestore store
is exercised with a mocked client.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from google.api_core.exceptions import GoogleAPIError

from pitcrew.exceptions import NotFoundError, StoreError, ValidationError
from pitcrew.models import MilestoneStatus, Priority, TaskStatus
from pitcrew.store import MILESTONES, TASKS, should_use_firestore
from pitcrew.store.base import clean_filters, coerce_filters
from pitcrew.store.firestore import FirestoreDocumentStore, _to_document


class TestFilters:

    def test_empty_values_are_dropped(self):
        assert clean_filters({"team": None, "category": "", "status": "Blocked"}) == {"status": "Blocked"}
        assert clean_filters(None) == {}

    def test_enum_strings_are_coerced(self):
        filters = coerce_filters(TASKS, {"status": "Completed", "priority": ["High", "Critical"]})

        assert filters == {
            "status": TaskStatus.COMPLETED,
            "priority": [Priority.HIGH, Priority.CRITICAL],
        }

    def test_unknown_field_is_rejected(self):
        with pytest.raises(ValidationError):
            coerce_filters(TASKS, {"colour": "red"})

    def test_bad_enum_value_is_rejected(self):
        with pytest.raises(ValidationError):
            coerce_filters(MILESTONES, {"status": "Blocked"})


class TestSqlDocumentStore:

    @pytest.mark.asyncio
    async def test_create_and_get(self, sql_store):
        created = await sql_store.create(TASKS, {
            "title": "Prototype intake",
            "category": "FTC",
            "start_date": datetime(2024, 2, 1, tzinfo=timezone.utc),
        })

        fetched = await sql_store.get_by_id(TASKS, created.id)

        assert fetched.title == "Prototype intake"
        assert fetched.status == TaskStatus.NOT_STARTED
        assert fetched.start_date.date() == datetime(2024, 2, 1).date()
        assert fetched.due_date is None
        assert fetched.created_at is not None

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, sql_store):
        assert await sql_store.get_by_id(TASKS, "missing") is None
        with pytest.raises(NotFoundError):
            await sql_store.get_or_404(TASKS, "missing")

    @pytest.mark.asyncio
    async def test_query_filters(self, sql_store):
        await sql_store.create(TASKS, {"title": "a", "category": "FTC", "status": "Completed"})
        await sql_store.create(TASKS, {"title": "b", "category": "FTC"})
        await sql_store.create(TASKS, {"title": "c", "category": "FRC", "status": "Completed"})

        completed = await sql_store.query(TASKS, {"status": "Completed", "category": None})
        ftc_done = await sql_store.query(TASKS, {"status": TaskStatus.COMPLETED, "category": "FTC"})
        either = await sql_store.query(TASKS, {"category": ["FTC", "FRC"]})

        assert sorted(t.title for t in completed) == ["a", "c"]
        assert [t.title for t in ftc_done] == ["a"]
        assert len(either) == 3

    @pytest.mark.asyncio
    async def test_partial_update_merges_and_stamps(self, sql_store):
        created = await sql_store.create(TASKS, {"title": "Wire panel", "team": "Icarus"})

        updated = await sql_store.update(TASKS, created.id, {"status": TaskStatus.IN_PROGRESS})

        assert updated.status == TaskStatus.IN_PROGRESS
        assert updated.title == "Wire panel"
        assert updated.team == "Icarus"
        assert updated.updated_at >= created.updated_at

    @pytest.mark.asyncio
    async def test_update_missing_record(self, sql_store):
        with pytest.raises(NotFoundError):
            await sql_store.update(MILESTONES, "missing", {"name": "x"})

    @pytest.mark.asyncio
    async def test_milestone_dates_update(self, sql_store):
        milestone = await sql_store.create(MILESTONES, {"name": "Build"})

        updated = await sql_store.update(MILESTONES, milestone.id, {
            "start_date": datetime(2024, 3, 1, tzinfo=timezone.utc),
            "end_date": datetime(2024, 3, 9, tzinfo=timezone.utc),
        })

        assert updated.end_date.date() == datetime(2024, 3, 9).date()
        assert updated.status == MilestoneStatus.NOT_STARTED

    @pytest.mark.asyncio
    async def test_remove(self, sql_store):
        milestone = await sql_store.create(MILESTONES, {"name": "Build"})

        assert await sql_store.remove(MILESTONES, milestone.id) is True
        assert await sql_store.remove(MILESTONES, milestone.id) is False
        assert await sql_store.get_all(MILESTONES) == []

    @pytest.mark.asyncio
    async def test_unknown_collection(self, sql_store):
        with pytest.raises(ValidationError):
            await sql_store.get_all("sponsors")


class TestFirestoreDocumentStore:

    def test_documents_use_display_strings(self):
        document = _to_document({
            "status": TaskStatus.IN_PROGRESS,
            "due_date": datetime(2024, 1, 5, tzinfo=timezone.utc),
            "title": "Test drive train",
            "needs_mentor": True,
            "milestone_id": None,
        })

        assert document == {
            "status": "In Progress",
            "due_date": "2024-01-05T00:00:00+00:00",
            "title": "Test drive train",
            "needs_mentor": True,
            "milestone_id": None,
        }

    @pytest.mark.asyncio
    async def test_reads_documents_into_schemas(self):
        snapshot = MagicMock(id="t1")
        snapshot.to_dict.return_value = {
            "title": "Wire panel",
            "status": "Blocked",
            "start_date": "2024-02-01T00:00:00+00:00",
        }
        client = MagicMock()
        client.collection.return_value.get = AsyncMock(return_value=[snapshot])

        tasks = await FirestoreDocumentStore(client).get_all(TASKS)

        client.collection.assert_called_with("tasks")
        assert tasks[0].id == "t1"
        assert tasks[0].status == TaskStatus.BLOCKED
        assert tasks[0].start_date.day == 1

    @pytest.mark.asyncio
    async def test_transport_failure_becomes_store_error(self):
        client = MagicMock()
        client.collection.return_value.get = AsyncMock(side_effect=GoogleAPIError("unavailable"))

        with pytest.raises(StoreError):
            await FirestoreDocumentStore(client).get_all(MILESTONES)

    @pytest.mark.asyncio
    async def test_update_missing_document(self):
        client = MagicMock()
        doc_ref = client.collection.return_value.document.return_value
        doc_ref.get = AsyncMock(return_value=MagicMock(exists=False))
        doc_ref.update = AsyncMock()

        with pytest.raises(NotFoundError):
            await FirestoreDocumentStore(client).update(TASKS, "t1", {"status": "Completed"})
        doc_ref.update.assert_not_called()


def test_sql_store_is_the_default():
    assert should_use_firestore() is False
