"""
Worker tests: the persist_update job and writer selection.
"""

import pytest

from pitcrew import worker
from pitcrew.models import TaskStatus


class TestPersistUpdate:

    @pytest.mark.asyncio
    async def test_applies_partial_update(self, memory_store, make_task):
        memory_store.add(make_task("t1", title="Wire panel"))

        result = await worker.persist_update(
            {"store": memory_store}, "tasks", "t1", {"status": "Completed"}
        )

        assert result == "Updated tasks/t1"
        task = memory_store.records["tasks"]["t1"]
        assert task.status == TaskStatus.COMPLETED
        assert task.title == "Wire panel"

    @pytest.mark.asyncio
    async def test_failure_is_reported_not_raised(self, memory_store, make_task):
        memory_store.add(make_task("t1"))
        memory_store.fail_updates = True

        result = await worker.persist_update(
            {"store": memory_store}, "tasks", "t1", {"status": "Completed"}
        )

        assert result.startswith("Failed:")

    @pytest.mark.asyncio
    async def test_missing_record(self, memory_store):
        result = await worker.persist_update({"store": memory_store}, "milestones", "gone", {"name": "x"})

        assert result.startswith("Failed:")


class TestUpdateWriter:

    def test_inline_writes_go_straight_to_the_store(self, memory_store):
        assert worker.update_writer(memory_store) == memory_store.update

    def test_queue_backend_enqueues(self, memory_store, monkeypatch):
        monkeypatch.setattr(worker.settings, "write_backend", "queue")

        assert worker.update_writer(memory_store) is worker.enqueue_update

    @pytest.mark.asyncio
    async def test_enqueue_update(self, monkeypatch):
        jobs = []

        class FakePool:
            async def enqueue_job(self, name, *args):
                jobs.append((name, args))

        async def fake_pool():
            return FakePool()

        monkeypatch.setattr(worker, "get_arq_pool", fake_pool)

        await worker.enqueue_update("tasks", "t1", {"status": "Blocked"})

        assert jobs == [("persist_update", ("tasks", "t1", {"status": "Blocked"}))]


def test_worker_settings():
    assert worker.WorkerSettings.functions == [worker.persist_update]
    assert worker.WorkerSettings.max_tries == 1
