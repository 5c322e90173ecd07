"""Tests for the Celery sync task and progress helpers."""

from unittest.mock import ANY, AsyncMock, MagicMock, patch

from docsync.services.sync_service import SyncAbortedError, SyncReport
from docsync.tasks.sync_tasks import sync_documentation_task
from docsync.utils.celery_helpers import progress_reporter, update_task_progress


class FakeSessionContext:

    async def __aenter__(self):
        return MagicMock()

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return None


def patched_task_env(service):
    source = MagicMock()
    source.close = AsyncMock()
    cache = MagicMock()
    cache.close = AsyncMock()
    return source, cache, patch.multiple(
        "docsync.tasks.sync_tasks",
        create_source=MagicMock(return_value=source),
        create_cache_service=MagicMock(return_value=cache),
        create_sync_service=MagicMock(return_value=service),
        DBSessionContext=FakeSessionContext,
    )


class TestSyncDocumentationTask:

    def test_returns_report_dict(self):
        service = MagicMock()
        service.sync = AsyncMock(
            return_value=SyncReport(source="fake", changed_paths=["forms/introduction"])
        )
        source, cache, env = patched_task_env(service)

        with env:
            result = sync_documentation_task.run(force=True)

        assert result["status"] == "completed"
        assert result["changed_paths"] == ["forms/introduction"]
        assert service.sync.await_args.kwargs["force"] is True
        source.close.assert_awaited_once()
        cache.close.assert_awaited_once()

    def test_local_options_reach_the_source(self):
        service = MagicMock()
        service.sync = AsyncMock(return_value=SyncReport(source="local:docs"))
        source, cache, env = patched_task_env(service)

        with env, patch(
            "docsync.tasks.sync_tasks.create_source", return_value=source
        ) as create_source:
            sync_documentation_task.run(local=True, path="docs", recursive=False)

        create_source.assert_called_once_with(ANY, local=True, path="docs", recursive=False)

    def test_aborted_sync_reports_error(self):
        report = SyncReport(source="fake", changed_paths=["a"])
        service = MagicMock()
        service.sync = AsyncMock(side_effect=SyncAbortedError("Sync aborted: db down", report))
        source, cache, env = patched_task_env(service)

        with env:
            result = sync_documentation_task.run()

        assert result["status"] == "aborted"
        assert result["error"] == "Sync aborted: db down"
        assert result["changed_paths"] == ["a"]
        source.close.assert_awaited_once()


class TestProgressHelpers:

    def test_update_task_progress(self):
        task = MagicMock()

        update_task_progress(task, 5, 20, "Syncing forms/introduction")

        task.update_state.assert_called_once_with(
            state="PROGRESS",
            meta={"current": 5, "total": 20, "percent": 25, "message": "Syncing forms/introduction"},
        )

    def test_progress_reporter_throttles(self):
        task = MagicMock()
        report = progress_reporter(task, every=10)

        for i in range(1, 26):
            report(i, 25, f"step {i}")

        reported = [c.kwargs["meta"]["current"] for c in task.update_state.call_args_list]
        assert reported == [10, 20, 25]
