"""
Celery helper utilities for async task execution and progress tracking.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Coroutine, TypeVar

from celery import Task
from sqlalchemy.ext.asyncio import AsyncSession

from docsync.celery_app import celery_app
from docsync.db.session import AsyncSessionLocal

logger = logging.getLogger(__name__)

T = TypeVar("T")


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """
    Run an async coroutine from a sync context (Celery task).

    Reuses the worker's event loop so pooled connections stay valid
    between tasks; creates one if the thread has none yet.
    """
    try:
        loop = asyncio.get_event_loop()
        if loop.is_closed():
            raise RuntimeError("event loop is closed")
    except RuntimeError:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)

    return loop.run_until_complete(coro)


class DBSessionContext:
    """
    Async context manager for database sessions in Celery tasks.

    Handles session lifecycle with automatic commit/rollback.
    """

    def __init__(self) -> None:
        self.session: AsyncSession | None = None

    async def __aenter__(self) -> AsyncSession:
        self.session = AsyncSessionLocal()
        return self.session

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        if self.session:
            if exc_type:
                await self.session.rollback()
            else:
                try:
                    await self.session.commit()
                except Exception:
                    await self.session.rollback()
                    raise
            await self.session.close()


def update_task_progress(
    task: Task,
    current: int,
    total: int,
    message: str = "",
) -> None:
    """
    Update Celery task progress metadata.

    Args:
        task: The bound Celery task (self from @celery_app.task(bind=True))
        current: Current progress value
        total: Total expected value
        message: Optional progress message
    """
    percent = int((current / total) * 100) if total > 0 else 0

    task.update_state(
        state="PROGRESS",
        meta={
            "current": current,
            "total": total,
            "percent": percent,
            "message": message,
        },
    )


def progress_reporter(task: Task, every: int = 10) -> Callable[[int, int, str], None]:
    """
    Progress callback for long loops that reports every Nth step and the last.

    Keeps result-backend writes bounded on large documentation trees.
    """
    def report(current: int, total: int, message: str = "") -> None:
        if current == total or current % every == 0:
            update_task_progress(task, current, total, message)

    return report


def get_task_info(task_id: str) -> dict[str, Any]:
    """
    Get information about a Celery task by ID.

    Returns a dict with state, result, and progress information.
    """
    task = celery_app.AsyncResult(task_id)

    response: dict[str, Any] = {
        "task_id": task_id,
        "state": task.state,
        "status": task.state,  # Alias for compatibility
        "ready": task.ready(),
        "successful": task.successful() if task.ready() else None,
        "failed": task.failed() if task.ready() else None,
    }

    if task.state == "PROGRESS":
        response["progress"] = task.info
    elif task.successful():
        response["result"] = task.result
    elif task.failed():
        response["error"] = str(task.info)

    return response
