"""
Celery tasks for documentation sync and health checks.

sync_documentation runs hourly from Celery Beat and on demand from the
admin API. Its return value is the JSON form of the SyncReport, so the
task status endpoint shows exactly what changed.
"""

from __future__ import annotations

import logging

import redis.asyncio as aioredis
from celery import Task
from sqlalchemy import select

from docsync.celery_app import celery_app
from docsync.config import settings
from docsync.schemas.tasks import (
    HealthCheckResultDict,
    ServiceHealthDict,
    SyncReportDict,
)
from docsync.services import SqlDocumentStore, SyncAbortedError, create_cache_service, create_sync_service
from docsync.services.sources import SourceUnavailableError, create_source
from docsync.utils.celery_helpers import DBSessionContext, progress_reporter, run_async

logger = logging.getLogger(__name__)


@celery_app.task(
    bind=True,
    name="docsync.tasks.sync_tasks.sync_documentation",
    autoretry_for=(SourceUnavailableError,),
    retry_kwargs={"max_retries": 3},
    retry_backoff=True,
    retry_backoff_max=600,
    retry_jitter=True,
)
def sync_documentation_task(
    self: Task,
    force: bool = False,
    local: bool = False,
    path: str | None = None,
    recursive: bool = True,
) -> SyncReportDict:
    """Sync the documentation tree into the database."""
    logger.info(
        f"Starting documentation sync "
        f"(force={force}, local={local}, path={path}, recursive={recursive})"
    )

    async def _sync() -> SyncReportDict:
        source = create_source(settings, local=local, path=path, recursive=recursive)
        cache = create_cache_service(settings)
        try:
            async with DBSessionContext() as db:
                service = create_sync_service(SqlDocumentStore(db), cache, settings)
                try:
                    report = await service.sync(
                        source,
                        force=force,
                        progress=progress_reporter(self),
                    )
                except SyncAbortedError as e:
                    result = SyncReportDict(**e.report.to_dict())
                    result["status"] = "aborted"
                    result["error"] = str(e)
                    return result
                return SyncReportDict(**report.to_dict())
        finally:
            await source.close()
            await cache.close()

    return run_async(_sync())


@celery_app.task(name="docsync.tasks.sync_tasks.health_check")
def health_check_task() -> HealthCheckResultDict:
    """Perform system health check on all services."""
    logger.info("Performing system health check")

    async def _health_check() -> HealthCheckResultDict:
        services = ServiceHealthDict(
            database=False,
            redis=False,
        )

        # Check database
        try:
            async with DBSessionContext() as db:
                result = await db.execute(select(1))
                services["database"] = result.scalar() == 1
        except Exception as e:
            logger.error(f"Database health check failed: {e}")

        # Check Redis (navigation cache)
        client = aioredis.from_url(settings.redis_url)
        try:
            services["redis"] = bool(await client.ping())
        except Exception as e:
            logger.error(f"Redis health check failed: {e}")
        finally:
            await client.aclose()

        return HealthCheckResultDict(
            healthy=all(services.values()),
            services=services,
        )

    return run_async(_health_check())
