"""Admin routes for documentation sync and maintenance."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from docsync.api.deps import AdminAccess, SyncService, get_document_store
from docsync.api.utils import describe_requested_source
from docsync.config import settings
from docsync.schemas.documentation import StatsResponse, SyncResponse
from docsync.schemas.tasks import TaskStatusResponse
from docsync.services import SyncAbortedError
from docsync.services.document_store import DocumentStore
from docsync.services.navigation_service import section_of
from docsync.services.sources import SourceUnavailableError, create_source
from docsync.tasks.sync_tasks import sync_documentation_task
from docsync.utils.celery_helpers import get_task_info

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[AdminAccess])


@router.post("/sync", response_model=SyncResponse)
async def sync_documentation(
    service: SyncService,
    force: bool = Query(False, description="Delete all pages before syncing"),
    local: bool = Query(False, description="Sync from the local docs folder"),
    path: str | None = Query(None, description="Custom local docs folder"),
    recursive: bool = Query(True, description="Include subfolders of a local docs folder"),
    background: bool = Query(False, description="Queue the sync on a Celery worker"),
) -> SyncResponse:
    """Sync documentation from GitHub or a local folder."""
    if background:
        task = sync_documentation_task.delay(
            force=force, local=local, path=path, recursive=recursive
        )
        logger.info(f"Queued documentation sync as task {task.id}")
        return SyncResponse(
            status="queued",
            source=describe_requested_source(local, path),
            forced=force,
            task_id=task.id,
        )

    try:
        source = create_source(settings, local=local, path=path, recursive=recursive)
    except FileNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    try:
        report = await service.sync(source, force=force)
    except SourceUnavailableError as e:
        logger.error(f"Sync failed, source unavailable: {e}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    except SyncAbortedError as e:
        logger.error(f"Sync aborted after {len(e.report.changed_paths)} pages: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    finally:
        await source.close()

    return SyncResponse(**report.to_dict())


@router.get("/tasks/{task_id}", response_model=TaskStatusResponse)
async def get_sync_task_status(task_id: str) -> TaskStatusResponse:
    """Get the status of a background sync task."""
    return TaskStatusResponse(**get_task_info(task_id))


@router.get("/stats", response_model=StatsResponse)
async def get_stats(
    store: DocumentStore = Depends(get_document_store),
) -> StatsResponse:
    """Get documentation statistics."""
    documents = await store.list_ordered()
    return StatsResponse(
        documents=await store.count(),
        sections=len({section_of(doc.path) for doc in documents}),
    )
