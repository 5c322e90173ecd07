"""
FastAPI Dependencies
====================

Dependency injection functions for FastAPI routes.
These provide the document store, the cache and service instances to
route handlers.

Usage in routes:
    @router.get("/search")
    async def search(
        service: DocumentationService = Depends(get_documentation_service)
    ):
        return await service.search("install")

Tests swap the store and cache with app.dependency_overrides, so routes
never build either directly.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from docsync.config import settings
from docsync.db import get_db
from docsync.services import (
    CacheService,
    DocumentationService,
    DocumentationSyncService,
    SqlDocumentStore,
    create_cache_service,
    create_documentation_service,
    create_sync_service,
)
from docsync.services.document_store import DocumentStore

_cache: CacheService | None = None


def get_cache() -> CacheService:
    """
    Return the process-wide CacheService.

    One instance per process so the Redis connection pool is shared
    between requests.
    """
    global _cache
    if _cache is None:
        _cache = create_cache_service(settings)
    return _cache


async def close_cache() -> None:
    global _cache
    if _cache is not None:
        await _cache.close()
        _cache = None


def get_document_store(db: AsyncSession = Depends(get_db)) -> DocumentStore:
    """Document store bound to the request's session."""
    return SqlDocumentStore(db)


def get_documentation_service(
    store: DocumentStore = Depends(get_document_store),
    cache: CacheService = Depends(get_cache),
) -> DocumentationService:
    return create_documentation_service(store, cache, settings)


def get_sync_service(
    store: DocumentStore = Depends(get_document_store),
    cache: CacheService = Depends(get_cache),
) -> DocumentationSyncService:
    return create_sync_service(store, cache, settings)


def verify_admin_secret(
    secret: str = Query(..., description="Admin secret for authorization"),
) -> None:
    if secret != settings.admin_secret:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid secret")


DocsService = Annotated[DocumentationService, Depends(get_documentation_service)]
SyncService = Annotated[DocumentationSyncService, Depends(get_sync_service)]
AdminAccess = Depends(verify_admin_secret)
