from __future__ import annotations
import logging

from fastapi import APIRouter, Query

from docsync.api.deps import DocsService
from docsync.api.utils import get_page_or_404, not_synced_page
from docsync.config import settings
from docsync.schemas.documentation import (
    DocumentPageResponse,
    NavigationSection,
    SearchResult,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=DocumentPageResponse)
async def landing_page(service: DocsService) -> DocumentPageResponse:
    """Default page with navigation; a placeholder until the first sync."""
    path = settings.docs_default_page
    page = await service.get_page(path)
    return DocumentPageResponse(
        content=page or not_synced_page(path),
        navigation=await service.get_navigation(),
        current_page=path,
    )


@router.get("/navigation", response_model=list[NavigationSection])
async def navigation(service: DocsService) -> list[NavigationSection]:
    return await service.get_navigation()


@router.get("/search", response_model=list[SearchResult])
async def search(
    service: DocsService,
    q: str = Query(default="", max_length=200),
) -> list[SearchResult]:
    return await service.search(q)


@router.get("/pages/{path:path}", response_model=DocumentPageResponse)
async def show_page(path: str, service: DocsService) -> DocumentPageResponse:
    page = await get_page_or_404(service, path)
    return DocumentPageResponse(
        content=page,
        navigation=await service.get_navigation(),
        current_page=page.path,
    )
