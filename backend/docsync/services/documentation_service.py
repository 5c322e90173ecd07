from __future__ import annotations
import logging
from typing import Any

from docsync.schemas.documentation import Document, DocumentPage, SearchResult
from docsync.services.document_store import DocumentStore
from docsync.services.navigation_service import INDEX_PAGE, NavigationBuilder

logger = logging.getLogger(__name__)


def normalize_page_path(path: str) -> str:
    """'/forms.fields.select/' -> 'forms/fields/select'"""
    return path.replace(".", "/").strip("/")


class DocumentationService:
    """
    Read side of the documentation site: pages, search and navigation.

    Nothing here writes; every method is safe to call concurrently with a
    sync pass.
    """

    def __init__(
        self,
        store: DocumentStore,
        navigation: NavigationBuilder,
        repo: str = "laravilt/laravilt",
        branch: str = "master",
        docs_path: str = "docs",
        search_min_length: int = 2,
        search_limit: int = 20,
    ) -> None:
        self.store = store
        self.navigation = navigation
        self.repo = repo
        self.branch = branch
        self.docs_path = docs_path.strip("/")
        self.search_min_length = search_min_length
        self.search_limit = search_limit

    async def get_document(self, path: str) -> Document | None:
        """Exact path first, then the folder's README. None when neither exists."""
        path = normalize_page_path(path)
        if not path:
            return None

        document = await self.store.find_by_path(path)
        if document is None:
            document = await self.store.find_by_path(f"{path}/{INDEX_PAGE}")
        return document

    async def get_page(self, path: str) -> DocumentPage | None:
        document = await self.get_document(path)
        if document is None:
            logger.debug(f"No documentation page at '{path}'")
            return None

        return DocumentPage(
            path=document.path,
            title=document.title,
            description=document.description,
            html=document.content_html,
            edit_url=self.edit_url(document.path),
        )

    async def search(self, query: str) -> list[SearchResult]:
        query = query.strip()
        if len(query) < self.search_min_length:
            return []

        documents = await self.store.search(query, self.search_limit)
        return [SearchResult.model_validate(doc) for doc in documents]

    async def get_navigation(self) -> list[dict[str, Any]]:
        return await self.navigation.get_navigation()

    def edit_url(self, path: str) -> str:
        prefix = f"{self.docs_path}/" if self.docs_path else ""
        return f"https://github.com/{self.repo}/edit/{self.branch}/{prefix}{path}.md"
