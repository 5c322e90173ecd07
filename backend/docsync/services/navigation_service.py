"""
Navigation Service - Sidebar Tree for the Documentation Site
============================================================

The tree is a projection of the document store:

    [
        {"title": "Getting Started", "items": [
            {"title": "Installation", "path": "getting-started/installation"},
            ...
        ]},
        ...
    ]

Ordering Rules:
---------------
1. Configured sections come first, in their declared order, with their
   configured titles.
2. Inside a section, items listed in that section's preference list come
   first, in list order. Everything else follows in store order
   (order, then path). No item is ever dropped.
3. Sections found in the store but not configured follow, in discovery
   order, with a title humanized from the segment ("query-builder" ->
   "Query Builder").
4. Sections without items are left out.

The section of a page is the first segment of its path; a single-segment
path is its own section.

Caching:
--------
build() has no side effects, so the cached copy can only ever be stale,
never wrong. The sync service calls invalidate() after every pass and the
TTL bounds staleness for anything else.
"""

from __future__ import annotations
import logging
import posixpath
from typing import Any

from docsync.schemas.documentation import Document
from docsync.services.cache_service import CacheService
from docsync.services.document_store import DocumentStore

logger = logging.getLogger(__name__)

INDEX_PAGE = "README"


def humanize(segment: str) -> str:
    """'two-factor' -> 'Two Factor'. Only first letters are touched."""
    words = segment.replace("-", " ").replace("_", " ").split(" ")
    return " ".join(word[:1].upper() + word[1:] for word in words)


def path_to_title(path: str) -> str:
    name = posixpath.basename(path)
    if name == INDEX_PAGE:
        name = posixpath.basename(posixpath.dirname(path)) or name
    return humanize(name)


def section_of(path: str) -> str:
    return path.split("/", 1)[0]


class NavigationBuilder:
    """
    Builds and caches the navigation tree.

    Usage:
        builder = NavigationBuilder(store, cache, sections={"forms": "Forms"})
        tree = await builder.get_navigation()
        await builder.invalidate()  # after a sync
    """

    def __init__(
        self,
        store: DocumentStore,
        cache: CacheService,
        sections: dict[str, str] | None = None,
        item_order: dict[str, list[str]] | None = None,
        cache_key: str = "docs_navigation",
        ttl: int = 6 * 3600,
    ) -> None:
        self.store = store
        self.cache = cache
        self.sections = sections or {}
        self.item_order = item_order or {}
        self.cache_key = cache_key
        self.ttl = ttl

    @staticmethod
    def _item(document: Document) -> dict[str, str]:
        return {
            "title": document.title or path_to_title(document.path),
            "path": document.path,
        }

    def _sort_section(self, section: str, documents: list[Document]) -> list[Document]:
        preferred = self.item_order.get(section)
        if not preferred:
            return documents

        rank = {name: index for index, name in enumerate(preferred)}
        prefix = f"{section}/"

        def key(document: Document) -> int:
            name = document.path[len(prefix):] if document.path.startswith(prefix) else document.path
            return rank.get(name, len(preferred))

        # sorted() is stable, unlisted items keep store order
        return sorted(documents, key=key)

    async def build(self) -> list[dict[str, Any]]:
        grouped: dict[str, list[Document]] = {}
        for document in await self.store.list_ordered():
            grouped.setdefault(section_of(document.path), []).append(document)

        tree: list[dict[str, Any]] = []
        for section, title in self.sections.items():
            documents = grouped.get(section)
            if documents:
                tree.append({
                    "title": title,
                    "items": [self._item(doc) for doc in self._sort_section(section, documents)],
                })

        for section, documents in grouped.items():
            if section not in self.sections and documents:
                tree.append({
                    "title": humanize(section),
                    "items": [self._item(doc) for doc in self._sort_section(section, documents)],
                })

        logger.debug(f"Built navigation with {len(tree)} sections")
        return tree

    async def get_navigation(self) -> list[dict[str, Any]]:
        return await self.cache.remember(self.cache_key, self.ttl, self.build)

    async def invalidate(self) -> None:
        await self.cache.forget(self.cache_key)
