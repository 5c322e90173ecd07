"""
Document Store - Persistence for Synced Pages
=============================================

The store is a keyed collection of Documents with a unique path. The sync
service writes through it, the read paths and the navigation builder read
through it. It knows nothing about Markdown, sources or caching.

DocumentStore is the contract; SqlDocumentStore implements it on the
"documentation" table via SQLAlchemy's async session.

Write Semantics:
----------------
Every upsert and delete_all commits on its own, so a sync pass that dies
halfway leaves exactly the documents it already wrote. A database error
rolls the session back and surfaces as StoreError; callers never see raw
SQLAlchemy exceptions.
"""

from __future__ import annotations
import logging
from typing import Protocol, Sequence

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from docsync.models.documentation import DocumentationPage
from docsync.schemas.documentation import Document

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """A read or write against the document store failed."""


class DocumentStore(Protocol):

    async def find_by_path(self, path: str) -> Document | None: ...

    async def find_by_hash(self, content_hash: str) -> Document | None: ...

    async def upsert(self, document: Document) -> Document: ...

    async def delete_all(self) -> int: ...

    async def list_ordered(self) -> list[Document]: ...

    async def search(self, query: str, limit: int) -> list[Document]: ...

    async def count(self) -> int: ...


class SqlDocumentStore:
    """
    DocumentStore backed by SQLAlchemy.

    Usage:
        async with AsyncSessionLocal() as db:
            store = SqlDocumentStore(db)
            doc = await store.find_by_path("forms/introduction")
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def _rollback(self, action: str, error: SQLAlchemyError) -> StoreError:
        logger.error(f"Document store {action} failed: {error}")
        try:
            await self.db.rollback()
        except SQLAlchemyError as e:
            logger.error(f"Rollback after failed {action} also failed: {e}")
        return StoreError(f"{action} failed: {error}")

    async def _first(self, action: str, stmt) -> Document | None:
        try:
            result = await self.db.execute(stmt)
            row = result.scalars().first()
        except SQLAlchemyError as e:
            raise await self._rollback(action, e) from e
        return Document.model_validate(row) if row is not None else None

    async def _all(self, action: str, stmt) -> list[Document]:
        try:
            result = await self.db.execute(stmt)
            rows: Sequence[DocumentationPage] = result.scalars().all()
        except SQLAlchemyError as e:
            raise await self._rollback(action, e) from e
        return [Document.model_validate(row) for row in rows]

    async def find_by_path(self, path: str) -> Document | None:
        return await self._first(
            "find_by_path",
            select(DocumentationPage).where(DocumentationPage.path == path),
        )

    async def find_by_hash(self, content_hash: str) -> Document | None:
        # Lowest path wins when several pages share one body
        return await self._first(
            "find_by_hash",
            select(DocumentationPage)
            .where(DocumentationPage.content_hash == content_hash)
            .order_by(DocumentationPage.path)
            .limit(1),
        )

    async def upsert(self, document: Document) -> Document:
        values = document.model_dump(exclude={"updated_at"})
        try:
            result = await self.db.execute(
                select(DocumentationPage).where(DocumentationPage.path == document.path)
            )
            page = result.scalars().first()
            if page is None:
                page = DocumentationPage(**values)
                self.db.add(page)
            else:
                for key, value in values.items():
                    setattr(page, key, value)
            await self.db.commit()
            await self.db.refresh(page)
        except SQLAlchemyError as e:
            raise await self._rollback(f"upsert of '{document.path}'", e) from e

        logger.debug(f"Stored document '{page.path}'")
        return Document.model_validate(page)

    async def delete_all(self) -> int:
        try:
            result = await self.db.execute(delete(DocumentationPage))
            await self.db.commit()
        except SQLAlchemyError as e:
            raise await self._rollback("delete_all", e) from e

        deleted = result.rowcount or 0
        logger.info(f"Deleted {deleted} documents")
        return deleted

    async def list_ordered(self) -> list[Document]:
        return await self._all(
            "list_ordered",
            select(DocumentationPage).order_by(
                DocumentationPage.order, DocumentationPage.path
            ),
        )

    async def search(self, query: str, limit: int) -> list[Document]:
        return await self._all(
            "search",
            select(DocumentationPage)
            .where(
                or_(
                    DocumentationPage.title.icontains(query, autoescape=True),
                    DocumentationPage.content_raw.icontains(query, autoescape=True),
                )
            )
            .order_by(DocumentationPage.order, DocumentationPage.path)
            .limit(limit),
        )

    async def count(self) -> int:
        try:
            result = await self.db.execute(
                select(func.count()).select_from(DocumentationPage)
            )
        except SQLAlchemyError as e:
            raise await self._rollback("count", e) from e
        return result.scalar_one()
