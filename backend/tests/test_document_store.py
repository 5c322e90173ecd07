"""Tests for the SQL document store (SQLite in memory)."""

from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from docsync.schemas.documentation import Document
from docsync.services.document_store import SqlDocumentStore, StoreError


def make_document(path: str, **overrides) -> Document:
    values = {
        "path": path,
        "title": path.rsplit("/", 1)[-1].title(),
        "content_raw": f"# {path}",
        "content_html": f"<h1>{path}</h1>",
        "content_hash": f"sha-{path}",
    }
    values.update(overrides)
    return Document(**values)


class TestSqlDocumentStore:
    """Test the store contract against a real database."""

    @pytest.mark.asyncio
    async def test_upsert_inserts_then_updates(self, store):
        created = await store.upsert(make_document("forms/introduction"))
        updated = await store.upsert(
            make_document("forms/introduction", title="Forms", content_hash="sha-2")
        )

        assert created.updated_at is not None
        assert updated.title == "Forms"
        assert await store.count() == 1
        found = await store.find_by_path("forms/introduction")
        assert found.content_hash == "sha-2"

    @pytest.mark.asyncio
    async def test_find_by_path_missing(self, store):
        assert await store.find_by_path("nope") is None

    @pytest.mark.asyncio
    async def test_find_by_hash(self, store):
        await store.upsert(make_document("b/page", content_hash="shared"))
        await store.upsert(make_document("a/page", content_hash="shared"))

        found = await store.find_by_hash("shared")

        assert found.path == "a/page"
        assert await store.find_by_hash("unknown") is None

    @pytest.mark.asyncio
    async def test_list_ordered_by_order_then_path(self, store):
        await store.upsert(make_document("b", order=1))
        await store.upsert(make_document("c", order=0))
        await store.upsert(make_document("a", order=1))

        assert [d.path for d in await store.list_ordered()] == ["c", "a", "b"]

    @pytest.mark.asyncio
    async def test_delete_all(self, store):
        await store.upsert(make_document("a"))
        await store.upsert(make_document("b"))

        assert await store.delete_all() == 2
        assert await store.count() == 0

    @pytest.mark.asyncio
    async def test_search_title_and_content_case_insensitive(self, store):
        await store.upsert(make_document("forms/validation", title="Validation"))
        await store.upsert(
            make_document("tables/filters", title="Filters", content_raw="Use VALIDATION rules")
        )
        await store.upsert(make_document("panel/themes", title="Themes"))

        results = await store.search("validation", 20)

        assert [d.path for d in results] == ["forms/validation", "tables/filters"]

    @pytest.mark.asyncio
    async def test_search_escapes_wildcards_and_limits(self, store):
        for i in range(5):
            await store.upsert(make_document(f"page-{i}", content_raw="100% done"))
        await store.upsert(make_document("other", content_raw="100 percent"))

        assert len(await store.search("100%", 3)) == 3
        assert "other" not in [d.path for d in await store.search("100%", 20)]

    @pytest.mark.asyncio
    async def test_database_error_becomes_store_error(self):
        session = AsyncMock(spec=AsyncSession)
        session.execute.side_effect = OperationalError("SELECT", {}, Exception("gone"))
        store = SqlDocumentStore(session)

        with pytest.raises(StoreError):
            await store.upsert(make_document("a"))
        session.rollback.assert_awaited()
