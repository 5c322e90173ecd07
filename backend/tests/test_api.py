"""HTTP tests for the docs and admin routes."""

from unittest.mock import MagicMock, patch

import httpx
import pytest
import pytest_asyncio

from docsync.api.deps import get_cache, get_document_store
from docsync.config import settings
from docsync.main import app
from docsync.schemas.documentation import Document

PREFIX = settings.api_prefix


@pytest_asyncio.fixture
async def client(store, cache):
    app.dependency_overrides[get_document_store] = lambda: store
    app.dependency_overrides[get_cache] = lambda: cache
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
        yield http
    app.dependency_overrides.clear()


async def add(store, path: str, title: str) -> None:
    await store.upsert(
        Document(
            path=path,
            title=title,
            content_raw=f"# {title}",
            content_html=f"<h1>{title}</h1>",
            content_hash=f"sha-{path}",
        )
    )


@pytest.fixture
def docs_dir(tmp_path):
    (tmp_path / "getting-started").mkdir()
    (tmp_path / "getting-started" / "installation.md").write_text(
        "# Installation\n\nSee [quick start](quick-start.md).\n", encoding="utf-8"
    )
    (tmp_path / "getting-started" / "quick-start.md").write_text("# Quick Start\n", encoding="utf-8")
    return tmp_path


class TestDocsRoutes:

    @pytest.mark.asyncio
    async def test_root(self, client):
        response = await client.get("/")
        assert response.json()["status"] == "running"

    @pytest.mark.asyncio
    async def test_landing_page_before_sync(self, client):
        response = await client.get(f"{PREFIX}/docs")

        assert response.status_code == 200
        body = response.json()
        assert body["current_page"] == settings.docs_default_page
        assert "Not Synced" in body["content"]["html"]
        assert body["navigation"] == []

    @pytest.mark.asyncio
    async def test_show_page(self, client, store):
        await add(store, "getting-started/installation", "Installation")

        response = await client.get(f"{PREFIX}/docs/pages/getting-started/installation")

        assert response.status_code == 200
        body = response.json()
        assert body["content"]["title"] == "Installation"
        assert body["content"]["edit_url"].endswith("/getting-started/installation.md")
        assert body["navigation"][0]["title"] == "Getting Started"

    @pytest.mark.asyncio
    async def test_show_page_readme_fallback(self, client, store):
        await add(store, "frontend/README", "Frontend")

        response = await client.get(f"{PREFIX}/docs/pages/frontend")

        assert response.json()["current_page"] == "frontend/README"

    @pytest.mark.asyncio
    async def test_missing_page_is_404(self, client):
        response = await client.get(f"{PREFIX}/docs/pages/does/not/exist")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_search(self, client, store):
        await add(store, "forms/validation", "Validation")

        hits = (await client.get(f"{PREFIX}/docs/search", params={"q": "valid"})).json()
        short = (await client.get(f"{PREFIX}/docs/search", params={"q": "v"})).json()

        assert hits == [{"path": "forms/validation", "title": "Validation", "description": None}]
        assert short == []

    @pytest.mark.asyncio
    async def test_navigation(self, client, store):
        await add(store, "forms/introduction", "Introduction")

        response = await client.get(f"{PREFIX}/docs/navigation")

        assert response.json() == [
            {"title": "Forms", "items": [{"title": "Introduction", "path": "forms/introduction"}]}
        ]


class TestAdminRoutes:

    @pytest.mark.asyncio
    async def test_wrong_secret_is_forbidden(self, client):
        response = await client.post(f"{PREFIX}/admin/sync", params={"secret": "wrong"})
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_inline_local_sync(self, client, store, docs_dir):
        params = {"secret": settings.admin_secret, "path": str(docs_dir)}

        response = await client.post(f"{PREFIX}/admin/sync", params=params)

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "completed"
        assert sorted(body["changed_paths"]) == [
            "getting-started/installation",
            "getting-started/quick-start",
        ]
        doc = await store.find_by_path("getting-started/installation")
        assert 'href="/docs/getting-started/quick-start"' in doc.content_html

        again = (await client.post(f"{PREFIX}/admin/sync", params=params)).json()
        assert again["changed_paths"] == []
        assert again["unchanged_count"] == 2

    @pytest.mark.asyncio
    async def test_non_recursive_local_sync_skips_subfolders(self, client, store, docs_dir):
        (docs_dir / "overview.md").write_text("# Overview\n", encoding="utf-8")
        params = {"secret": settings.admin_secret, "path": str(docs_dir), "recursive": "false"}

        response = await client.post(f"{PREFIX}/admin/sync", params=params)

        assert response.json()["changed_paths"] == ["overview"]
        assert await store.find_by_path("getting-started/installation") is None

    @pytest.mark.asyncio
    async def test_missing_local_path_is_400(self, client, tmp_path):
        params = {"secret": settings.admin_secret, "path": str(tmp_path / "missing")}

        response = await client.post(f"{PREFIX}/admin/sync", params=params)

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_background_sync_queues_task(self, client):
        task = MagicMock()
        task.delay.return_value = MagicMock(id="task-123")
        params = {"secret": settings.admin_secret, "background": "true", "force": "true"}

        with patch("docsync.api.routes.admin.sync_documentation_task", task):
            response = await client.post(f"{PREFIX}/admin/sync", params=params)

        body = response.json()
        assert body["status"] == "queued"
        assert body["task_id"] == "task-123"
        task.delay.assert_called_once_with(force=True, local=False, path=None, recursive=True)

    @pytest.mark.asyncio
    async def test_task_status(self, client):
        info = {
            "task_id": "task-123",
            "state": "SUCCESS",
            "status": "SUCCESS",
            "ready": True,
            "successful": True,
            "failed": False,
            "result": {"status": "completed"},
        }
        with patch("docsync.api.routes.admin.get_task_info", return_value=info):
            response = await client.get(
                f"{PREFIX}/admin/tasks/task-123", params={"secret": settings.admin_secret}
            )

        assert response.json()["result"] == {"status": "completed"}

    @pytest.mark.asyncio
    async def test_stats(self, client, store):
        await add(store, "forms/introduction", "Introduction")
        await add(store, "forms/validation", "Validation")
        await add(store, "tables/columns", "Columns")

        response = await client.get(f"{PREFIX}/admin/stats", params={"secret": settings.admin_secret})

        assert response.json() == {"documents": 3, "sections": 2}
