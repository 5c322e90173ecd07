"""Shared fixtures: in-memory SQLite store, memory cache and a fake source tree."""

from __future__ import annotations

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from docsync.db.session import create_session_maker, init_db
from docsync.services import CacheService, MemoryCache, NavigationBuilder, SqlDocumentStore
from docsync.services.sources import FetchError, RemoteFile, TreeEntry, TreeSource
from docsync.utils.files import git_blob_sha


class FakeSource(TreeSource):
    """
    In-memory source tree keyed by remote path ("docs/forms/intro.md").

    Records every body fetch so tests can assert what was (not) downloaded.
    """

    def __init__(
        self,
        files: dict[str, str],
        root: str = "docs",
        failing_folders: set[str] | None = None,
        failing_files: set[str] | None = None,
    ) -> None:
        super().__init__(root=root)
        self.files = dict(files)
        self.failing_folders = failing_folders or set()
        self.failing_files = failing_files or set()
        self.fetched: list[str] = []

    def describe(self) -> str:
        return "fake:docs"

    async def list_folder(self, path: str) -> list[TreeEntry]:
        if path in self.failing_folders:
            raise FetchError(f"listing '{path}' failed")

        prefix = f"{path}/" if path else ""
        entries: dict[str, TreeEntry] = {}
        for remote in sorted(self.files):
            if not remote.startswith(prefix):
                continue
            head, sep, _ = remote[len(prefix):].partition("/")
            if sep:
                entries.setdefault(head, TreeEntry("dir", head, f"{prefix}{head}"))
            else:
                entries[head] = TreeEntry(
                    "file", head, remote, git_blob_sha(self.files[remote].encode("utf-8"))
                )
        return list(entries.values())

    async def read_file(self, remote_file: RemoteFile) -> str:
        if remote_file.remote_path in self.failing_files:
            raise FetchError(f"download of '{remote_file.remote_path}' failed")
        self.fetched.append(remote_file.remote_path)
        return self.files[remote_file.remote_path]


@pytest.fixture
def make_source():
    return FakeSource


@pytest_asyncio.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    async with create_session_maker(db_engine)() as session:
        yield session


@pytest.fixture
def store(db_session):
    return SqlDocumentStore(db_session)


@pytest.fixture
def cache():
    return CacheService(MemoryCache())


@pytest.fixture
def navigation(store, cache):
    return NavigationBuilder(
        store,
        cache,
        sections={"getting-started": "Getting Started", "forms": "Forms"},
        item_order={"getting-started": ["installation", "quick-start"]},
    )
