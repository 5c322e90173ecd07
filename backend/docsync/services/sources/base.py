"""
Documentation Sources
=====================

A source enumerates the Markdown files of a documentation tree and hands
out their raw bodies. Two backends share one contract:

- GitHubSource: the repository contents API + raw file downloads
- LocalSource: a directory on disk

Traversal:
----------
Folders are walked depth-first and files come back in listing order. A
folder whose listing fails is logged, recorded in TreeListing.failed_folders
and skipped; the rest of the tree is still returned. Only a failure to list
the root itself is fatal (SourceUnavailableError).

Child folders of one directory are listed concurrently, bounded by a
semaphore so a rate-limited API never sees more than max_concurrency
requests in flight.
"""

from __future__ import annotations
import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Literal

from docsync.utils.files import is_markdown_file

logger = logging.getLogger(__name__)


class SourceError(Exception):
    """Base exception for documentation source errors."""


class FetchError(SourceError):
    """A folder listing or file download failed."""


class RateLimitError(FetchError):
    """The remote API refused the request because of rate limiting."""


class SourceUnavailableError(SourceError):
    """The root of the documentation tree could not be listed."""


@dataclass(frozen=True)
class TreeEntry:
    kind: Literal["file", "dir"]
    name: str
    path: str
    content_hash: str | None = None


@dataclass(frozen=True)
class RemoteFile:
    remote_path: str
    content_hash: str


@dataclass
class TreeListing:
    files: list[RemoteFile] = field(default_factory=list)
    failed_folders: list[str] = field(default_factory=list)

    @property
    def is_partial(self) -> bool:
        return bool(self.failed_folders)


class TreeSource(ABC):
    """Common depth-first traversal over a folder-listing backend."""

    def __init__(
        self,
        root: str = "",
        recursive: bool = True,
        max_concurrency: int = 4,
    ) -> None:
        self.root = root.strip("/")
        self.recursive = recursive
        self._semaphore = asyncio.Semaphore(max_concurrency)

    @abstractmethod
    async def list_folder(self, path: str) -> list[TreeEntry]:
        """List one folder. Raises FetchError on failure."""

    @abstractmethod
    async def read_file(self, remote_file: RemoteFile) -> str:
        """Return the raw body of a file. Raises FetchError on failure."""

    @abstractmethod
    def describe(self) -> str:
        """Human-readable source description for logs and reports."""

    async def fetch_content(self, remote_file: RemoteFile) -> str:
        return await self.read_file(remote_file)

    async def close(self) -> None:
        """Release backend resources. No-op unless the backend holds any."""

    async def list_files(self) -> TreeListing:
        listing = TreeListing()
        try:
            listing.files = await self._walk(self.root, listing)
        except FetchError as e:
            raise SourceUnavailableError(
                f"Could not list documentation root of {self.describe()}: {e}"
            ) from e

        logger.info(
            f"Found {len(listing.files)} markdown files in {self.describe()}"
            + (f" ({len(listing.failed_folders)} folders failed)" if listing.is_partial else "")
        )
        return listing

    async def _list(self, path: str) -> list[TreeEntry]:
        async with self._semaphore:
            return await self.list_folder(path)

    async def _walk(self, folder: str, listing: TreeListing) -> list[RemoteFile]:
        entries = await self._list(folder)

        chunks: list[list[RemoteFile]] = []
        subfolders: list[tuple[int, str]] = []
        for entry in entries:
            if entry.kind == "file" and is_markdown_file(entry.name):
                chunks.append([RemoteFile(entry.path, entry.content_hash or "")])
            elif entry.kind == "dir" and self.recursive:
                subfolders.append((len(chunks), entry.path))
                chunks.append([])

        results = await asyncio.gather(
            *(self._walk_subtree(path, listing) for _, path in subfolders)
        )
        for (index, _), files in zip(subfolders, results):
            chunks[index] = files

        return [remote for chunk in chunks for remote in chunk]

    async def _walk_subtree(self, folder: str, listing: TreeListing) -> list[RemoteFile]:
        try:
            return await self._walk(folder, listing)
        except FetchError as e:
            logger.warning(f"Skipping folder '{folder}' of {self.describe()}: {e}")
            listing.failed_folders.append(folder)
            return []
