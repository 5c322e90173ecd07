"""
Sync Service - Source Tree to Document Store
============================================

One sync pass walks a source tree and brings the document store in line
with it:

    ┌────────────┐  list_files  ┌───────────────┐  upsert  ┌───────────┐
    │ TreeSource │─────────────▶│  SyncService  │─────────▶│   Store   │
    └────────────┘  read_file   └───────────────┘          └───────────┘
                                        │ invalidate
                                        ▼
                                 NavigationBuilder

Change Detection:
-----------------
Every listed file carries the source's content hash (git blob SHA). A file
whose path is already stored with the same hash is skipped without
fetching its body. When another page already stores that exact body, the
stored body is reused and only re-rendered, because relative links depend
on the folder the page lives in. Either way a pass over an unchanged tree
makes no network reads beyond the listings and no writes.

Failure Semantics:
------------------
- Root listing fails: SourceUnavailableError, nothing written
- A subtree listing fails: recorded in failed_folders, pass continues
- A body download fails: recorded in failed_paths, pass continues
- A file cannot be processed (bad path, render or validation error):
  recorded in failed_paths, pass continues
- A store write fails: the pass stops, SyncAbortedError carries the
  partial report

Nothing is deleted outside force mode. The navigation cache is invalidated
after every pass, including aborted ones.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from docsync.schemas.documentation import Document
from docsync.services.document_store import DocumentStore, StoreError
from docsync.services.navigation_service import NavigationBuilder
from docsync.services.pipeline import DocumentPipeline, ProcessedDocument, derive_document_path
from docsync.services.sources import FetchError, RemoteFile, TreeSource

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]


@dataclass
class SyncReport:
    """Outcome of one sync pass."""
    source: str
    forced: bool = False
    changed_paths: list[str] = field(default_factory=list)
    unchanged_paths: list[str] = field(default_factory=list)
    failed_paths: list[str] = field(default_factory=list)
    failed_folders: list[str] = field(default_factory=list)

    @property
    def is_partial(self) -> bool:
        return bool(self.failed_paths or self.failed_folders)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": "partial" if self.is_partial else "completed",
            "source": self.source,
            "forced": self.forced,
            "changed_paths": list(self.changed_paths),
            "unchanged_count": len(self.unchanged_paths),
            "failed_paths": list(self.failed_paths),
            "failed_folders": list(self.failed_folders),
        }


class SyncAbortedError(Exception):
    """A store error stopped the pass. report holds what was done before it."""

    def __init__(self, message: str, report: SyncReport) -> None:
        super().__init__(message)
        self.report = report


class DocumentationSyncService:
    """
    Runs sync passes against a document store.

    Usage:
        service = DocumentationSyncService(store, navigation)
        report = await service.sync(GitHubSource("laravilt/laravilt"))
        print(report.changed_paths)
    """

    def __init__(
        self,
        store: DocumentStore,
        navigation: NavigationBuilder,
        pipeline: DocumentPipeline | None = None,
    ) -> None:
        self.store = store
        self.navigation = navigation
        self.pipeline = pipeline or DocumentPipeline()

    async def sync(
        self,
        source: TreeSource,
        force: bool = False,
        progress: ProgressCallback | None = None,
    ) -> SyncReport:
        report = SyncReport(source=source.describe(), forced=force)

        try:
            if force:
                deleted = await self.store.delete_all()
                await self.navigation.invalidate()
                logger.info(f"Force sync: cleared {deleted} documents")

            listing = await source.list_files()
            report.failed_folders.extend(listing.failed_folders)
            total = len(listing.files)

            for index, remote in enumerate(listing.files, start=1):
                path = derive_document_path(remote.remote_path, source.root)
                if progress:
                    progress(index, total, f"Syncing {path}")
                try:
                    await self._sync_file(source, remote, path, report)
                except StoreError:
                    raise
                except Exception as e:
                    logger.warning(f"Could not sync '{remote.remote_path}': {e}")
                    report.failed_paths.append(path or remote.remote_path)
        except StoreError as e:
            logger.error(f"Sync of {report.source} aborted: {e}")
            raise SyncAbortedError(f"Sync aborted: {e}", report) from e
        finally:
            await self.navigation.invalidate()

        logger.info(
            f"Synced {report.source}: {len(report.changed_paths)} changed, "
            f"{len(report.unchanged_paths)} unchanged, {len(report.failed_paths)} failed files, "
            f"{len(report.failed_folders)} failed folders"
        )
        return report

    async def _sync_file(
        self,
        source: TreeSource,
        remote: RemoteFile,
        path: str,
        report: SyncReport,
    ) -> None:
        content_hash = remote.content_hash or None

        if content_hash:
            existing = await self.store.find_by_path(path)
            if existing is not None and existing.content_hash == content_hash:
                logger.debug(f"'{path}' unchanged, skipping")
                report.unchanged_paths.append(path)
                return

            twin = await self.store.find_by_hash(content_hash)
            if twin is not None:
                logger.debug(f"'{path}' has the same content as '{twin.path}', reusing it")
                processed = self._reuse(path, twin)
                await self._save(path, content_hash, processed)
                report.changed_paths.append(path)
                return

        try:
            raw = await source.fetch_content(remote)
        except FetchError as e:
            logger.warning(f"Could not fetch '{remote.remote_path}': {e}")
            report.failed_paths.append(path)
            return

        processed = self.pipeline.process(path, raw)
        await self._save(path, content_hash, processed)
        report.changed_paths.append(path)

    def _reuse(self, path: str, twin: Document) -> ProcessedDocument:
        return ProcessedDocument(
            title=twin.title,
            description=twin.description,
            order=twin.order,
            content_raw=twin.content_raw,
            content_html=self.pipeline.render(path, twin.content_raw),
        )

    async def _save(
        self,
        path: str,
        content_hash: str | None,
        processed: ProcessedDocument,
    ) -> Document:
        return await self.store.upsert(
            Document(
                path=path,
                title=processed.title,
                description=processed.description,
                content_raw=processed.content_raw,
                content_html=processed.content_html,
                content_hash=content_hash,
                order=processed.order,
            )
        )
