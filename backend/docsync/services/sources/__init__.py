from __future__ import annotations
from pathlib import Path

from docsync.config import Settings
from docsync.services.sources.base import (
    FetchError,
    RateLimitError,
    RemoteFile,
    SourceError,
    SourceUnavailableError,
    TreeEntry,
    TreeListing,
    TreeSource,
)
from docsync.services.sources.github import GitHubSource
from docsync.services.sources.local import LocalSource
from docsync.utils.files import resolve_docs_dir


def create_source(
    settings: Settings,
    local: bool = False,
    path: str | Path | None = None,
    recursive: bool = True,
) -> TreeSource:
    """
    Build the source a sync run reads from.

    local=True (or an explicit path) walks a directory on disk; the path
    must exist; recursive=False lists only its top level. Otherwise the
    configured GitHub repository is used.
    """
    if local or path is not None:
        base_dir = resolve_docs_dir(path or settings.docs_local_path)
        return LocalSource(
            base_dir,
            recursive=recursive,
            max_concurrency=settings.docs_fetch_max_concurrency,
        )

    return GitHubSource(
        repo=settings.docs_github_repo,
        branch=settings.docs_github_branch,
        root=settings.docs_github_path,
        token=settings.docs_github_token,
        api_url=settings.docs_github_api_url,
        raw_url=settings.docs_github_raw_url,
        user_agent=settings.docs_user_agent,
        timeout=settings.docs_http_timeout,
        max_concurrency=settings.docs_fetch_max_concurrency,
        max_attempts=settings.docs_fetch_max_attempts,
        backoff=settings.docs_fetch_backoff,
    )


__all__ = [
    "FetchError",
    "GitHubSource",
    "LocalSource",
    "RateLimitError",
    "RemoteFile",
    "SourceError",
    "SourceUnavailableError",
    "TreeEntry",
    "TreeListing",
    "TreeSource",
    "create_source",
]
