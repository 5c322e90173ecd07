"""Docs Sync CLI - sync and inspect the documentation store."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, TypeVar

import click

from docsync.config import settings
from docsync.db import async_session_maker, close_db, init_db
from docsync.services import (
    CacheService,
    DocumentStore,
    SqlDocumentStore,
    SyncAbortedError,
    create_cache_service,
    create_documentation_service,
    create_sync_service,
)
from docsync.services.sources import SourceUnavailableError, create_source

T = TypeVar("T")


def _run(action: Callable[[DocumentStore, CacheService], Awaitable[T]]) -> T:
    """Run an async action against a fresh session and cache, then clean up."""

    async def _main() -> T:
        await init_db()
        cache = create_cache_service(settings)
        try:
            async with async_session_maker() as db:
                return await action(SqlDocumentStore(db), cache)
        finally:
            await cache.close()
            await close_db()

    return asyncio.run(_main())


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log at DEBUG level")
def cli(verbose: bool):
    """Docs Sync CLI - sync and inspect the documentation store."""
    logging.basicConfig(
        level=logging.DEBUG if verbose or settings.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@cli.command()
@click.option("--force", is_flag=True, help="Force re-sync all documentation (clears existing)")
@click.option("--local", is_flag=True, help="Sync from the local docs folder instead of GitHub")
@click.option("--path", "path", default=None, help="Custom local path to sync docs from")
@click.option(
    "--recursive/--no-recursive",
    default=True,
    help="Include subfolders of the local docs folder",
)
def sync(force: bool, local: bool, path: str | None, recursive: bool):
    """Sync documentation from GitHub or the local filesystem."""
    try:
        source = create_source(settings, local=local, path=path, recursive=recursive)
    except FileNotFoundError as e:
        click.echo(f"✗ {e}", err=True)
        raise click.Abort()

    if force:
        click.echo("Clearing existing documentation...")
    click.echo(f"Syncing documentation from {source.describe()}")

    async def _sync(store: DocumentStore, cache: CacheService):
        try:
            return await create_sync_service(store, cache, settings).sync(source, force=force)
        finally:
            await source.close()

    try:
        report = _run(_sync)
    except SourceUnavailableError as e:
        click.echo(f"✗ Sync failed: {e}", err=True)
        raise click.Abort()
    except SyncAbortedError as e:
        click.echo(f"✗ Sync aborted after {len(e.report.changed_paths)} pages: {e}", err=True)
        raise click.Abort()

    if not report.changed_paths:
        click.echo("Documentation is already up to date.")
    else:
        click.echo(f"Synced {len(report.changed_paths)} documentation pages:")
        for changed in report.changed_paths:
            click.echo(f"  - {changed}")

    for failed in report.failed_paths:
        click.echo(f"  ! could not fetch {failed}", err=True)
    for folder in report.failed_folders:
        click.echo(f"  ! could not list {folder}/", err=True)

    click.echo("Done.")


@cli.command()
@click.argument("path")
@click.option("--raw", is_flag=True, help="Print the Markdown body instead of HTML")
def show(path: str, raw: bool):
    """Print a documentation page."""

    async def _show(store: DocumentStore, cache: CacheService):
        return await create_documentation_service(store, cache, settings).get_document(path)

    document = _run(_show)
    if document is None:
        click.echo(f"✗ No documentation page at '{path}'", err=True)
        raise click.Abort()

    click.echo(f"# {document.title}  ({document.path})")
    if document.description:
        click.echo(document.description)
    click.echo("")
    click.echo(document.content_raw if raw else document.content_html)


@cli.command()
@click.argument("query")
def search(query: str):
    """Search page titles and content."""

    async def _search(store: DocumentStore, cache: CacheService):
        return await create_documentation_service(store, cache, settings).search(query)

    results = _run(_search)
    if not results:
        click.echo("No results.")
        return
    for result in results:
        click.echo(f"{result.path}  {result.title}")


@cli.command()
def navigation():
    """Print the navigation tree."""

    async def _navigation(store: DocumentStore, cache: CacheService) -> list[dict[str, Any]]:
        return await create_documentation_service(store, cache, settings).get_navigation()

    for section in _run(_navigation):
        click.echo(section["title"])
        for item in section["items"]:
            click.echo(f"  {item['title']}  ({item['path']})")


if __name__ == "__main__":
    cli()
