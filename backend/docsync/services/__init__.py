from docsync.config import Settings
from docsync.services.cache_service import CacheService, MemoryCache, RedisCache, create_cache_service
from docsync.services.document_store import DocumentStore, SqlDocumentStore, StoreError
from docsync.services.documentation_service import DocumentationService
from docsync.services.navigation_service import NavigationBuilder
from docsync.services.pipeline import DocumentPipeline
from docsync.services.sync_service import DocumentationSyncService, SyncAbortedError, SyncReport


def create_navigation_builder(
    store: DocumentStore,
    cache: CacheService,
    settings: Settings,
) -> NavigationBuilder:
    return NavigationBuilder(
        store,
        cache,
        sections=settings.docs_nav_sections,
        item_order=settings.docs_nav_item_order,
        cache_key=settings.docs_nav_cache_key,
        ttl=settings.docs_nav_cache_ttl,
    )


def create_sync_service(
    store: DocumentStore,
    cache: CacheService,
    settings: Settings,
) -> DocumentationSyncService:
    return DocumentationSyncService(
        store,
        create_navigation_builder(store, cache, settings),
        DocumentPipeline(base_path=settings.docs_base_path),
    )


def create_documentation_service(
    store: DocumentStore,
    cache: CacheService,
    settings: Settings,
) -> DocumentationService:
    return DocumentationService(
        store,
        create_navigation_builder(store, cache, settings),
        repo=settings.docs_github_repo,
        branch=settings.docs_github_branch,
        docs_path=settings.docs_github_path,
        search_min_length=settings.docs_search_min_length,
        search_limit=settings.docs_search_limit,
    )


__all__ = [
    "CacheService",
    "DocumentPipeline",
    "DocumentStore",
    "DocumentationService",
    "DocumentationSyncService",
    "MemoryCache",
    "NavigationBuilder",
    "RedisCache",
    "SqlDocumentStore",
    "StoreError",
    "SyncAbortedError",
    "SyncReport",
    "create_cache_service",
    "create_documentation_service",
    "create_navigation_builder",
    "create_sync_service",
]
