from fastapi import HTTPException, status

from docsync.config import settings
from docsync.schemas.documentation import DocumentPage
from docsync.services import DocumentationService


async def get_page_or_404(service: DocumentationService, path: str) -> DocumentPage:
    page = await service.get_page(path)
    if page is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Documentation page '{path}' not found",
        )
    return page


def not_synced_page(path: str) -> DocumentPage:
    """Placeholder shown on the landing page before the first sync."""
    return DocumentPage(
        path=path,
        title="Documentation",
        description="Run `docsync sync` to fetch the documentation.",
        html=(
            "<h1>Documentation Not Synced</h1>"
            "<p>Please run <code>docsync sync</code> to fetch the documentation.</p>"
        ),
        edit_url=(
            f"https://github.com/{settings.docs_github_repo}/tree/"
            f"{settings.docs_github_branch}/{settings.docs_github_path}"
        ),
    )


def describe_requested_source(local: bool, path: str | None) -> str:
    if local or path:
        return f"local:{path or settings.docs_local_path}"
    return (
        f"github:{settings.docs_github_repo}@{settings.docs_github_branch}"
        f"/{settings.docs_github_path}"
    )
