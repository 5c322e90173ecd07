from __future__ import annotations
import logging
import posixpath
from dataclasses import dataclass

from docsync.services.frontmatter import parse_frontmatter, read_metadata
from docsync.services.link_rewriter import document_folder, rewrite_links
from docsync.services.markdown_renderer import MarkdownRenderer

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIX = ".md"


@dataclass
class ProcessedDocument:
    title: str
    description: str | None
    order: int
    content_raw: str
    content_html: str


def derive_document_path(remote_path: str, root: str = "") -> str:
    """
    Map a source file path to its logical document path.

    "docs/forms/introduction.md" with root "docs" -> "forms/introduction"
    """
    path = posixpath.normpath(remote_path.replace("\\", "/")).lstrip("/")
    root = root.strip("/")
    if root and path.startswith(f"{root}/"):
        path = path[len(root) + 1:]
    if path.endswith(MARKDOWN_SUFFIX):
        path = path[: -len(MARKDOWN_SUFFIX)]
    return path


class DocumentPipeline:
    """
    Fixed transformation chain for one document:

        raw -> frontmatter split -> title/metadata -> Markdown render -> link rewrite

    content_html is only ever produced here, from the same body that is
    stored as content_raw.
    """

    def __init__(
        self,
        renderer: MarkdownRenderer | None = None,
        base_path: str = "/docs",
    ) -> None:
        self.renderer = renderer or MarkdownRenderer()
        self.base_path = base_path

    def render(self, path: str, body: str) -> str:
        html = self.renderer.render(body)
        return rewrite_links(html, document_folder(path), self.base_path)

    def process(self, path: str, raw: str) -> ProcessedDocument:
        meta, body = parse_frontmatter(raw)
        info = read_metadata(meta, body)

        logger.debug(f"Processing '{path}' (title={info.title!r}, order={info.order})")
        return ProcessedDocument(
            title=info.title,
            description=info.description,
            order=info.order,
            content_raw=body,
            content_html=self.render(path, body),
        )
