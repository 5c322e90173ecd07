"""
Documentation Page Model
========================

One row per documentation page, keyed by its logical path
(e.g. "getting-started/installation", no extension).

Path as Natural Key:
--------------------
The path is unique and stable across sync runs. It is both the primary
lookup key and the page's place in the hierarchy: its first segment is the
navigation section.

Content Hash for Change Detection:
----------------------------------
content_hash holds the version identifier reported by the source (the git
blob SHA for GitHub and local trees). It is only ever compared for
equality: a sync that sees the same path with the same hash writes nothing.

content_html is always the rendered form of content_raw; both are written
together by the sync service and never updated independently.
"""

from __future__ import annotations
from sqlalchemy import Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from docsync.db.base import Base, TimestampMixin


class DocumentationPage(Base, TimestampMixin):
    """
    A synced documentation page.

    Attributes:
        path: Unique slash-delimited page path without extension
        title: From frontmatter or the first H1, "Documentation" otherwise
        description: Frontmatter description only
        content_raw: Markdown body with frontmatter removed
        content_html: Rendered, link-rewritten HTML of content_raw
        content_hash: Opaque source version identifier
        order: Manual ordering hint within the page's section
    """
    __tablename__ = "documentation"
    __table_args__ = (
        Index("ix_documentation_order_path", "order", "path"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    path: Mapped[str] = mapped_column(String(500), unique=True, index=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text)
    content_raw: Mapped[str] = mapped_column(Text, nullable=False)
    content_html: Mapped[str] = mapped_column(Text, nullable=False)
    content_hash: Mapped[str | None] = mapped_column(String(64), index=True)
    order: Mapped[int] = mapped_column(default=0)
