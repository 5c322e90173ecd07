"""
Markdown Renderer
=================

Converts a Markdown body (frontmatter already removed) into an embeddable
HTML fragment.

Extension set:
--------------
- tables, fenced_code, sane_lists    standard Python-Markdown extensions
- pymdownx.tilde                     ~~strikethrough~~ (subscript disabled)
- pymdownx.magiclink                 bare URLs / emails become links
- pymdownx.tasklist                  - [ ] / - [x] task lists
- toc                                heading ids + [TOC] placeholder (h2-h3)
- HeadingPermalinkExtension          "#" permalink before every h2-h4

Heading ids are prefixed ("content-installation") so they cannot collide
with ids used by the surrounding page layout.

The output is passed through BeautifulSoup to drop active content
(script/style/iframe/object/embed, on* handlers, javascript: URLs).
"""

from __future__ import annotations
import html
import logging
import xml.etree.ElementTree as etree

import markdown
from bs4 import BeautifulSoup
from markdown.extensions import Extension
from markdown.extensions.toc import slugify
from markdown.treeprocessors import Treeprocessor

logger = logging.getLogger(__name__)

ANCHOR_PREFIX = "content"
PERMALINK_CLASS = "heading-permalink"
PERMALINK_SYMBOL = "#"
PERMALINK_TITLE = "Permalink"
TOC_CLASS = "table-of-contents"
TOC_PLACEHOLDER = "[TOC]"

UNSAFE_TAGS = ["script", "style", "iframe", "object", "embed"]
URL_ATTRIBUTES = ("href", "src", "action", "formaction")


def prefixed_slugify(value: str, separator: str) -> str:
    return f"{ANCHOR_PREFIX}{separator}{slugify(value, separator)}"


class HeadingPermalinkTreeprocessor(Treeprocessor):
    """Insert a permalink anchor as the first child of h2-h4 headings."""

    def __init__(self, md: markdown.Markdown, min_level: int, max_level: int) -> None:
        super().__init__(md)
        self.levels = {f"h{n}" for n in range(min_level, max_level + 1)}

    def run(self, root: etree.Element) -> None:
        headings = [
            el for el in root.iter()
            if el.tag in self.levels and "id" in el.attrib
        ]
        for el in headings:
            anchor = etree.Element("a")
            anchor.set("class", PERMALINK_CLASS)
            anchor.set("href", f"#{el.attrib['id']}")
            anchor.set("aria-hidden", "true")
            anchor.set("title", PERMALINK_TITLE)
            anchor.text = PERMALINK_SYMBOL
            anchor.tail = el.text
            el.text = None
            el.insert(0, anchor)


class HeadingPermalinkExtension(Extension):

    def __init__(self, **kwargs) -> None:
        self.config = {
            "min_level": [2, "Lowest heading level that gets a permalink"],
            "max_level": [4, "Highest heading level that gets a permalink"],
        }
        super().__init__(**kwargs)

    def extendMarkdown(self, md: markdown.Markdown) -> None:
        processor = HeadingPermalinkTreeprocessor(
            md,
            self.getConfig("min_level"),
            self.getConfig("max_level"),
        )
        # toc runs at priority 5 and assigns the ids this processor links to
        md.treeprocessors.register(processor, "heading_permalink", 4)


class MarkdownRenderer:
    """Deterministic Markdown -> HTML fragment conversion."""

    def __init__(
        self,
        permalink_levels: tuple[int, int] = (2, 4),
        toc_levels: tuple[int, int] = (2, 3),
    ) -> None:
        self.permalink_levels = permalink_levels
        self.toc_levels = toc_levels

    def _build(self) -> markdown.Markdown:
        min_level, max_level = self.permalink_levels
        return markdown.Markdown(
            extensions=[
                "tables",
                "fenced_code",
                "sane_lists",
                "pymdownx.tilde",
                "pymdownx.magiclink",
                "pymdownx.tasklist",
                "toc",
                HeadingPermalinkExtension(min_level=min_level, max_level=max_level),
            ],
            extension_configs={
                "pymdownx.tilde": {"subscript": False},
                "toc": {
                    "marker": TOC_PLACEHOLDER,
                    "toc_depth": f"{self.toc_levels[0]}-{self.toc_levels[1]}",
                    "toc_class": TOC_CLASS,
                    "slugify": prefixed_slugify,
                    "permalink": False,
                },
            },
            output_format="html",
        )

    def render(self, body: str) -> str:
        if not body.strip():
            return ""

        try:
            rendered = self._build().convert(body)
            return sanitize_html(rendered)
        except Exception as e:
            logger.warning(f"Markdown rendering failed, falling back to escaped text: {e}")
            return f"<pre>{html.escape(body)}</pre>"


def sanitize_html(fragment: str) -> str:
    soup = BeautifulSoup(fragment, "html.parser")

    for tag in soup.find_all(UNSAFE_TAGS):
        tag.decompose()

    for tag in soup.find_all(True):
        for attr in list(tag.attrs):
            if attr.lower().startswith("on"):
                del tag.attrs[attr]
            elif attr.lower() in URL_ATTRIBUTES:
                value = str(tag.attrs[attr]).strip().lower()
                if value.startswith(("javascript:", "vbscript:")):
                    del tag.attrs[attr]

    return str(soup)
