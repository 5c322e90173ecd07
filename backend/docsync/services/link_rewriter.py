"""
Internal link rewriting for rendered documentation HTML.

Documentation sources link to each other the way they are laid out on disk
(``../introduction.md``, ``./select.md``, ``sibling.md``). On the site every
page lives under the docs base path without an extension, so each ``href``
is resolved against the folder of the page it appears in:

    source page: forms/fields/text-input  (folder: forms/fields)

    ../introduction.md         -> /docs/forms/introduction
    ./select.md                -> /docs/forms/fields/select
    sibling.md                 -> /docs/forms/fields/sibling
    guides/setup.md            -> /docs/guides/setup
    https://example.com/x.md   -> unchanged
    #section, /absolute        -> unchanged

Only ``href`` attributes of real elements are touched; text inside
``<code>``/``<pre>`` is left alone even when it spells out an ``href``.
Rewritten links are absolute, so running the pass twice is a no-op.
"""

from __future__ import annotations
import posixpath
import re

from bs4 import BeautifulSoup

SCHEME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")
MD_SUFFIX = ".md"


def document_folder(path: str) -> str:
    """Folder part of a document path, '' for top-level pages."""
    folder = posixpath.dirname(path.strip("/"))
    return "" if folder == "." else folder


def _join(*parts: str) -> str:
    return "/".join(part.strip("/") for part in parts if part.strip("/"))


def resolve_link(link: str, folder: str, base_path: str = "/docs") -> str:
    if not link or link.startswith(("#", "/")) or SCHEME_PATTERN.match(link):
        return link

    target, hash_mark, fragment = link.partition("#")
    if target.endswith(MD_SUFFIX):
        target = target[: -len(MD_SUFFIX)]

    base = base_path.rstrip("/")
    if target.startswith("../"):
        parent = folder
        while target.startswith("../"):
            target = target[3:]
            parent = document_folder(parent)
        resolved = _join(parent, target)
    elif target.startswith("./"):
        resolved = _join(folder, target[2:])
    elif "/" not in target and folder:
        resolved = _join(folder, target)
    else:
        resolved = _join(target)

    return f"{base}/{resolved}{hash_mark}{fragment}"


def rewrite_links(html: str, folder: str, base_path: str = "/docs") -> str:
    if not html:
        return html

    soup = BeautifulSoup(html, "html.parser")
    for tag in soup.find_all(href=True):
        tag["href"] = resolve_link(tag["href"], folder, base_path)
    return str(soup)
