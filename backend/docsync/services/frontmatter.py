from __future__ import annotations
import logging
import re
from dataclasses import dataclass
from typing import Any

import yaml

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Documentation"
ORDER_MIN = -(2**31)
ORDER_MAX = 2**31 - 1

FRONTMATTER_PATTERN = re.compile(
    r"\A\s*---[ \t]*\r?\n(?:(?P<meta>.*?)\r?\n)?---[ \t]*(?:\r?\n|\Z)",
    re.DOTALL,
)
H1_PATTERN = re.compile(r"^#[ \t]+(.+?)\s*$")
FENCE_PATTERN = re.compile(r"^\s*(```|~~~)")


@dataclass
class FrontMatter:
    title: str
    description: str | None
    order: int


def parse_frontmatter(raw: str) -> tuple[dict[str, Any], str]:
    """
    Split a raw document into (metadata, body).

    Documents without a leading ``---`` block come back untouched with empty
    metadata. A block that is not valid YAML, or not a mapping, degrades the
    same way: the whole input is the body.
    """
    match = FRONTMATTER_PATTERN.match(raw)
    if not match:
        return {}, raw

    try:
        meta = yaml.safe_load(match.group("meta") or "")
    except yaml.YAMLError as e:
        logger.debug(f"Ignoring malformed frontmatter: {e}")
        return {}, raw

    if meta is None:
        meta = {}
    if not isinstance(meta, dict):
        logger.debug(f"Ignoring non-mapping frontmatter ({type(meta).__name__})")
        return {}, raw

    return meta, raw[match.end():]


def extract_title(body: str) -> str:
    """Return the first level-1 heading outside code fences, or the default title."""
    fence: str | None = None
    for line in body.splitlines():
        fence_match = FENCE_PATTERN.match(line)
        if fence_match:
            marker = fence_match.group(1)
            if fence is None:
                fence = marker
            elif marker == fence:
                fence = None
            continue
        if fence:
            continue

        heading = H1_PATTERN.match(line)
        if heading:
            return heading.group(1).strip()
    return DEFAULT_TITLE


def _coerce_order(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    try:
        order = int(value)
    except (TypeError, ValueError, OverflowError):
        return 0
    # stored in a 32-bit INTEGER column
    if not ORDER_MIN <= order <= ORDER_MAX:
        return 0
    return order


def read_metadata(meta: dict[str, Any], body: str) -> FrontMatter:
    title = meta.get("title")
    if not isinstance(title, str) or not title.strip():
        title = extract_title(body)

    description = meta.get("description")
    if description is not None:
        description = str(description).strip() or None

    return FrontMatter(
        title=title.strip(),
        description=description,
        order=_coerce_order(meta.get("order", 0)),
    )
