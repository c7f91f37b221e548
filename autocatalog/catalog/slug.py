"""Slug codec.

Turns display names, plain or rich text, into URL-safe lowercase slugs
and compares them without requiring either side to be pre-slugified.
"""

import re
from typing import Any

from bs4 import BeautifulSoup

# Tags that separate words; other tags are inline and join their text.
BLOCK_TAGS = [
    "br", "p", "div", "li", "ul", "ol",
    "h1", "h2", "h3", "h4", "h5", "h6",
    "tr", "td", "th",
]

_WHITESPACE_RE = re.compile(r"\s+")
# Anything that is not a Unicode letter or digit; underscore counts as a separator.
_SEPARATOR_RE = re.compile(r"[\W_]+")

SEPARATOR = "-"


def plain_text(value: Any) -> str:
    """Strip formatting and return only the text content.

    Accepts plain strings (HTML tags are removed and entities unescaped),
    block-editor JSON (dicts with ``text`` or ``children``, or lists of
    such nodes) and None.

    Args:
        value: Rich or plain text.

    Returns:
        Whitespace-collapsed text.
    """
    return _WHITESPACE_RE.sub(" ", _collect_text(value)).strip()


def _markup_text(value: str) -> str:
    if "<" not in value and "&" not in value:
        return value
    soup = BeautifulSoup(value, "html.parser")
    for tag in soup.find_all(BLOCK_TAGS):
        tag.insert_before(" ")
        tag.insert_after(" ")
    return soup.get_text()


def _collect_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return _markup_text(value)
    if isinstance(value, dict):
        if "text" in value:
            return _collect_text(value["text"])
        # Inline children of one node are contiguous text.
        return "".join(_collect_text(child) for child in value.get("children") or [])
    if isinstance(value, (list, tuple)):
        return " ".join(_collect_text(item) for item in value)
    return str(value)


def slugify(value: Any) -> str:
    """Build a slug from a display name.

    Args:
        value: Rich or plain text.

    Returns:
        Lowercase slug; separator runs collapsed, no leading/trailing separator.
    """
    text = plain_text(value).lower()
    return _SEPARATOR_RE.sub(SEPARATOR, text).strip(SEPARATOR)


def slug_equals(a: Any, b: Any) -> bool:
    """Compare two names or slugs by their slug form."""
    return slugify(a) == slugify(b)
