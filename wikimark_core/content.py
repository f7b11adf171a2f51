"""Rendering of article bodies into HTML fragments."""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from typing import Final

import markdown2

from wikimark_core.wiki import parse_wiki

logger = logging.getLogger(__name__)

SUPPORTED_SYNTAXES: Final = ("wiki", "markdown")

# Only bodies up to this size are memoised; longer ones are rendered each time.
CACHEABLE_LENGTH: Final[int] = 8_192

_HTML_TAG_RE: Final[re.Pattern[str]] = re.compile(r"<\s*[a-zA-Z][^>]*>")


def _looks_like_html(content: str) -> bool:
    """Return ``True`` when the content already appears to be HTML."""

    return bool(_HTML_TAG_RE.search(content.strip()))


def _render(content: str, syntax: str) -> str:
    if syntax == "wiki":
        return parse_wiki(content)

    if _looks_like_html(content):
        return content
    return markdown2.markdown(content)


_render_cached = lru_cache(maxsize=64)(_render)


def render_content(content: str, syntax: str = "wiki") -> str:
    """Convert an article body into an HTML fragment.

    ``wiki`` bodies go through the wiki converter.  ``markdown`` bodies are
    converted with markdown2 unless they already look like HTML, in which
    case they are returned as-is.  Blank bodies render to an empty string.
    """

    if syntax not in SUPPORTED_SYNTAXES:
        raise ValueError(f"Unsupported syntax '{syntax}'")

    if not content or not content.strip():
        return ""

    if len(content) <= CACHEABLE_LENGTH:
        html = _render_cached(content, syntax)
    else:
        html = _render(content, syntax)
    logger.debug("Rendered %d characters of %s into %d characters", len(content), syntax, len(html))
    return html
