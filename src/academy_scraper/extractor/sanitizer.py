"""Reduce raw HTML to an allow-listed, well-formed subset.

The passes run in a fixed order:

1. Blocklisted elements (scripts, styling, site chrome, hidden widgets) are
   removed together with their subtrees, along with comments and doctypes.
2. Every remaining tag outside the allow-list is unwrapped: its children
   stay, the tag goes.  Block containers carrying a callout marker class
   become ``<blockquote>`` and ones marked as code blocks become ``<pre>``
   (unless they already wrap one), so the segmenter can still classify them.
3. Attributes outside a small per-tag allow-list are dropped.
4. Elements left empty are removed bottom-up.

Blocklist removal must come first, otherwise unwrapping would release the
contents of a ``<nav>`` or ``<script>`` into the document.

Fragments are parsed with ``html.parser`` so the output is never wrapped in
``<html>``/``<body>`` and re-parsing it does not restructure anything;
``sanitize(sanitize(x)) == sanitize(x)``.
"""

import logging
import re

from bs4 import BeautifulSoup, Tag
from bs4.element import PreformattedString

from academy_scraper.utils.markers import has_callout_marker, has_code_marker

logger = logging.getLogger(__name__)

BLOCKED_TAGS = frozenset({
    "script", "style", "noscript", "template",
    "head", "title", "meta", "link",
    "nav", "header", "footer",
    "iframe", "object", "embed",
    "form", "button", "input", "select", "textarea",
    "canvas", "svg",
})

ALLOWED_TAGS = frozenset({
    "p",
    "h1", "h2", "h3", "h4", "h5", "h6",
    "table", "thead", "tbody", "tfoot", "tr", "th", "td", "caption",
    "pre", "code", "kbd", "samp",
    "ul", "ol", "li", "dl", "dt", "dd",
    "strong", "b", "em", "i", "u", "s", "del", "mark", "sub", "sup",
    "a", "img", "blockquote", "br", "hr",
})

# Containers re-tagged when they carry a callout or code marker
_CALLOUT_CONTAINERS = frozenset({"div", "section", "article", "aside", "details", "figure"})
_BLOCK_CONTAINERS = _CALLOUT_CONTAINERS | {"main", "summary", "figcaption", "center", "html", "body"}

_GLOBAL_ATTRIBUTES = frozenset({"class", "title", "data-title"})
_TAG_ATTRIBUTES: dict[str, frozenset[str]] = {
    "a": frozenset({"href"}),
    "img": frozenset({"src", "alt"}),
    "td": frozenset({"colspan", "rowspan"}),
    "th": frozenset({"colspan", "rowspan"}),
}

# Never removed as "empty": self-closing content carriers and table cells
# (dropping a cell would shift the remaining columns).
_KEEP_EMPTY = frozenset({"br", "hr", "img", "td", "th"})

_HIDDEN_STYLE_RE = re.compile(r"display\s*:\s*none|visibility\s*:\s*hidden", re.IGNORECASE)


def sanitize(html: str) -> str:
    """Return the allow-listed form of an HTML fragment."""
    if not html or not html.strip():
        return ""

    soup = BeautifulSoup(html, "html.parser")

    _remove_blocked(soup)
    _unwrap_disallowed(soup)
    _strip_attributes(soup)
    _remove_empty(soup)

    # The passes leave whitespace runs html.parser folds on the next parse
    # (" " followed by an inserted "\n"); one more parse settles them.
    return str(BeautifulSoup(str(soup).strip(), "html.parser")).strip()


def _is_hidden(tag: Tag) -> bool:
    """Detect hidden widgets (modals, toggled panels, off-screen helpers)."""
    if tag.has_attr("hidden"):
        return True
    if str(tag.get("aria-hidden", "")).lower() == "true":
        return True
    style = tag.get("style")
    return bool(style and _HIDDEN_STYLE_RE.search(str(style)))


def _remove_blocked(soup: BeautifulSoup) -> None:
    for node in soup.find_all(string=lambda s: isinstance(s, PreformattedString)):
        node.extract()

    removed = 0
    for tag in soup.find_all(True):
        if tag.decomposed:
            continue
        if tag.name in BLOCKED_TAGS or _is_hidden(tag):
            tag.decompose()
            removed += 1
    if removed:
        logger.debug("Removed %d blocklisted elements", removed)


def _unwrap_disallowed(soup: BeautifulSoup) -> None:
    for tag in soup.find_all(True):
        if tag.name in ALLOWED_TAGS:
            continue
        if tag.name in _CALLOUT_CONTAINERS and has_callout_marker(tag):
            tag.name = "blockquote"
            continue
        if tag.name in _CALLOUT_CONTAINERS and has_code_marker(tag) and not tag.find("pre"):
            tag.name = "pre"
            continue
        if tag.name in _BLOCK_CONTAINERS:
            # Keep sibling blocks from running together once the tag is gone
            tag.insert_after("\n")
        tag.unwrap()


def _strip_attributes(soup: BeautifulSoup) -> None:
    for tag in soup.find_all(True):
        allowed = _GLOBAL_ATTRIBUTES | _TAG_ATTRIBUTES.get(tag.name, frozenset())
        attrs = {k: v for k, v in tag.attrs.items() if k in allowed}
        href = attrs.get("href")
        if isinstance(href, str) and href.strip().lower().startswith("javascript:"):
            del attrs["href"]
        if not attrs.get("class"):
            attrs.pop("class", None)
        tag.attrs = attrs


def _remove_empty(soup: BeautifulSoup) -> None:
    # Bottom-up: children are handled before their parents, so a container
    # is only removed once everything inside it has gone.
    for tag in reversed(soup.find_all(True)):
        if tag.name in _KEEP_EMPTY:
            continue
        if tag.get_text(strip=True):
            continue
        if tag.find(list(_KEEP_EMPTY)):
            continue
        tag.decompose()


def has_content(html: str) -> bool:
    """Whether a sanitized fragment carries any text or image."""
    if not html:
        return False
    soup = BeautifulSoup(html, "html.parser")
    return bool(soup.get_text(strip=True)) or soup.find("img") is not None
