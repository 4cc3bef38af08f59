"""Class-name markers that identify callout and code containers.

Shared by the sanitizer (which must keep marked containers) and the
segmenter (which classifies them).  Callout matching is done per class
token, so ``alert-info`` and ``callout_warning`` match while ``tooltip``
does not.
"""

import re

from bs4 import Tag

# Ordered by classification priority: the first kind whose markers match wins.
CALLOUT_MARKERS: dict[str, tuple[str, ...]] = {
    "info": ("info",),
    "warning": ("warning", "danger", "caution"),
    "example": ("example", "exercise"),
    "abstract": ("summary", "abstract", "overview"),
    "note": ("note", "important"),
    "tip": ("tip", "hint"),
}

# Wrappers that mark a callout without naming a kind; read as info
GENERIC_MARKERS: tuple[str, ...] = ("alert", "callout", "admonition")
GENERIC_KIND = "info"

# Whole class names marking a code block container
_CODE_CLASS_RE = re.compile(
    r"^(?:code[-_]?block|sourcecode|(?:language|lang|highlight)-[\w+#.-]+)$",
    re.IGNORECASE,
)

_TOKEN_SPLIT_RE = re.compile(r"[-_]")


def _class_names(tag: Tag) -> list[str]:
    raw = tag.get("class") or []
    return raw.split() if isinstance(raw, str) else list(raw)


def class_tokens(tag: Tag) -> set[str]:
    """All lower-cased words of a tag's class names, split on - and _."""
    tokens: set[str] = set()
    for cls in _class_names(tag):
        tokens.update(t for t in _TOKEN_SPLIT_RE.split(cls.lower()) if t)
    return tokens


def callout_kind(tag: Tag) -> str | None:
    """The highest-priority callout kind whose marker appears on the tag.

    A bare generic marker (``alert``, ``callout``, ``admonition``) with no
    kind token alongside it counts as info.
    """
    tokens = class_tokens(tag)
    if not tokens:
        return None
    for kind, markers in CALLOUT_MARKERS.items():
        if tokens.intersection(markers):
            return kind
    if tokens.intersection(GENERIC_MARKERS):
        return GENERIC_KIND
    return None


def has_callout_marker(tag: Tag) -> bool:
    return callout_kind(tag) is not None


def has_code_marker(tag: Tag) -> bool:
    """Whether a class such as ``code-block`` or ``language-python`` marks a code container."""
    return any(_CODE_CLASS_RE.match(cls) for cls in _class_names(tag))
