"""Programming language detection for code blocks."""

import re

from bs4 import Tag

KNOWN_LANGUAGES = frozenset({
    "python", "py", "javascript", "js", "typescript", "ts",
    "ruby", "go", "rust", "java", "cpp", "c", "csharp", "php",
    "bash", "shell", "sh", "zsh", "powershell", "ps1", "cmd",
    "json", "yaml", "xml", "html", "css", "sql", "graphql",
    "perl", "lua", "asm", "nasm",
})

_CLASS_PREFIXES = ("language-", "lang-", "highlight-")

# Tried in order; the first pattern that matches decides.
_CONTENT_RULES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\A\s*#![^\n]*\b(?:bash|sh|zsh)\b"), "bash"),
    (re.compile(r"\A\s*#![^\n]*python"), "python"),
    (re.compile(r"<\?php"), "php"),
    (re.compile(r"^\s*PS [A-Za-z]:\\[^>\n]*>", re.MULTILINE), "powershell"),
    (re.compile(r"^\s*\$ \S", re.MULTILINE), "bash"),
    (re.compile(r"^\s*import\s+.+\s+from\s+['\"]", re.MULTILINE), "javascript"),
    (
        re.compile(
            r"^\s*(?:from\s+[\w.]+\s+import\s+\S"
            r"|import\s+[\w.]+(?:\s*,\s*[\w.]+)*(?:\s+as\s+\w+)?\s*$)",
            re.MULTILINE,
        ),
        "python",
    ),
    (re.compile(r"^\s*#include\s*[<\"]|\bint\s+main\s*\(", re.MULTILINE), "c"),
    (re.compile(r"^\s*package\s+\w+\s*$(?:[\s\S]*)\bfunc\s+\w+\s*\(", re.MULTILINE), "go"),
    (re.compile(r"\bpublic\s+(?:static\s+)?(?:final\s+)?(?:class|void)\b"), "java"),
    (re.compile(r"^\s*(?:const|let|var)\s+\w+\s*=|\bfunction\s*\w*\s*\(", re.MULTILINE), "javascript"),
    (
        re.compile(
            r"\bSELECT\b[\s\S]+?\bFROM\b|\bINSERT\s+INTO\b|\bCREATE\s+TABLE\b|\bUPDATE\s+\w+\s+SET\b",
            re.IGNORECASE,
        ),
        "sql",
    ),
]

_BRACE_THRESHOLD = 4


def language_from_classes(tag: Tag) -> str | None:
    """Extract a language from ``language-x``/``lang-x``/``highlight-x`` or bare names."""
    raw_classes: str | list[str] = tag.get("class") or []
    classes: list[str] = (
        raw_classes.split() if isinstance(raw_classes, str) else list(raw_classes)
    )

    for cls in classes:
        lowered = cls.lower()
        for prefix in _CLASS_PREFIXES:
            if lowered.startswith(prefix) and len(lowered) > len(prefix):
                return lowered[len(prefix):]
        if lowered in KNOWN_LANGUAGES:
            return lowered

    return None


def language_from_content(code: str) -> str | None:
    """Guess a language from the code itself."""
    if not code or not code.strip():
        return None

    for pattern, language in _CONTENT_RULES:
        if pattern.search(code):
            return language

    # Brace-heavy, statement-terminated code without other hints
    braces = code.count("{") + code.count("}")
    if braces >= _BRACE_THRESHOLD and ";" in code:
        return "c"

    return None


def detect_language(tag: Tag) -> str | None:
    """Language of a ``<pre>`` block: class names first, then content heuristics."""
    candidates = [tag]
    code = tag.find("code")
    if isinstance(code, Tag):
        candidates.append(code)

    for candidate in candidates:
        language = language_from_classes(candidate)
        if language:
            return language

    return language_from_content(tag.get_text())
