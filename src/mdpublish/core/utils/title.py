"""Page title resolution from the first level-1 heading"""

import re


MAX_TITLE_LENGTH = 80
ELLIPSIS = "…"

_MARKUP_PATTERNS = [
    (re.compile(r"\[([^\]]*)\]\([^)]*\)"), r"\1"),
    (re.compile(r"\*\*([^*]*)\*\*"), r"\1"),
    (re.compile(r"\*([^*]*)\*"), r"\1"),
    (re.compile(r"__([^_]*)__"), r"\1"),
    (re.compile(r"_([^_]*)_"), r"\1"),
    (re.compile(r"`([^`]*)`"), r"\1"),
    (re.compile(r"~~([^~]*)~~"), r"\1"),
]


def extract_h1(markdown: str) -> str | None:
    """Return the text of the first '# ' heading line, else None."""
    for line in markdown.split("\n"):
        stripped = line.strip()
        if stripped.startswith("# "):
            return stripped[2:]
    return None


def sanitize_title(raw_title: str) -> str:
    """Strip inline markup, collapse whitespace, and truncate to MAX_TITLE_LENGTH."""
    title = raw_title
    for pattern, repl in _MARKUP_PATTERNS:
        title = pattern.sub(repl, title)
    title = re.sub(r"\s+", " ", title).strip()
    if len(title) > MAX_TITLE_LENGTH:
        title = title[:MAX_TITLE_LENGTH - 1] + ELLIPSIS
    return title


def get_page_title(markdown: str, fallback_name: str) -> str:
    """Title from the first H1 of markdown, else from fallback_name."""
    h1 = extract_h1(markdown)
    return sanitize_title(h1 if h1 else fallback_name)
