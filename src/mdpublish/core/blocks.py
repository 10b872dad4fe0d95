"""Markdown-to-block translation: markdown-it tokens to typed blocks with rich-text spans"""

import re
from typing import Optional

from mdpublish.core.models import MAX_TEXT_LENGTH, Annotations, Block, BlockKind, RichText, utf16_length
from mdpublish.core.parse import parse_markdown


MAX_HEADING_LEVEL = 3
FALLBACK_LANGUAGE = "plain text"

CODE_LANGUAGES = frozenset({
    "abap", "abc", "agda", "arduino", "ascii art", "assembly", "bash", "basic", "bnf", "c", "c#", "c++",
    "clojure", "coffeescript", "coq", "css", "dart", "dhall", "diff", "docker", "ebnf", "elixir", "elm",
    "erlang", "f#", "flow", "fortran", "gherkin", "glsl", "go", "graphql", "groovy", "haskell", "hcl",
    "html", "idris", "java", "javascript", "json", "julia", "kotlin", "latex", "less", "lisp", "livescript",
    "llvm ir", "lua", "makefile", "markdown", "markup", "matlab", "mathematica", "mermaid", "nix",
    "notion formula", "objective-c", "ocaml", "pascal", "perl", "php", "plain text", "powershell", "prolog",
    "protobuf", "purescript", "python", "r", "racket", "reason", "ruby", "rust", "sass", "scala", "scheme",
    "scss", "shell", "smalltalk", "solidity", "sql", "swift", "toml", "typescript", "vb.net", "verilog",
    "vhdl", "visual basic", "webassembly", "xml", "yaml", "java/c/c++/c#",
})

LANGUAGE_ALIASES: dict[str, str] = {
    "ts": "typescript", "tsx": "typescript",
    "js": "javascript", "jsx": "javascript",
    "sh": "shell", "zsh": "shell",
    "yml": "yaml",
    "dockerfile": "docker",
    "kt": "kotlin",
    "py": "python",
    "rb": "ruby",
    "rs": "rust",
    "md": "markdown",
    "objc": "objective-c",
    "cs": "c#",
    "cpp": "c++",
    "fs": "f#",
    "vb": "visual basic",
    "hs": "haskell",
    "pl": "perl",
    "ex": "elixir", "exs": "elixir",
    "erl": "erlang",
    "clj": "clojure",
    "ml": "ocaml",
    "ps1": "powershell",
    "proto": "protobuf",
    "sol": "solidity",
    "wasm": "webassembly",
}

# Order matters: on equal start positions the earlier pattern wins.
INLINE_PATTERNS: list[tuple[re.Pattern, Optional[str]]] = [
    (re.compile(r"\*\*(.+?)\*\*", re.DOTALL), "bold"),
    (re.compile(r"\*(.+?)\*", re.DOTALL), "italic"),
    (re.compile(r"`(.+?)`", re.DOTALL), "code"),
    (re.compile(r"~~(.+?)~~", re.DOTALL), "strikethrough"),
    (re.compile(r"\[([^\]]+)\]\(([^)]+)\)", re.DOTALL), None),
]
LINK_SCHEME_RE = re.compile(r"^https?://")


def normalize_code_language(lang: str) -> str:
    """Map a fence info tag onto the remote language vocabulary."""
    normalized = lang.strip().lower()
    if normalized in CODE_LANGUAGES:
        return normalized
    return LANGUAGE_ALIASES.get(normalized, FALLBACK_LANGUAGE)


def _split_utf16(text: str, limit: int) -> list[str]:
    if utf16_length(text) <= limit:
        return [text] if text else []
    pieces: list[str] = []
    start = units = 0
    for i, ch in enumerate(text):
        width = 2 if ord(ch) > 0xFFFF else 1
        if units + width > limit:
            pieces.append(text[start:i])
            start, units = i, 0
        units += width
    pieces.append(text[start:])
    return pieces


def chunk_text(
    text: str,
    annotations: Optional[Annotations] = None,
    link: Optional[str] = None,
    ) -> list[RichText]:
    """Split text into consecutive spans of at most MAX_TEXT_LENGTH UTF-16 code units.

    Characters outside the BMP count as two units and are never split.
    """
    return [
        RichText(
            text=piece,
            link=link,
            annotations=annotations.model_copy() if annotations else Annotations(),
        )
        for piece in _split_utf16(text, MAX_TEXT_LENGTH)
    ]


def parse_inline(text: str) -> list[RichText]:
    """Convert inline markdown into spans: earliest match wins, no nesting."""
    spans: list[RichText] = []
    pos = 0

    while pos < len(text):
        earliest: Optional[tuple[re.Match, Optional[str]]] = None
        for regex, style in INLINE_PATTERNS:
            m = regex.search(text, pos)
            if m and (earliest is None or m.start() < earliest[0].start()):
                earliest = (m, style)

        if earliest is None:
            spans.extend(chunk_text(text[pos:]))
            break

        m, style = earliest
        if m.start() > pos:
            spans.extend(chunk_text(text[pos:m.start()]))
        if style is None:
            url = m.group(2).strip()
            spans.extend(chunk_text(m.group(1), link=url if LINK_SCHEME_RE.match(url) else None))
        else:
            spans.extend(chunk_text(m.group(1), Annotations(**{style: True})))
        pos = m.end()

    return spans


def _heading_level(token) -> int:
    """Heading level from an h1..h6 tag, clamped to MAX_HEADING_LEVEL."""
    level = int(token.tag[1:]) if token.tag[1:].isdigit() else 1
    return min(level, MAX_HEADING_LEVEL)


def _table_block(rows: list[list[str]], has_header: bool) -> Optional[Block]:
    """Build a table block; tables without columns are dropped."""
    width = len(rows[0]) if rows else 0
    if width == 0:
        return None
    cells = [
        [parse_inline(cell) for cell in (row + [""] * width)[:width]]
        for row in rows
    ]
    return Block(kind=BlockKind.table, table_width=width, has_header=has_header, rows=cells)


class _BlockBuilder:
    """Single pass over the token stream, tracking quote/list/table context."""

    def __init__(self) -> None:
        self.blocks: list[Block] = []
        self.quote_depth = 0
        self.quote_parts: list[str] = []
        self.lists: list[bool] = []             # ordered flag per open list
        self.item_parts: Optional[list[str]] = None
        self.heading: Optional[int] = None
        self.table_rows: Optional[list[list[str]]] = None
        self.table_header = False
        self.cell: Optional[list[str]] = None

    def flush_item(self) -> None:
        if self.item_parts:
            kind = BlockKind.numbered_item if self.lists[-1] else BlockKind.bulleted_item
            self.blocks.append(Block(kind=kind, rich_text=parse_inline("\n".join(self.item_parts))))
        if self.item_parts is not None:
            self.item_parts = []

    def feed(self, tok) -> None:
        t = tok.type

        if t == "blockquote_open":
            self.quote_depth += 1
            return
        if t == "blockquote_close":
            self.quote_depth -= 1
            if self.quote_depth == 0:
                text = "\n".join(p for p in self.quote_parts if p)
                if text:
                    self.blocks.append(Block(kind=BlockKind.quote, rich_text=parse_inline(text)))
                self.quote_parts = []
            return
        if self.quote_depth:
            if t in ("inline", "fence", "code_block"):
                self.quote_parts.append(tok.content.rstrip("\n"))
            return

        if t in ("bullet_list_open", "ordered_list_open"):
            if self.lists:
                self.flush_item()
            self.lists.append(t == "ordered_list_open")
        elif t in ("bullet_list_close", "ordered_list_close"):
            self.lists.pop()
            if self.lists:
                self.item_parts = []    # back inside the enclosing item
        elif t == "list_item_open":
            self.item_parts = []
        elif t == "list_item_close":
            self.flush_item()
            self.item_parts = None
        elif t == "heading_open":
            self.heading = _heading_level(tok)
        elif t == "heading_close":
            self.heading = None
        elif t == "table_open":
            self.table_rows, self.table_header = [], False
        elif t == "thead_open":
            self.table_header = True
        elif t == "tr_open":
            self.table_rows.append([])
        elif t in ("th_open", "td_open"):
            self.cell = []
        elif t in ("th_close", "td_close"):
            self.table_rows[-1].append("".join(self.cell))
            self.cell = None
        elif t == "table_close":
            block = _table_block(self.table_rows, self.table_header)
            if block is not None:
                self.blocks.append(block)
            self.table_rows = None
        elif t in ("fence", "code_block"):
            self.flush_item()
            lang = tok.info.split()[0] if tok.info and tok.info.strip() else FALLBACK_LANGUAGE
            self.blocks.append(Block(
                kind=BlockKind.code,
                rich_text=chunk_text(tok.content.rstrip("\n")),
                language=normalize_code_language(lang),
            ))
        elif t == "hr":
            self.blocks.append(Block(kind=BlockKind.divider))
        elif t == "html_block":
            text = tok.content.strip()
            if text:
                self.blocks.append(Block(kind=BlockKind.paragraph, rich_text=parse_inline(text)))
        elif t == "inline":
            self.feed_inline(tok.content)

    def feed_inline(self, content: str) -> None:
        if self.cell is not None:
            self.cell.append(content)
        elif self.item_parts is not None:
            self.item_parts.append(content)
        elif self.heading is not None:
            self.blocks.append(Block(kind=BlockKind.heading, level=self.heading, rich_text=parse_inline(content)))
        elif content:
            self.blocks.append(Block(kind=BlockKind.paragraph, rich_text=parse_inline(content)))


def markdown_to_blocks(content: str) -> list[Block]:
    """Translate markdown text into the flat block sequence uploaded to a page."""
    builder = _BlockBuilder()
    for tok in parse_markdown(content):
        builder.feed(tok)
    return builder.blocks
