"""Data models shared by the scan, tree, merkle, and sync stages"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


MAX_TEXT_LENGTH = 2000      # remote limit per rich-text span, in UTF-16 code units


def utf16_length(text: str) -> int:
    """Length of text as the remote API counts it (astral characters count twice)."""
    return len(text.encode("utf-16-le")) // 2


@dataclass(frozen=True)
class ScanEntry:
    """One file or directory reported by the filesystem walker."""
    source_path:  str
    is_directory: bool
    content:      Optional[str] = None    # markdown leaf files only


@dataclass
class DocumentNode:
    """A page-to-be in the source tree; built once per run and then read-only."""
    source_path:        str
    title:              str
    content:            str
    is_directory:       bool
    children:           list["DocumentNode"] = field(default_factory=list)
    readme_source_path: Optional[str] = None


class Annotations(BaseModel):
    bold:          bool = False
    italic:        bool = False
    strikethrough: bool = False
    code:          bool = False


class RichText(BaseModel):
    """A run of text with a single set of annotations and an optional link."""
    text:        str
    link:        Optional[str] = None
    annotations: Annotations = Field(default_factory=Annotations)

    @field_validator("text")
    @classmethod
    def _within_limit(cls, v: str) -> str:
        if utf16_length(v) > MAX_TEXT_LENGTH:
            raise ValueError(f"span exceeds {MAX_TEXT_LENGTH} UTF-16 code units")
        return v


class BlockKind(str, Enum):
    """Restrict block kinds to the vocabulary the remote store accepts"""
    heading       = "heading"
    paragraph     = "paragraph"
    bulleted_item = "bulleted_item"
    numbered_item = "numbered_item"
    code          = "code"
    quote         = "quote"
    divider       = "divider"
    table         = "table"


class Block(BaseModel):
    """A single typed content block produced by the markdown translator."""
    kind:        BlockKind
    rich_text:   list[RichText] = []
    level:       Optional[int] = None     # heading level (1-3)
    language:    Optional[str] = None     # code blocks only
    table_width: Optional[int] = None
    has_header:  bool = False
    rows:        list[list[list[RichText]]] = []   # rows -> cells -> spans

    @property
    def plain_text(self) -> str:
        return "".join(span.text for span in self.rich_text)


class ManagedPage(BaseModel):
    """A remote page carrying this tool's identity marker."""
    page_id:     str
    source_path: str
    title:       str = ""


class SyncError(BaseModel):
    path:  str
    error: str


class SyncResult(BaseModel):
    created: int = 0
    updated: int = 0
    skipped: int = 0
    errors:  list[SyncError] = []

    @property
    def ok(self) -> bool:
        return not self.errors
