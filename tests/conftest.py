"""Root test configuration: in-memory page store double and shared fixtures"""

import itertools
from pathlib import Path
from typing import Optional

import pytest

from mdpublish.config import Settings, Target
from mdpublish.core.models import Block
from mdpublish.core.remote import ChildrenPage, RemoteBlock
from mdpublish.errors import RateLimitedError, RemoteApiError
from mdpublish.notion.serialize import notion_block_type


ROOT_PAGE_ID = "root-page"
MUTATIONS = {"create_page", "update_page_title", "append_blocks", "delete_block"}


class FakePageStore:
    """PageStore double holding a page tree in memory and recording every call."""

    def __init__(self, root_id: str = ROOT_PAGE_ID) -> None:
        self.root_id = root_id
        self.children: dict[str, list[RemoteBlock]] = {root_id: []}
        self.titles: dict[str, str] = {root_id: "Workspace"}
        self.calls: list[tuple] = []
        self.fail_titles: set[str] = set()      # create_page raises for these titles
        self.rate_limits = 0                    # next N calls raise RateLimitedError
        self._ids = itertools.count(1)

    def _record(self, *call) -> None:
        self.calls.append(call)
        if self.rate_limits:
            self.rate_limits -= 1
            raise RateLimitedError()

    @property
    def mutations(self) -> list[tuple]:
        return [c for c in self.calls if c[0] in MUTATIONS]

    def reset_calls(self) -> None:
        self.calls.clear()

    def child_pages(self, page_id: str) -> list[RemoteBlock]:
        return [b for b in self.children[page_id] if b.type == "child_page"]

    def content(self, page_id: str) -> list[RemoteBlock]:
        return [b for b in self.children[page_id] if b.type != "child_page"]

    def add_page(self, parent_id: str, title: str, first_text: Optional[str] = None) -> str:
        """Seed a page directly, optionally with a paragraph as its first block."""
        page_id = f"page-{next(self._ids)}"
        self.children[page_id] = []
        self.titles[page_id] = title
        self.children[parent_id].append(RemoteBlock(id=page_id, type="child_page", title=title))
        if first_text is not None:
            self.children[page_id].append(RemoteBlock(id=f"block-{next(self._ids)}", type="paragraph", text=first_text))
        return page_id

    async def create_page(self, parent_id: str, title: str) -> str:
        self._record("create_page", parent_id, title)
        if title in self.fail_titles:
            raise RemoteApiError(f"cannot create {title}", status=400)
        if parent_id not in self.children:
            raise RemoteApiError(f"parent {parent_id!r} not found", status=404)
        return self.add_page(parent_id, title)

    async def update_page_title(self, page_id: str, title: str) -> None:
        self._record("update_page_title", page_id, title)
        self.titles[page_id] = title

    async def list_children(self, block_id: str, cursor: Optional[str] = None, page_size: int = 100) -> ChildrenPage:
        self._record("list_children", block_id, cursor, page_size)
        items = self.children.get(block_id, [])
        start = int(cursor or 0)
        end = start + page_size
        return ChildrenPage(items=items[start:end], next_cursor=str(end) if end < len(items) else None)

    async def append_blocks(self, block_id: str, blocks: list[Block]) -> None:
        self._record("append_blocks", block_id, len(blocks))
        for b in blocks:
            self.children[block_id].append(RemoteBlock(
                id=f"block-{next(self._ids)}",
                type=notion_block_type(b),
                text=b.rich_text[0].text if b.rich_text else "",
            ))

    async def delete_block(self, block_id: str) -> None:
        self._record("delete_block", block_id)
        for blocks in self.children.values():
            blocks[:] = [b for b in blocks if b.id != block_id]


@pytest.fixture(name="write_tree")
def write_tree_fixture():
    """Return a helper creating files (relative path -> content) under a root directory."""
    def _write(root: Path, files: dict[str, str]) -> Path:
        root.mkdir(parents=True, exist_ok=True)
        for rel, content in files.items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return root
    return _write


@pytest.fixture(name="store")
def store_fixture():
    return FakePageStore()


@pytest.fixture(name="settings")
def settings_fixture():
    return Settings(
        targets=[Target(name="docs", src="docs", parent_page_id=ROOT_PAGE_ID)],
        retry_base_delay=0,
    )
