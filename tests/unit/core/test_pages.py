"""Unit tests for core/pages.py"""

import pytest

from mdpublish.core.index import create_marker
from mdpublish.core.models import Block, BlockKind, RichText
from mdpublish.core.pages import APPEND_BATCH_SIZE, append_blocks, clear_page_content, create_page, replace_page_content


def _para(text):
    return Block(kind=BlockKind.paragraph, rich_text=[RichText(text=text)])


@pytest.mark.asyncio
async def test_create_page_stamps_marker(store):
    """A new page's first block is the marker for its source path."""
    page_id = await create_page(store, store.root_id, "Guide", "docs/guide.md")
    first = store.children[page_id][0]
    assert first.type == "paragraph"
    assert first.text == create_marker("docs/guide.md")


@pytest.mark.asyncio
async def test_append_blocks_batches(store):
    page_id = store.add_page(store.root_id, "Big")
    await append_blocks(store, page_id, [_para(str(i)) for i in range(APPEND_BATCH_SIZE * 2 + 5)])
    assert [c[2] for c in store.calls if c[0] == "append_blocks"] == [100, 100, 5]
    assert len(store.children[page_id]) == 205


@pytest.mark.asyncio
async def test_append_blocks_nothing_to_send(store):
    page_id = store.add_page(store.root_id, "Empty")
    await append_blocks(store, page_id, [])
    assert store.calls == []


@pytest.mark.asyncio
async def test_clear_keeps_marker_and_child_pages(store):
    page_id = store.add_page(store.root_id, "Page", create_marker("page.md"))
    await append_blocks(store, page_id, [_para("old 1"), _para("old 2")])
    store.add_page(page_id, "Child")

    deleted = await clear_page_content(store, page_id)
    assert deleted == 2
    assert [b.type for b in store.children[page_id]] == ["paragraph", "child_page"]
    assert store.children[page_id][0].text == create_marker("page.md")


@pytest.mark.asyncio
async def test_clear_without_marker_deletes_first_block(store):
    page_id = store.add_page(store.root_id, "Page", "not a marker")
    assert await clear_page_content(store, page_id) == 1
    assert store.children[page_id] == []


@pytest.mark.asyncio
async def test_replace_page_content(store):
    """Old content is replaced; the marker stays first."""
    page_id = await create_page(store, store.root_id, "Page", "page.md")
    await append_blocks(store, page_id, [_para("old")])
    await replace_page_content(store, page_id, [_para("new 1"), _para("new 2")])
    assert [b.text for b in store.children[page_id]] == [create_marker("page.md"), "new 1", "new 2"]
