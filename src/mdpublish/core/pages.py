"""Page-level remote operations built on a PageStore"""

import logging
from typing import Optional

from mdpublish.core.index import create_marker, marker_source_path
from mdpublish.core.models import Block, BlockKind, RichText
from mdpublish.core.remote import PAGE_SIZE, PageStore


logger = logging.getLogger(__name__)

APPEND_BATCH_SIZE = 100
PRESERVED_BLOCK_TYPES = {"child_page", "child_database"}


def marker_block(source_path: str) -> Block:
    return Block(kind=BlockKind.paragraph, rich_text=[RichText(text=create_marker(source_path))])


async def create_page(store: PageStore, parent_id: str, title: str, source_path: str) -> str:
    """Create a page under parent_id and stamp it with the marker for source_path."""
    page_id = await store.create_page(parent_id, title)
    await store.append_blocks(page_id, [marker_block(source_path)])
    return page_id


async def update_page_title(store: PageStore, page_id: str, title: str) -> None:
    await store.update_page_title(page_id, title)


async def clear_page_content(store: PageStore, page_id: str) -> int:
    """Delete a page's content blocks, keeping a leading marker and nested pages.

    Returns the number of deleted blocks.
    """
    doomed: list[str] = []
    cursor: Optional[str] = None
    first = True

    while True:
        page = await store.list_children(page_id, cursor=cursor, page_size=PAGE_SIZE)
        for block in page.items:
            if first:
                first = False
                if marker_source_path(block) is not None:
                    continue
            if block.type in PRESERVED_BLOCK_TYPES:
                continue
            doomed.append(block.id)
        cursor = page.next_cursor
        if not cursor:
            break

    for block_id in doomed:
        await store.delete_block(block_id)
    return len(doomed)


async def append_blocks(store: PageStore, page_id: str, blocks: list[Block]) -> None:
    """Append blocks in batches of APPEND_BATCH_SIZE."""
    for i in range(0, len(blocks), APPEND_BATCH_SIZE):
        await store.append_blocks(page_id, blocks[i:i + APPEND_BATCH_SIZE])


async def replace_page_content(store: PageStore, page_id: str, blocks: list[Block]) -> None:
    """Clear-then-append; the marker stays the first block."""
    deleted = await clear_page_content(store, page_id)
    await append_blocks(store, page_id, blocks)
    logger.debug("Replaced content of %s: %d removed, %d appended", page_id, deleted, len(blocks))
