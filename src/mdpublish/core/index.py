"""Discovery of tool-managed remote pages via their embedded identity marker"""

import logging
from typing import Optional

from mdpublish.core.models import ManagedPage
from mdpublish.core.remote import PAGE_SIZE, PageStore, RemoteBlock


logger = logging.getLogger(__name__)

MARKER_PREFIX = "<!--md-publish:"
MARKER_SUFFIX = "-->"
MARKER_BLOCK_TYPE = "paragraph"
CHILD_PAGE_TYPE = "child_page"


def create_marker(source_path: str) -> str:
    """Identity marker stored as the first block of every managed page."""
    return f"{MARKER_PREFIX}{source_path}{MARKER_SUFFIX}"


def parse_marker(text: str) -> Optional[str]:
    """Return the source path encoded in a marker, or None if text is not a marker."""
    if text.startswith(MARKER_PREFIX) and text.endswith(MARKER_SUFFIX):
        return text[len(MARKER_PREFIX):len(text) - len(MARKER_SUFFIX)]
    return None


def marker_source_path(block: Optional[RemoteBlock]) -> Optional[str]:
    """Source path carried by a first block, if it is a marker paragraph."""
    if block is None or block.type != MARKER_BLOCK_TYPE:
        return None
    return parse_marker(block.text)


async def _first_block(store: PageStore, page_id: str) -> Optional[RemoteBlock]:
    page = await store.list_children(page_id, page_size=1)
    return page.items[0] if page.items else None


async def discover_managed_pages(store: PageStore, parent_id: str) -> list[ManagedPage]:
    """Recursively collect managed pages below parent_id.

    Only pages whose first block is a marker are recorded and descended into, so
    unrelated remote content is never visited.
    """
    managed: list[ManagedPage] = []
    cursor: Optional[str] = None

    while True:
        page = await store.list_children(parent_id, cursor=cursor, page_size=PAGE_SIZE)
        for block in page.items:
            if block.type != CHILD_PAGE_TYPE:
                continue
            source_path = marker_source_path(await _first_block(store, block.id))
            if source_path is None:
                logger.debug("Skipping unmanaged page %s", block.id)
                continue
            managed.append(ManagedPage(page_id=block.id, source_path=source_path, title=block.title or ""))
            managed.extend(await discover_managed_pages(store, block.id))
        cursor = page.next_cursor
        if not cursor:
            break

    return managed


def build_source_path_index(pages: list[ManagedPage]) -> dict[str, str]:
    """Map source path to page id; later duplicates win."""
    return {p.source_path: p.page_id for p in pages}
