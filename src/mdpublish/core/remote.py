"""Remote page store contract, rate-limit retry policy, and bounded concurrency gate"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Protocol, TypeVar

from pydantic import BaseModel

from mdpublish.core.models import Block
from mdpublish.errors import RateLimitedError


logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_CONCURRENCY = 2
DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_BASE_DELAY = 1.0
PAGE_SIZE = 100


class RemoteBlock(BaseModel):
    """A child of a remote page: a content block or a nested page."""
    id:    str
    type:  str                      # e.g. "paragraph", "child_page"
    text:  str = ""                 # plain text of the first rich-text span
    title: Optional[str] = None     # child_page only


class ChildrenPage(BaseModel):
    items:       list[RemoteBlock] = []
    next_cursor: Optional[str] = None


class PageStore(Protocol):
    """Asynchronous hierarchical page store (Notion or a test double)."""

    async def create_page(self, parent_id: str, title: str) -> str: ...

    async def update_page_title(self, page_id: str, title: str) -> None: ...

    async def list_children(
        self, block_id: str, cursor: Optional[str] = None, page_size: int = PAGE_SIZE,
    ) -> ChildrenPage: ...

    async def append_blocks(self, block_id: str, blocks: list[Block]) -> None: ...

    async def delete_block(self, block_id: str) -> None: ...


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    base_delay: float = DEFAULT_BASE_DELAY,
    ) -> T:
    """Await fn, retrying on RateLimitedError with exponential backoff.

    Delay doubles per attempt starting from base_delay; a server Retry-After
    hint is used as the minimum wait. Other errors propagate
    immediately; the last RateLimitedError is re-raised once attempts run out.
    """
    for attempt in range(max_attempts):
        try:
            return await fn()
        except RateLimitedError as e:
            if attempt + 1 >= max_attempts:
                logger.error("Rate limit persisted after %d attempts, giving up", max_attempts)
                raise
            delay = max(base_delay * 2 ** attempt, e.retry_after or 0)
            logger.info("Rate limited, retrying in %.1fs (attempt %d/%d)", delay, attempt + 1, max_attempts)
            await asyncio.sleep(delay)
    raise ValueError("max_attempts must be at least 1")


class ThrottledStore:
    """PageStore wrapper: every call passes the shared gate and the retry policy."""

    def __init__(
        self,
        store: PageStore,
        concurrency: int = DEFAULT_CONCURRENCY,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        base_delay: float = DEFAULT_BASE_DELAY,
    ) -> None:
        self._store = store
        self._gate = asyncio.Semaphore(concurrency)
        self._max_attempts = max_attempts
        self._base_delay = base_delay

    async def _call(self, fn: Callable[..., Awaitable[T]], *args, **kwargs) -> T:
        async with self._gate:
            return await with_retry(lambda: fn(*args, **kwargs), self._max_attempts, self._base_delay)

    async def create_page(self, parent_id: str, title: str) -> str:
        return await self._call(self._store.create_page, parent_id, title)

    async def update_page_title(self, page_id: str, title: str) -> None:
        await self._call(self._store.update_page_title, page_id, title)

    async def list_children(
        self, block_id: str, cursor: Optional[str] = None, page_size: int = PAGE_SIZE,
    ) -> ChildrenPage:
        return await self._call(self._store.list_children, block_id, cursor, page_size)

    async def append_blocks(self, block_id: str, blocks: list[Block]) -> None:
        await self._call(self._store.append_blocks, block_id, blocks)

    async def delete_block(self, block_id: str) -> None:
        await self._call(self._store.delete_block, block_id)
