"""Notion client implementing the PageStore contract over the official notion-client SDK"""

import logging
from typing import Any, Awaitable, Optional

import httpx
from notion_client import AsyncClient
from notion_client.errors import APIResponseError, HTTPResponseError, RequestTimeoutError

from mdpublish.config import NotionSettings
from mdpublish.core.models import Block
from mdpublish.core.remote import PAGE_SIZE, ChildrenPage, RemoteBlock
from mdpublish.errors import RateLimitedError, RemoteApiError
from mdpublish.notion.serialize import first_plain_text, to_notion_block


logger = logging.getLogger(__name__)


def _title_property(title: str) -> dict[str, Any]:
    return {"title": {"title": [{"type": "text", "text": {"content": title}}]}}


def parse_retry_after(value: Optional[str]) -> Optional[float]:
    """Seconds from a Retry-After header; None when absent or not a number (e.g. an HTTP date)."""
    if not value:
        return None
    try:
        return max(float(value), 0.0)
    except ValueError:
        return None


class NotionClient:
    """Async Notion API client; one instance per sync run."""

    def __init__(self, token: str, settings: Optional[NotionSettings] = None,
                 http_client: Optional[httpx.AsyncClient] = None) -> None:
        self.settings = settings or NotionSettings()
        self._token = token
        self._http_client = http_client
        self._client: AsyncClient | None = None

    @property
    def client(self) -> AsyncClient:
        """Get or create the SDK client."""
        if self._client is None:
            self._client = AsyncClient(
                auth=self._token,
                base_url=self.settings.base_url,
                notion_version=self.settings.api_version,
                timeout_ms=int(self.settings.timeout * 1000),
                client=self._http_client,
            )
        return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "NotionClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def _call(self, what: str, request: Awaitable[Any]) -> dict[str, Any]:
        """Await an SDK request, mapping its failures onto RateLimitedError / RemoteApiError."""
        try:
            return await request
        except HTTPResponseError as e:
            if e.status == 429:
                raise RateLimitedError(retry_after=parse_retry_after(e.headers.get("Retry-After"))) from e
            message = str(e)
            if isinstance(e, APIResponseError):
                message = f"{e.code}: {message}"
            raise RemoteApiError(f"{what} -> {e.status}: {message}", status=e.status) from e
        except (RequestTimeoutError, httpx.HTTPError) as e:
            raise RemoteApiError(f"{what} failed: {e}") from e

    async def create_page(self, parent_id: str, title: str) -> str:
        data = await self._call("create page", self.client.pages.create(
            parent={"page_id": parent_id},
            properties=_title_property(title),
        ))
        return data["id"]

    async def update_page_title(self, page_id: str, title: str) -> None:
        await self._call(f"update page {page_id}", self.client.pages.update(
            page_id=page_id, properties=_title_property(title),
        ))

    async def list_children(
        self, block_id: str, cursor: Optional[str] = None, page_size: int = PAGE_SIZE,
    ) -> ChildrenPage:
        kw: dict[str, Any] = {"block_id": block_id, "page_size": page_size}
        if cursor:
            kw["start_cursor"] = cursor
        data = await self._call(f"list children of {block_id}", self.client.blocks.children.list(**kw))
        items = [
            RemoteBlock(
                id=b["id"],
                type=b.get("type", ""),
                text=first_plain_text(b),
                title=b.get("child_page", {}).get("title"),
            )
            for b in data.get("results", [])
        ]
        return ChildrenPage(items=items, next_cursor=data.get("next_cursor") if data.get("has_more") else None)

    async def append_blocks(self, block_id: str, blocks: list[Block]) -> None:
        await self._call(f"append to {block_id}", self.client.blocks.children.append(
            block_id=block_id, children=[to_notion_block(b) for b in blocks],
        ))

    async def delete_block(self, block_id: str) -> None:
        await self._call(f"delete block {block_id}", self.client.blocks.delete(block_id=block_id))
