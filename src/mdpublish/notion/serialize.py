"""Block to Notion API payload serialization"""

from typing import Any

from mdpublish.core.models import Block, BlockKind, RichText


BLOCK_TYPES: dict[BlockKind, str] = {
    BlockKind.paragraph:     "paragraph",
    BlockKind.bulleted_item: "bulleted_list_item",
    BlockKind.numbered_item: "numbered_list_item",
    BlockKind.code:          "code",
    BlockKind.quote:         "quote",
    BlockKind.divider:       "divider",
    BlockKind.table:         "table",
}


def notion_block_type(block: Block) -> str:
    """Notion type name for block, e.g. heading_2 or bulleted_list_item."""
    if block.kind == BlockKind.heading:
        return f"heading_{block.level or 1}"
    return BLOCK_TYPES[block.kind]


def to_notion_rich_text(span: RichText) -> dict[str, Any]:
    return {
        "type": "text",
        "text": {
            "content": span.text,
            "link": {"url": span.link} if span.link else None,
        },
        "annotations": span.annotations.model_dump(),
    }


def to_notion_block(block: Block) -> dict[str, Any]:
    block_type = notion_block_type(block)
    if block.kind == BlockKind.divider:
        body: dict[str, Any] = {}
    elif block.kind == BlockKind.table:
        body = {
            "table_width": block.table_width,
            "has_column_header": block.has_header,
            "has_row_header": False,
            "children": [
                {
                    "object": "block",
                    "type": "table_row",
                    "table_row": {"cells": [[to_notion_rich_text(s) for s in cell] for cell in row]},
                }
                for row in block.rows
            ],
        }
    else:
        body = {"rich_text": [to_notion_rich_text(s) for s in block.rich_text]}
        if block.kind == BlockKind.code:
            body["language"] = block.language
    return {"object": "block", "type": block_type, block_type: body}


def first_plain_text(block: dict[str, Any]) -> str:
    """plain_text of the first rich-text span of a Notion block response, or ''."""
    rich_text = block.get(block.get("type", ""), {}).get("rich_text") or []
    if not rich_text:
        return ""
    first = rich_text[0]
    return first.get("plain_text") or first.get("text", {}).get("content", "")
