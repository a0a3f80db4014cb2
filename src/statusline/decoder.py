"""Decode raw transcript lines into Events.

Malformed lines are expected (concurrent writers, tail truncation) and decode
to None rather than raising.
"""

import json
import re
from datetime import datetime, timezone

from statusline.models import (
    ContentBlock, Event, OpaqueBlock, TextBlock, ToolResult, ToolUse,
)


# fromisoformat before 3.11 only takes 3 or 6 fraction digits
FRACTION_PATTERN = re.compile(r"([T ]\d{2}:\d{2}:\d{2})[.,](\d+)")


def _normalize_fraction(match: re.Match) -> str:
    return f"{match.group(1)}.{match.group(2)[:6].ljust(6, '0')}"


def parse_timestamp(value) -> datetime | None:
    """Parse an ISO-8601 timestamp. Naive values are taken as UTC."""
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        text = FRACTION_PATTERN.sub(_normalize_fraction, value.strip())
        dt = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _decode_sub_block(raw) -> ContentBlock | None:
    """Decode one element of a tool result's content."""
    if isinstance(raw, str):
        return TextBlock(raw)
    if not isinstance(raw, dict):
        return None
    block_type = raw.get("type")
    if block_type == "text":
        text = raw.get("text")
        return TextBlock(text if isinstance(text, str) else "")
    return OpaqueBlock(str(block_type or "unknown"))


def _decode_result_content(raw) -> list[ContentBlock]:
    if raw is None:
        return []
    if isinstance(raw, list):
        items = raw
    else:
        items = [raw]
    blocks = []
    for item in items:
        block = _decode_sub_block(item)
        if block is not None:
            blocks.append(block)
    return blocks


def _decode_block(raw) -> ContentBlock | None:
    if isinstance(raw, str):
        return TextBlock(raw)
    if not isinstance(raw, dict):
        return None

    block_type = raw.get("type")
    if block_type == "tool_use":
        block_id = raw.get("id")
        name = raw.get("name")
        # An invocation without both is unusable for tracking
        if not (isinstance(block_id, str) and block_id and isinstance(name, str) and name):
            return OpaqueBlock("tool_use")
        payload = raw.get("input")
        return ToolUse(block_id, name, payload if isinstance(payload, dict) else {})
    if block_type == "tool_result":
        ref = raw.get("tool_use_id")
        return ToolResult(
            tool_use_id=ref if isinstance(ref, str) and ref else None,
            content=_decode_result_content(raw.get("content")),
        )
    if block_type == "text":
        text = raw.get("text")
        return TextBlock(text if isinstance(text, str) else "")
    return OpaqueBlock(str(block_type or "unknown"))


def decode_blocks(content) -> list[ContentBlock]:
    """Normalize message content (absent, one block, or a list) to a list."""
    if content is None:
        return []
    raw_blocks = content if isinstance(content, list) else [content]
    blocks = []
    for raw in raw_blocks:
        block = _decode_block(raw)
        if block is not None:
            blocks.append(block)
    return blocks


def decode_event(line: str) -> Event | None:
    """Decode one transcript line. Returns None for blank or malformed lines."""
    if not line or not line.strip():
        return None
    try:
        record = json.loads(line)
    except (ValueError, RecursionError):
        return None
    if not isinstance(record, dict):
        return None

    message = record.get("message")
    content = message.get("content") if isinstance(message, dict) else None
    return Event(
        timestamp=parse_timestamp(record.get("timestamp")),
        blocks=decode_blocks(content),
    )
