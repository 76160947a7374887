"""Line-level JSONL decoding for Claude Code session logs."""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

import orjson

from claude_session_monitor.types.messages import (
    ContentBlock,
    Message,
    MessageType,
    SessionMeta,
    TextBlock,
    ToolResultBlock,
    ToolUseBlock,
)

logger = logging.getLogger(__name__)

# Max size for a single JSONL line (10MB)
MAX_LINE_SIZE = 10 * 1024 * 1024

SKIPPED_TYPES = frozenset({"file-history-snapshot", "queue-operation"})
COMMAND_MARKERS = ("command-name", "local-command")
COMMAND_PLACEHOLDER = "[command]"


def decode_line(line: str | bytes) -> Optional[dict]:
    """Decode one JSONL line into a dict, or None if it is blank or malformed."""
    line = line.strip()
    if not line:
        return None
    if len(line) > MAX_LINE_SIZE:
        logger.warning("Line exceeds %dMB, skipping", MAX_LINE_SIZE // (1024 * 1024))
        return None
    try:
        raw = orjson.loads(line)
    except orjson.JSONDecodeError as e:
        logger.debug("Malformed JSON line: %s", e)
        return None
    if not isinstance(raw, dict):
        return None
    return raw


def parse_line(line: str | bytes) -> Optional[Message]:
    """Parse a single JSONL line into a Message, or None if it is dropped."""
    raw = decode_line(line)
    if raw is None:
        return None
    return parse_record(raw)


def extract_meta(line: str | bytes) -> Optional[SessionMeta]:
    """Extract session metadata carried by a single JSONL line."""
    raw = decode_line(line)
    if raw is None:
        return None
    return meta_from_record(raw)


def parse_record(raw: dict) -> Optional[Message]:
    """Map an already-decoded log record onto a Message."""
    type_str = raw.get("type")
    if not isinstance(type_str, str) or type_str in SKIPPED_TYPES:
        return None

    timestamp = parse_timestamp(raw.get("timestamp"))

    message = raw.get("message")
    if not isinstance(message, dict):
        message = {}
    content = message.get("content")

    tokens_in = None
    tokens_out = None

    if type_str == "user":
        msg_type = MessageType.USER
        text = extract_text_content(content)
    elif type_str == "assistant":
        blocks = decode_content(content)
        text = render_content(content, blocks)
        if any(isinstance(b, ToolUseBlock) for b in blocks):
            msg_type = MessageType.TOOL_USE
        else:
            msg_type = MessageType.ASSISTANT
        tokens_in, tokens_out = _token_counts(message.get("usage"))
    elif type_str == "progress":
        msg_type = MessageType.PROGRESS
        text = "[progress]"
    else:
        msg_type = MessageType.OTHER
        text = f"[{type_str}]"

    # Skip empty or uninteresting messages
    if not text or text == COMMAND_PLACEHOLDER:
        return None

    return Message(
        type=msg_type,
        timestamp=timestamp,
        content=text,
        tokens_in=tokens_in,
        tokens_out=tokens_out,
    )


def meta_from_record(raw: dict) -> Optional[SessionMeta]:
    """Summary lines carry only a summary; regular lines need a sessionId."""
    if raw.get("type") == "summary":
        return SessionMeta(summary=_opt_str(raw.get("summary")))

    if not raw.get("sessionId"):
        return None
    return SessionMeta(
        git_branch=_opt_str(raw.get("gitBranch")),
        cwd=_opt_str(raw.get("cwd")),
        slug=_opt_str(raw.get("slug")),
    )


def decode_content(content: Any) -> list[ContentBlock]:
    """Decode a content array into typed blocks, dropping unknown block types."""
    if not isinstance(content, list):
        return []

    blocks: list[ContentBlock] = []
    for item in content:
        if not isinstance(item, dict):
            continue
        block_type = item.get("type")
        if block_type == "text":
            text = item.get("text")
            blocks.append(TextBlock(text=text if isinstance(text, str) else ""))
        elif block_type == "tool_use":
            name = item.get("name")
            blocks.append(ToolUseBlock(name=name if isinstance(name, str) else "unknown"))
        elif block_type == "tool_result":
            blocks.append(ToolResultBlock())
    return blocks


def extract_text_content(content: Any) -> str:
    """Render a message content value (string or block array) as display text."""
    return render_content(content, decode_content(content))


def render_content(content: Any, blocks: list[ContentBlock]) -> str:
    if isinstance(content, str):
        return _strip_tagged(content)
    if not isinstance(content, list):
        return ""

    parts = []
    for block in blocks:
        if isinstance(block, TextBlock):
            text = block.text.strip()
            if text:
                parts.append(text)
        elif isinstance(block, ToolUseBlock):
            parts.append(f"[tool: {block.name}]")
        elif isinstance(block, ToolResultBlock):
            parts.append("[tool result]")
    return "\n".join(parts)


def _strip_tagged(text: str) -> str:
    """Pull readable text out of XML-ish wrapped content."""
    text = text.strip()
    if not (text.startswith("<") and ">" in text):
        return text

    after = text[text.rindex(">") + 1:].strip()
    if after:
        return after
    if any(marker in text for marker in COMMAND_MARKERS):
        return COMMAND_PLACEHOLDER
    return text


def _token_counts(usage: Any) -> tuple[Optional[int], Optional[int]]:
    if not isinstance(usage, dict):
        return None, None
    tokens_in = (
        _int(usage.get("input_tokens"))
        + _int(usage.get("cache_read_input_tokens"))
        + _int(usage.get("cache_creation_input_tokens"))
    )
    tokens_out = usage.get("output_tokens")
    if not isinstance(tokens_out, int) or isinstance(tokens_out, bool):
        tokens_out = None
    return tokens_in, tokens_out


def _int(value: Any) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return 0


def _opt_str(value: Any) -> Optional[str]:
    if isinstance(value, str) and value:
        return value
    return None


def parse_timestamp(ts_value: Any) -> datetime:
    """Parse an RFC3339 timestamp, falling back to now (UTC)."""
    if isinstance(ts_value, str) and ts_value:
        try:
            # ISO 8601 format: "2026-02-13T12:00:00.000Z"
            dt = datetime.fromisoformat(ts_value.replace("Z", "+00:00"))
        except ValueError:
            pass
        else:
            if dt.tzinfo is None:
                dt = dt.replace(tzinfo=timezone.utc)
            return dt.astimezone(timezone.utc)
    return datetime.now(timezone.utc)
