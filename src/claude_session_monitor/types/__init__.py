"""Type definitions for Claude Session Monitor."""

from claude_session_monitor.types.messages import (
    ContentBlock,
    Message,
    MessageType,
    SessionMeta,
    TextBlock,
    ToolResultBlock,
    ToolUseBlock,
)
from claude_session_monitor.types.sessions import IndexEntry, Session, SessionStats
from claude_session_monitor.types.events import ChangeEvent, ChangeKind, FocusPanel

__all__ = [
    "ContentBlock",
    "Message",
    "MessageType",
    "SessionMeta",
    "TextBlock",
    "ToolResultBlock",
    "ToolUseBlock",
    "IndexEntry",
    "Session",
    "SessionStats",
    "ChangeEvent",
    "ChangeKind",
    "FocusPanel",
]
