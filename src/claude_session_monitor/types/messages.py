"""Message-level types decoded from JSONL log lines."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Union


class MessageType(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    TOOL_USE = "tool_use"
    PROGRESS = "progress"
    OTHER = "other"


@dataclass(frozen=True)
class TextBlock:
    text: str


@dataclass(frozen=True)
class ToolUseBlock:
    name: str


@dataclass(frozen=True)
class ToolResultBlock:
    pass


ContentBlock = Union[TextBlock, ToolUseBlock, ToolResultBlock]


@dataclass(frozen=True)
class Message:
    type: MessageType
    timestamp: datetime
    content: str
    tokens_in: Optional[int] = None
    tokens_out: Optional[int] = None


@dataclass
class SessionMeta:
    """Metadata fragment carried by a single log line."""
    git_branch: Optional[str] = None
    cwd: Optional[str] = None
    slug: Optional[str] = None
    summary: Optional[str] = None
