"""Session and metadata index types."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from claude_session_monitor.types.messages import Message


@dataclass
class IndexEntry:
    session_id: str
    custom_title: Optional[str] = None
    summary: Optional[str] = None
    git_branch: Optional[str] = None
    project_path: Optional[str] = None


@dataclass
class Session:
    id: str
    project_slug: str
    file_path: Path
    slug: Optional[str] = None
    custom_title: Optional[str] = None
    summary: Optional[str] = None
    git_branch: Optional[str] = None
    cwd: Optional[str] = None
    messages: list[Message] = field(default_factory=list)
    last_activity: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    file_offset: int = 0
    total_tokens_in: int = 0
    total_tokens_out: int = 0

    @property
    def display_name(self) -> str:
        if self.custom_title:
            return self.custom_title
        if self.git_branch:
            return f"{self.project_slug} ({self.git_branch})"
        return self.project_slug

    @property
    def short_id(self) -> str:
        return self.id[:8]

    @property
    def message_count(self) -> int:
        return len(self.messages)

    def append(self, message: Message):
        """Append a parsed message and fold it into the running aggregates."""
        self.messages.append(message)
        self.last_activity = message.timestamp
        if message.tokens_in is not None:
            self.total_tokens_in += message.tokens_in
        if message.tokens_out is not None:
            self.total_tokens_out += message.tokens_out


@dataclass
class SessionStats:
    message_count: int = 0
    tokens_in: int = 0
    tokens_out: int = 0
    is_active: bool = False
