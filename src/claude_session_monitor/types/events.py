"""Change notification and view-state enums."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class ChangeKind(str, Enum):
    MODIFIED = "modified"
    CREATED = "created"


@dataclass(frozen=True)
class ChangeEvent:
    path: Path
    kind: ChangeKind


class FocusPanel(str, Enum):
    SESSIONS = "sessions"
    CHAT = "chat"
