"""In-memory mapping of session id to Session."""

from pathlib import Path
from typing import Iterator, Mapping, Optional

from claude_session_monitor.types import Session


class SessionStore:
    """Holds every tracked session. Owned by the view controller."""

    def __init__(self, sessions: Mapping[str, Session] | None = None):
        self._sessions: dict[str, Session] = dict(sessions or {})

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def __iter__(self) -> Iterator[str]:
        return iter(self._sessions)

    def get(self, session_id: str) -> Optional[Session]:
        return self._sessions.get(session_id)

    def insert(self, session: Session):
        """Add a session, replacing any existing entry with the same id."""
        self._sessions[session.id] = session

    def replace_all(self, sessions: Mapping[str, Session]):
        self._sessions = dict(sessions)

    def ids(self) -> list[str]:
        return list(self._sessions)

    def values(self) -> list[Session]:
        return list(self._sessions.values())

    def find_by_path(self, file_path: str | Path) -> Optional[Session]:
        path = Path(file_path)
        for session in self._sessions.values():
            if session.file_path == path:
                return session
        return None
