"""Session discovery, full parsing and incremental tailing of JSONL logs."""

import logging
import os
from pathlib import Path
from typing import BinaryIO, Mapping, Optional

from claude_session_monitor.types import IndexEntry, Message, Session, SessionMeta
from claude_session_monitor.services.jsonl_parser import (
    decode_line,
    meta_from_record,
    parse_record,
)
from claude_session_monitor.services.metadata_index import load_index

logger = logging.getLogger(__name__)

SESSION_EXTENSION = ".jsonl"
# Sub-agent transcripts live beside their parent session but are not sessions
SUBAGENT_PREFIX = "agent-"


class MetaAccumulator:
    """Collects optional metadata scattered across the first lines of a log.

    Each field is taken from the first line that supplies it; the
    accumulator is resolved once branch, cwd and slug are all known.
    """

    def __init__(
        self,
        git_branch: Optional[str] = None,
        cwd: Optional[str] = None,
        slug: Optional[str] = None,
        summary: Optional[str] = None,
    ):
        self.git_branch = git_branch
        self.cwd = cwd
        self.slug = slug
        self.summary = summary

    @classmethod
    def from_session(cls, session: Session) -> "MetaAccumulator":
        return cls(
            git_branch=session.git_branch,
            cwd=session.cwd,
            slug=session.slug,
            summary=session.summary,
        )

    @property
    def resolved(self) -> bool:
        return bool(self.git_branch and self.cwd and self.slug)

    def fold(self, meta: SessionMeta):
        if self.git_branch is None:
            self.git_branch = meta.git_branch
        if self.cwd is None:
            self.cwd = meta.cwd
        if self.slug is None:
            self.slug = meta.slug
        if self.summary is None:
            self.summary = meta.summary

    def apply_to(self, session: Session):
        """Copy resolved fields onto the session without clearing anything."""
        for name in ("git_branch", "cwd", "slug", "summary"):
            value = getattr(self, name)
            if value and not getattr(session, name):
                setattr(session, name, value)


def is_session_file(path: str | Path) -> bool:
    path = Path(path)
    return path.suffix == SESSION_EXTENSION and not path.stem.startswith(SUBAGENT_PREFIX)


def discover_sessions(root: str | Path) -> dict[str, Session]:
    """Discover and fully parse every session under the projects root.

    A directory that cannot be listed raises OSError; a single file
    that cannot be read becomes a placeholder session instead.
    """
    root = Path(root)
    sessions: dict[str, Session] = {}
    if not root.exists():
        logger.warning("Projects root does not exist: %s", root)
        return sessions

    for project_dir in sorted(root.iterdir()):
        if not project_dir.is_dir():
            continue
        index = load_index(project_dir)
        for file_path in sorted(project_dir.iterdir()):
            if not is_session_file(file_path) or not file_path.is_file():
                continue
            entry = index.get(file_path.stem)
            try:
                session = parse_session_file(file_path, project_dir.name, entry)
            except OSError as e:
                logger.warning("Failed to parse %s: %s", file_path, e)
                session = _placeholder_session(file_path, project_dir.name, entry)
            sessions[session.id] = session

    logger.debug("Discovered %d sessions under %s", len(sessions), root)
    return sessions


def discover_single_session(file_path: str | Path) -> Optional[Session]:
    """Fully parse one newly seen log file, or return None for non-log paths."""
    path = Path(file_path)
    if not is_session_file(path):
        return None
    project_dir = path.parent
    entry = load_index(project_dir).get(path.stem)
    return parse_session_file(path, project_dir.name, entry)


def parse_session_file(
    file_path: str | Path,
    project_slug: str | None = None,
    entry: IndexEntry | None = None,
) -> Session:
    """Parse an entire session file. Raises OSError if it cannot be read."""
    path = Path(file_path)
    session = Session(
        id=path.stem,
        project_slug=project_slug or path.parent.name,
        file_path=path,
    )
    acc = MetaAccumulator()
    with open(path, "rb") as f:
        size = os.fstat(f.fileno()).st_size
        _consume_lines(session, acc, f, size)

    session.file_offset = size
    acc.apply_to(session)
    _seed_from_index(session, entry)
    return session


def read_new_lines(session: Session) -> list[Message]:
    """Parse only the bytes appended since the session's tail cursor.

    Returns the newly retained messages. A file that has not grown (or
    has shrunk) yields nothing and leaves the cursor where it was.
    """
    with open(session.file_path, "rb") as f:
        size = os.fstat(f.fileno()).st_size
        if size <= session.file_offset:
            return []
        f.seek(session.file_offset)
        acc = MetaAccumulator.from_session(session)
        new_messages = _consume_lines(session, acc, f, size - session.file_offset)

    session.file_offset = size
    acc.apply_to(session)
    return new_messages


def refresh_index_metadata(root: str | Path, sessions: Mapping[str, Session]) -> int:
    """Re-read every project's index and overlay titles and summaries.

    Only non-empty index values are applied. Returns the number of
    sessions whose display metadata changed.
    """
    root = Path(root)
    try:
        project_dirs = [p for p in root.iterdir() if p.is_dir()]
    except OSError as e:
        logger.debug("Cannot list projects root %s: %s", root, e)
        return 0

    changed = 0
    for project_dir in project_dirs:
        for session_id, entry in load_index(project_dir).items():
            session = sessions.get(session_id)
            if session is None:
                continue
            updated = False
            if entry.custom_title and entry.custom_title != session.custom_title:
                session.custom_title = entry.custom_title
                updated = True
            if entry.summary and entry.summary != session.summary:
                session.summary = entry.summary
                updated = True
            if updated:
                changed += 1
    return changed


def _consume_lines(
    session: Session,
    acc: MetaAccumulator,
    f: BinaryIO,
    limit: int,
) -> list[Message]:
    """Parse at most `limit` bytes of lines from `f` into the session."""
    new_messages = []
    remaining = limit
    while remaining > 0:
        line = f.readline(remaining)
        if not line:
            break
        remaining -= len(line)

        raw = decode_line(line)
        if raw is None:
            continue

        if not acc.resolved:
            meta = meta_from_record(raw)
            if meta is not None:
                acc.fold(meta)

        msg = parse_record(raw)
        if msg is not None:
            session.append(msg)
            new_messages.append(msg)
    return new_messages


def _seed_from_index(session: Session, entry: IndexEntry | None):
    if entry is None:
        return
    if not session.custom_title and entry.custom_title:
        session.custom_title = entry.custom_title
    if not session.summary and entry.summary:
        session.summary = entry.summary
    if not session.git_branch and entry.git_branch:
        session.git_branch = entry.git_branch
    if not session.cwd and entry.project_path:
        session.cwd = entry.project_path


def _placeholder_session(file_path: Path, project_slug: str, entry: IndexEntry | None) -> Session:
    session = Session(id=file_path.stem, project_slug=project_slug, file_path=file_path)
    _seed_from_index(session, entry)
    return session
