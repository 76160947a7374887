"""Loader for the per-project sessions-index.json companion file."""

import logging
from pathlib import Path
from typing import Any, Optional

import orjson

from claude_session_monitor.types import IndexEntry

logger = logging.getLogger(__name__)

INDEX_FILENAME = "sessions-index.json"


def index_path(project_dir: str | Path) -> Path:
    return Path(project_dir) / INDEX_FILENAME


def load_index(project_dir: str | Path) -> dict[str, IndexEntry]:
    """Read a project's metadata index, keyed by session id.

    Any I/O or decode problem yields an empty mapping; the index is
    advisory and never allowed to fail the caller.
    """
    path = index_path(project_dir)
    try:
        data = orjson.loads(path.read_bytes())
    except FileNotFoundError:
        return {}
    except (OSError, orjson.JSONDecodeError) as e:
        logger.debug("Ignoring unreadable index %s: %s", path, e)
        return {}

    if not isinstance(data, dict):
        return {}
    entries = data.get("entries")
    if not isinstance(entries, list):
        return {}

    index: dict[str, IndexEntry] = {}
    for raw in entries:
        if not isinstance(raw, dict):
            continue
        session_id = raw.get("sessionId")
        if not isinstance(session_id, str) or not session_id:
            continue
        index[session_id] = IndexEntry(
            session_id=session_id,
            custom_title=_opt_str(raw.get("customTitle")),
            summary=_opt_str(raw.get("summary")),
            git_branch=_opt_str(raw.get("gitBranch")),
            project_path=_opt_str(raw.get("projectPath")),
        )
    return index


def _opt_str(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value
    return None
