"""Services for Claude Session Monitor."""

from claude_session_monitor.services.session_store import SessionStore
from claude_session_monitor.services.view_controller import ViewController
from claude_session_monitor.services.file_watcher import FileWatcher
from claude_session_monitor.services.config_manager import ConfigManager, MonitorConfig
from claude_session_monitor.services.metadata_index import load_index
from claude_session_monitor.services.session_tailer import (
    discover_sessions,
    discover_single_session,
    read_new_lines,
    refresh_index_metadata,
)

__all__ = [
    "SessionStore",
    "ViewController",
    "FileWatcher",
    "ConfigManager",
    "MonitorConfig",
    "load_index",
    "discover_sessions",
    "discover_single_session",
    "read_new_lines",
    "refresh_index_metadata",
]
