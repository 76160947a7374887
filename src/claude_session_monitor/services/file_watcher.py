"""File system watcher that feeds debounced change events into a queue."""

import logging
import os
import queue
from pathlib import Path

from PySide6.QtCore import QObject, QFileSystemWatcher, QTimer

from claude_session_monitor.types import ChangeEvent, ChangeKind
from claude_session_monitor.services.metadata_index import INDEX_FILENAME
from claude_session_monitor.services.session_tailer import SESSION_EXTENSION

logger = logging.getLogger(__name__)


def is_relevant_path(path: str | Path) -> bool:
    """Only session logs and metadata indexes are worth reporting."""
    path = Path(path)
    return path.suffix == SESSION_EXTENSION or path.name == INDEX_FILENAME


class FileWatcher(QObject):
    """Watches the projects tree and enqueues {path, kind} change events.

    The watcher never touches session state; the view controller drains
    the queue on its own schedule.
    """

    def __init__(self, events: "queue.SimpleQueue[ChangeEvent]", debounce_ms: int = 100, parent=None):
        super().__init__(parent)
        self._events = events
        self._debounce_ms = debounce_ms
        self._watcher = QFileSystemWatcher(self)
        self._debounce_timers: dict[str, QTimer] = {}
        self._projects_root = ""
        self._known_entries: dict[str, set[str]] = {}

        self._watcher.fileChanged.connect(self._on_file_changed)
        self._watcher.directoryChanged.connect(self._on_directory_changed)

    def start(self, projects_root: str | Path):
        """Start watching the projects root, its project dirs and their files."""
        self.stop()
        self._projects_root = str(projects_root)
        self._watch_directory(self._projects_root)
        for entry in self._known_entries.get(self._projects_root, set()):
            path = os.path.join(self._projects_root, entry)
            if os.path.isdir(path):
                self._watch_directory(path)
        logger.debug(
            "Watching %d directories and %d files",
            len(self._watcher.directories()), len(self._watcher.files()),
        )

    def stop(self):
        """Stop all file watching."""
        if self._watcher.files():
            self._watcher.removePaths(self._watcher.files())
        if self._watcher.directories():
            self._watcher.removePaths(self._watcher.directories())
        for timer in self._debounce_timers.values():
            timer.stop()
        self._debounce_timers.clear()
        self._known_entries.clear()
        self._projects_root = ""

    def _watch_directory(self, path: str):
        self._watcher.addPath(path)
        self._known_entries[path] = self._list_entries(path)
        if path == self._projects_root:
            return
        for name in self._known_entries[path]:
            if is_relevant_path(name):
                self._watcher.addPath(os.path.join(path, name))

    @staticmethod
    def _list_entries(path: str) -> set[str]:
        try:
            return set(os.listdir(path))
        except OSError:
            return set()

    def _on_file_changed(self, path: str):
        # Qt removes the file from the watcher after emitting fileChanged
        # on some platforms; re-add it after the debounce fires
        self._debounce(path, lambda: self._emit_file_changed(path))

    def _on_directory_changed(self, path: str):
        self._debounce(path, lambda: self._emit_dir_changed(path))

    def _debounce(self, key: str, callback):
        """Debounce a callback using the given key."""
        timer = self._debounce_timers.get(key)
        if timer is not None:
            timer.stop()
            timer.timeout.disconnect()
        else:
            timer = QTimer(self)
            timer.setSingleShot(True)
            self._debounce_timers[key] = timer

        timer.timeout.connect(callback)
        timer.start(self._debounce_ms)

    def _emit_file_changed(self, path: str):
        if os.path.exists(path) and path not in self._watcher.files():
            self._watcher.addPath(path)
        if is_relevant_path(path):
            self._enqueue(path, ChangeKind.MODIFIED)

    def _emit_dir_changed(self, path: str):
        """Diff the directory listing to find newly created entries."""
        before = self._known_entries.get(path, set())
        after = self._list_entries(path)
        self._known_entries[path] = after

        for name in sorted(after - before):
            full = os.path.join(path, name)
            if path == self._projects_root:
                if os.path.isdir(full):
                    self._watch_directory(full)
                    for child in sorted(self._known_entries.get(full, set())):
                        if is_relevant_path(child):
                            self._enqueue(os.path.join(full, child), ChangeKind.CREATED)
                continue
            if is_relevant_path(name):
                self._watcher.addPath(full)
                self._enqueue(full, ChangeKind.CREATED)

    def _enqueue(self, path: str, kind: ChangeKind):
        self._events.put(ChangeEvent(path=Path(path), kind=kind))
