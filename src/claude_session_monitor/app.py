"""Application run loop: watcher, tick timer and text projection of the view."""

import logging
import signal
import sys
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QCoreApplication, QObject, QTimer, Signal

from claude_session_monitor.services.config_manager import MonitorConfig
from claude_session_monitor.services.file_watcher import FileWatcher
from claude_session_monitor.services.view_controller import ViewController
from claude_session_monitor.utils.formatting import format_relative_time, format_tokens

logger = logging.getLogger(__name__)

APP_NAME = "Claude Session Monitor"
ORG_NAME = "claude-session-monitor"


def configure_application_identity():
    """Set the names QSettings uses to locate the config file."""
    QCoreApplication.setApplicationName(APP_NAME)
    QCoreApplication.setOrganizationName(ORG_NAME)
    QCoreApplication.setOrganizationDomain("claude.local")


def format_session_line(controller: ViewController, session_id: str, now: float | None = None) -> str:
    session = controller.store.get(session_id)
    stats = controller.stats(session_id)
    if stats.is_active:
        marker = "●"
    elif session_id == controller.selected_id:
        marker = "○"
    else:
        marker = " "
    return (
        f"{marker} {session.display_name} [{stats.message_count}] "
        f"{format_tokens(stats.tokens_in)} in / {format_tokens(stats.tokens_out)} out  "
        f"{format_relative_time(session.last_activity, now)}  {session.short_id}"
    )


def render_listing(controller: ViewController, now: float | None = None) -> list[str]:
    """Project the controller's visible list onto plain text lines."""
    active_label = " [active]" if controller.active_only else ""
    if controller.filter_text is not None:
        title = f"Sessions{active_label} (/{controller.filter_text})"
    else:
        title = f"Sessions{active_label} ({len(controller.visible_ids)})"
    lines = [title]
    lines.extend(format_session_line(controller, sid, now) for sid in controller.visible_ids)
    return lines


class Monitor(QObject):
    """Drives the controller on a fixed tick and reports view changes."""

    view_changed = Signal()

    def __init__(self, controller: ViewController, config: MonitorConfig | None = None, parent=None):
        super().__init__(parent)
        self._controller = controller
        self._config = config or MonitorConfig()
        self._watcher = FileWatcher(controller.events, self._config.debounce_ms, self)
        self._timer = QTimer(self)
        self._timer.setInterval(self._config.tick_interval_ms)
        self._timer.timeout.connect(self.tick)
        self._last_snapshot: Optional[tuple] = None

    @property
    def controller(self) -> ViewController:
        return self._controller

    def start(self):
        self._watcher.start(self._controller.root)
        self._timer.start()
        self._report()

    def stop(self):
        self._timer.stop()
        self._watcher.stop()

    def tick(self):
        self._controller.tick()
        self._report()

    def _snapshot(self) -> tuple:
        ids = tuple(self._controller.visible_ids)
        counts = tuple(self._controller.store.get(sid).message_count for sid in ids)
        return ids, counts, self._controller.selected_id

    def _report(self):
        snapshot = self._snapshot()
        if snapshot == self._last_snapshot:
            return
        self._last_snapshot = snapshot
        session = self._controller.selected_session
        logger.info(
            "%d sessions visible, selected: %s",
            len(snapshot[0]),
            f"{session.display_name} ({session.message_count} messages)" if session else "none",
        )
        self.view_changed.emit()


def run(
    root: str | Path,
    config: MonitorConfig | None = None,
    *,
    active_only: bool = False,
    filter_text: str | None = None,
    once: bool = False,
) -> int:
    """Launch the monitor. With `once`, print the current listing and exit."""
    config = config or MonitorConfig()
    controller = ViewController(root, config=config)
    controller.load()
    if active_only:
        controller.toggle_active_only()
    if filter_text:
        controller.set_filter(filter_text)

    if once:
        for line in render_listing(controller):
            print(line)
        return 0

    app = QCoreApplication.instance() or QCoreApplication(sys.argv)

    # Allow Ctrl+C to kill the app
    signal.signal(signal.SIGINT, signal.SIG_DFL)

    monitor = Monitor(controller, config)
    monitor.start()
    ret = app.exec()
    monitor.stop()
    return ret
