"""View-state controller: ordering, dedup, filtering and change reconciliation."""

import logging
import queue
import time
from pathlib import Path
from typing import Callable, Optional

from claude_session_monitor.types import (
    ChangeEvent,
    ChangeKind,
    FocusPanel,
    Session,
    SessionStats,
)
from claude_session_monitor.services.activity import is_active
from claude_session_monitor.services.config_manager import MonitorConfig
from claude_session_monitor.services.metadata_index import INDEX_FILENAME
from claude_session_monitor.services.session_store import SessionStore
from claude_session_monitor.services.session_tailer import (
    discover_sessions,
    discover_single_session,
    is_session_file,
    read_new_lines,
    refresh_index_metadata,
)

logger = logging.getLogger(__name__)

EventQueue = queue.SimpleQueue


class ViewController:
    """Owns the session store and the state the presentation layer reads.

    All mutation happens on the caller's thread. Change notifications
    arrive through a queue that a watcher fills from elsewhere; they are
    only applied when `tick()` or `drain_events()` polls it.
    """

    def __init__(
        self,
        root: str | Path,
        store: SessionStore | None = None,
        *,
        events: "queue.SimpleQueue[ChangeEvent] | None" = None,
        config: MonitorConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], float] = time.time,
    ):
        self._root = Path(root)
        self._store = store if store is not None else SessionStore()
        self._events = events if events is not None else EventQueue()
        self._config = config or MonitorConfig()
        self._clock = clock
        self._wall_clock = wall_clock
        self._last_index_refresh = clock()

        self._visible_ids: list[str] = []
        self._selected_id: Optional[str] = None
        # Last selection made on purpose; survives filters that hide it
        self._preferred_id: Optional[str] = None
        self._filter_text: Optional[str] = None
        self._filter_mode = False
        self._active_only = False
        self._focus = FocusPanel.SESSIONS
        self._chat_scroll = 0
        self._chat_total_lines = 0
        self._scroll_locked_to_bottom = True

        if len(self._store):
            self.recompute()

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def root(self) -> Path:
        return self._root

    @property
    def store(self) -> SessionStore:
        return self._store

    @property
    def events(self) -> "queue.SimpleQueue[ChangeEvent]":
        return self._events

    @property
    def visible_ids(self) -> list[str]:
        return list(self._visible_ids)

    @property
    def selected_id(self) -> Optional[str]:
        return self._selected_id

    @property
    def selected_session(self) -> Optional[Session]:
        if self._selected_id is None:
            return None
        return self._store.get(self._selected_id)

    @property
    def selected_index(self) -> Optional[int]:
        if self._selected_id is None:
            return None
        try:
            return self._visible_ids.index(self._selected_id)
        except ValueError:
            return None

    @property
    def filter_text(self) -> Optional[str]:
        return self._filter_text

    @property
    def filter_mode(self) -> bool:
        return self._filter_mode

    @property
    def active_only(self) -> bool:
        return self._active_only

    @property
    def focus(self) -> FocusPanel:
        return self._focus

    @property
    def chat_scroll(self) -> int:
        return self._chat_scroll

    @property
    def chat_total_lines(self) -> int:
        return self._chat_total_lines

    @property
    def scroll_locked_to_bottom(self) -> bool:
        return self._scroll_locked_to_bottom

    def visible_sessions(self) -> list[Session]:
        return [self._store.get(sid) for sid in self._visible_ids]

    def is_active(self, session_id: str) -> bool:
        session = self._store.get(session_id)
        if session is None:
            return False
        return is_active(
            session.file_path,
            now=self._wall_clock(),
            window=self._config.active_window_s,
        )

    def stats(self, session_id: str) -> Optional[SessionStats]:
        session = self._store.get(session_id)
        if session is None:
            return None
        return SessionStats(
            message_count=session.message_count,
            tokens_in=session.total_tokens_in,
            tokens_out=session.total_tokens_out,
            is_active=self.is_active(session_id),
        )

    # ------------------------------------------------------------------
    # Loading and periodic work
    # ------------------------------------------------------------------

    def load(self):
        """Full scan of the projects root. Raises OSError if it can't be read."""
        self._store.replace_all(discover_sessions(self._root))
        self._last_index_refresh = self._clock()
        self.recompute()
        logger.info("Loaded %d sessions from %s", len(self._store), self._root)

    def refresh_all(self) -> bool:
        """Rebuild the store from a full rescan, keeping it on failure."""
        try:
            sessions = discover_sessions(self._root)
        except OSError as e:
            logger.warning("Full refresh of %s failed: %s", self._root, e)
            return False
        self._store.replace_all(sessions)
        self._last_index_refresh = self._clock()
        self.recompute()
        return True

    def tick(self):
        """One pass of the cooperative loop: events, then maintenance."""
        handled = self.drain_events()
        refreshed = self.maybe_refresh_metadata()
        # The active window slides with time even when nothing changed
        if self._active_only and not handled and not refreshed:
            self.recompute()

    def drain_events(self) -> int:
        """Apply every queued change notification, in arrival order."""
        count = 0
        while True:
            try:
                event = self._events.get_nowait()
            except queue.Empty:
                break
            self.handle_event(event)
            count += 1
        return count

    def maybe_refresh_metadata(self) -> bool:
        now = self._clock()
        if now - self._last_index_refresh < self._config.index_refresh_interval_s:
            return False
        self._last_index_refresh = now
        self.refresh_metadata()
        return True

    def refresh_metadata(self):
        changed = refresh_index_metadata(self._root, self._store)
        if changed:
            logger.debug("Index refresh updated %d sessions", changed)
        self.recompute()

    # ------------------------------------------------------------------
    # Change notifications
    # ------------------------------------------------------------------

    def handle_event(self, event: ChangeEvent):
        path = Path(event.path)
        if event.kind == ChangeKind.MODIFIED:
            if path.name == INDEX_FILENAME:
                self.refresh_metadata()
                return
            session = self._store.find_by_path(path)
            if session is not None:
                self._tail(session)
                return
        self._create(path)

    def _tail(self, session: Session):
        try:
            new_messages = read_new_lines(session)
        except OSError as e:
            logger.debug("Tail of %s failed: %s", session.file_path, e)
            return
        if new_messages:
            logger.debug("%s: %d new messages", session.short_id, len(new_messages))
        self.recompute()

    def _create(self, path: Path):
        if not is_session_file(path):
            return
        try:
            session = discover_single_session(path)
        except OSError as e:
            logger.debug("Could not parse new session %s: %s", path, e)
            return
        if session is None:
            return
        self._store.insert(session)
        logger.debug("Tracking new session %s", session.id)
        self.recompute()

    # ------------------------------------------------------------------
    # Ordering
    # ------------------------------------------------------------------

    def recompute(self):
        """Rebuild the visible id list and reconcile the selection."""
        ordered = self._sorted_ids()
        ordered = self._deduplicate(ordered)

        if self._active_only:
            now = self._wall_clock()
            window = self._config.active_window_s
            ordered = [
                sid for sid in ordered
                if is_active(self._store.get(sid).file_path, now=now, window=window)
            ]

        if self._filter_text:
            needle = self._filter_text.lower()
            ordered = [sid for sid in ordered if self._matches(self._store.get(sid), needle)]

        self._visible_ids = ordered
        self._restore_selection()

    def _sorted_ids(self) -> list[str]:
        # sorted() is stable, so equal timestamps keep store order
        return sorted(
            self._store.ids(),
            key=lambda sid: self._store.get(sid).last_activity,
            reverse=True,
        )

    def _deduplicate(self, ordered: list[str]) -> list[str]:
        """Collapse sessions sharing a slug onto the most recent one."""
        kept_by_slug: dict[str, Session] = {}
        result = []
        for sid in ordered:
            session = self._store.get(sid)
            if session.slug:
                kept = kept_by_slug.get(session.slug)
                if kept is not None:
                    if not kept.custom_title and session.custom_title:
                        kept.custom_title = session.custom_title
                    continue
                kept_by_slug[session.slug] = session
            result.append(sid)
        return result

    @staticmethod
    def _matches(session: Session, needle: str) -> bool:
        return (
            needle in session.display_name.lower()
            or needle in session.id.lower()
            or needle in (session.summary or "").lower()
        )

    def _restore_selection(self):
        if self._preferred_id is not None and self._preferred_id not in self._store:
            self._preferred_id = None

        visible = set(self._visible_ids)
        for candidate in (self._selected_id, self._preferred_id):
            if candidate is not None and candidate in visible:
                self._selected_id = candidate
                return

        self._selected_id = self._visible_ids[0] if self._visible_ids else None
        if self._preferred_id is None:
            self._preferred_id = self._selected_id

    # ------------------------------------------------------------------
    # Mutation entry points
    # ------------------------------------------------------------------

    def move_selection(self, delta: int):
        if not self._visible_ids:
            return
        current = self.selected_index or 0
        new_index = max(0, min(len(self._visible_ids) - 1, current + delta))
        self._select(self._visible_ids[new_index])

    def select_index(self, index: int):
        if 0 <= index < len(self._visible_ids):
            self._select(self._visible_ids[index])

    def select_session(self, session_id: str) -> bool:
        if session_id not in self._visible_ids:
            return False
        self._select(session_id)
        return True

    def _select(self, session_id: str):
        self._selected_id = session_id
        self._preferred_id = session_id
        self._scroll_locked_to_bottom = True

    def set_filter(self, text: Optional[str]):
        self._filter_text = text or None
        self.recompute()

    def begin_filter(self):
        self._filter_mode = True
        self._filter_text = ""
        self.recompute()

    def append_filter_char(self, char: str):
        self._filter_text = (self._filter_text or "") + char
        self.recompute()

    def backspace_filter(self):
        text = (self._filter_text or "")[:-1]
        self._filter_text = text or None
        self.recompute()

    def commit_filter(self):
        self._filter_mode = False
        self.recompute()

    def cancel_filter(self):
        self._filter_mode = False
        self._filter_text = None
        self.recompute()

    def toggle_active_only(self):
        self._active_only = not self._active_only
        self.recompute()

    def toggle_focus(self):
        if self._focus == FocusPanel.SESSIONS:
            self._focus = FocusPanel.CHAT
        else:
            self._focus = FocusPanel.SESSIONS

    def scroll_chat(self, delta: int):
        self._chat_scroll = max(0, self._chat_scroll + delta)
        self._scroll_locked_to_bottom = False

    def scroll_to_top(self):
        self._chat_scroll = 0
        self._scroll_locked_to_bottom = False

    def scroll_to_bottom(self):
        self._scroll_locked_to_bottom = True

    def set_chat_metrics(self, total_lines: int, viewport_height: int = 0):
        """Record the rendered chat height and clamp the scroll position."""
        self._chat_total_lines = total_lines
        max_scroll = max(0, total_lines - viewport_height)
        if self._scroll_locked_to_bottom:
            self._chat_scroll = max_scroll
        else:
            self._chat_scroll = min(self._chat_scroll, max_scroll)
