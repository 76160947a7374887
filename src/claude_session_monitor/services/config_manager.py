"""Application configuration manager wrapping QSettings."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from PySide6.QtCore import QObject, Signal, Slot, QSettings

logger = logging.getLogger(__name__)

# Default values
DEFAULTS = {
    "general/sessionDir": "~/.claude/projects",
    "monitor/tickIntervalMs": 250,
    "monitor/indexRefreshIntervalS": 10,
    "monitor/activeWindowS": 300,
    "monitor/debounceMs": 100,
    "advanced/debugLogging": False,
}


@dataclass
class MonitorConfig:
    """Timing knobs for the monitor loop."""
    tick_interval_ms: int = 250
    index_refresh_interval_s: float = 10.0
    active_window_s: float = 300.0
    debounce_ms: int = 100


class ConfigManager(QObject):
    """Centralized application settings."""

    settings_changed = Signal(str)  # key

    def __init__(self, parent=None):
        super().__init__(parent)
        self._settings = QSettings()

    @Slot(str, result=str)
    def get_string(self, key: str) -> str:
        return str(self._settings.value(key, DEFAULTS.get(key, "")))

    @Slot(str, result=int)
    def get_int(self, key: str) -> int:
        val = self._settings.value(key, DEFAULTS.get(key, 0))
        try:
            return int(val)
        except (ValueError, TypeError):
            logger.warning("Invalid integer for %s: %r", key, val)
            return DEFAULTS.get(key, 0)

    @Slot(str, result=bool)
    def get_bool(self, key: str) -> bool:
        val = self._settings.value(key, DEFAULTS.get(key, False))
        if isinstance(val, bool):
            return val
        if isinstance(val, str):
            return val.lower() in ("true", "1", "yes")
        return bool(val)

    @Slot(str, str)
    def set_string(self, key: str, value: str):
        self._settings.setValue(key, value)
        self.settings_changed.emit(key)

    @Slot(str, int)
    def set_int(self, key: str, value: int):
        self._settings.setValue(key, value)
        self.settings_changed.emit(key)

    @Slot(str, bool)
    def set_bool(self, key: str, value: bool):
        self._settings.setValue(key, value)
        self.settings_changed.emit(key)

    def session_dir(self) -> Path:
        """Projects root with `~` expanded."""
        return Path(os.path.expanduser(self.get_string("general/sessionDir")))

    def monitor_config(self) -> MonitorConfig:
        return MonitorConfig(
            tick_interval_ms=self.get_int("monitor/tickIntervalMs"),
            index_refresh_interval_s=float(self.get_int("monitor/indexRefreshIntervalS")),
            active_window_s=float(self.get_int("monitor/activeWindowS")),
            debounce_ms=self.get_int("monitor/debounceMs"),
        )
