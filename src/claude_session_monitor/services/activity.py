"""Active session detection based on log file modification time."""

import os
import time
from pathlib import Path

# A session counts as active if its log was written within this window
ACTIVE_WINDOW_S = 300.0


def is_active(
    file_path: str | Path,
    now: float | None = None,
    window: float = ACTIVE_WINDOW_S,
) -> bool:
    """Return True if the file was modified within `window` seconds of `now`."""
    if now is None:
        now = time.time()
    try:
        mtime = os.stat(file_path).st_mtime
    except OSError:
        return False
    return now - mtime <= window
