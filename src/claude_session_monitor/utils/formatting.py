"""Small text formatters for session listings."""

import time
from datetime import datetime


def format_tokens(count: int) -> str:
    """Abbreviate a token count: 1234 → 1.2K, 2500000 → 2.5M."""
    if count >= 1_000_000:
        return f"{count / 1_000_000:.1f}M"
    if count >= 1_000:
        return f"{count / 1_000:.1f}K"
    return str(count)


def format_relative_time(when: datetime, now: float | None = None) -> str:
    """Format a timestamp as a human-readable relative time."""
    if now is None:
        now = time.time()
    diff = now - when.timestamp()
    if diff < 60:
        return "just now"
    elif diff < 3600:
        return f"{int(diff / 60)}m ago"
    elif diff < 86400:
        return f"{int(diff / 3600)}h ago"
    elif diff < 604800:
        return f"{int(diff / 86400)}d ago"
    elif diff < 2592000:
        return f"{int(diff / 604800)}w ago"
    else:
        return f"{int(diff / 2592000)}mo ago"
