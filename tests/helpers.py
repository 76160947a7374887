"""Shared test helpers."""

import json
import os
import time
from pathlib import Path

SESSION_ID = "0d5c3a4e-1111-4222-8333-944455556666"


def user_line(content="Hello", timestamp="2026-02-13T10:00:00.000Z", **extra) -> str:
    record = {
        "type": "user",
        "timestamp": timestamp,
        "message": {"role": "user", "content": content},
    }
    record.update(extra)
    return json.dumps(record)


def assistant_line(
    content="Hi there",
    timestamp="2026-02-13T10:00:01.000Z",
    usage=None,
    **extra,
) -> str:
    message = {"role": "assistant", "content": content}
    if usage is not None:
        message["usage"] = usage
    record = {"type": "assistant", "timestamp": timestamp, "message": message}
    record.update(extra)
    return json.dumps(record)


def meta_line(session_id=SESSION_ID, branch="main", cwd="/home/wiz/app", slug="brave-otter", **extra) -> str:
    """A user line that also carries session metadata."""
    record = {
        "type": "user",
        "timestamp": "2026-02-13T09:59:59.000Z",
        "sessionId": session_id,
        "gitBranch": branch,
        "cwd": cwd,
        "slug": slug,
        "message": {"role": "user", "content": "Start"},
    }
    record.update(extra)
    return json.dumps(record)


def write_lines(path: Path, lines: list[str]):
    path.write_text("".join(line + "\n" for line in lines))


def append_lines(path: Path, lines: list[str]):
    with open(path, "a") as f:
        for line in lines:
            f.write(line + "\n")


def write_index(project_dir: Path, entries: list[dict]):
    (project_dir / "sessions-index.json").write_text(json.dumps({"entries": entries}))


def set_mtime_ago(path: Path, seconds: float):
    ts = time.time() - seconds
    os.utime(path, (ts, ts))


def process_events(app, rounds=20, delay=0.05):
    """Pump the Qt event loop so watcher callbacks and timers fire."""
    for _ in range(rounds):
        app.processEvents()
        time.sleep(delay)
