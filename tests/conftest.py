"""Shared test fixtures for Claude Session Monitor."""

import os
import sys
from pathlib import Path

import pytest

from helpers import assistant_line, meta_line, user_line, write_lines


@pytest.fixture(scope="session")
def qapp():
    """Create a QCoreApplication for tests that need Qt."""
    os.environ["QT_QPA_PLATFORM"] = "offscreen"
    from PySide6.QtCore import QCoreApplication

    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication(sys.argv or ["test"])
    yield app


@pytest.fixture
def projects_dir(tmp_path) -> Path:
    """Create a temporary Claude projects directory structure."""
    root = tmp_path / ".claude" / "projects"
    (root / "-home-wiz-projects-myapp").mkdir(parents=True)
    return root


@pytest.fixture
def project_dir(projects_dir) -> Path:
    return projects_dir / "-home-wiz-projects-myapp"


@pytest.fixture
def session_file(project_dir) -> Path:
    """A small two-turn session with metadata on its first line."""
    path = project_dir / "sess-0001.jsonl"
    write_lines(path, [
        meta_line(session_id="sess-0001"),
        assistant_line("First answer", usage={"input_tokens": 10, "output_tokens": 4}),
        user_line("Second question", timestamp="2026-02-13T10:00:02.000Z"),
    ])
    return path
