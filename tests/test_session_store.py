"""Tests for claude_session_monitor.services.session_store."""

from pathlib import Path

from claude_session_monitor.services.session_store import SessionStore
from claude_session_monitor.types import Session


def _s(sid, path="/tmp/x.jsonl"):
    return Session(id=sid, project_slug="p", file_path=Path(path))


class TestSessionStore:
    def test_insert_and_get(self):
        store = SessionStore()
        store.insert(_s("a"))
        assert "a" in store
        assert len(store) == 1
        assert store.get("a").id == "a"
        assert store.get("missing") is None

    def test_insert_replaces_same_id(self):
        store = SessionStore()
        store.insert(_s("a", "/one.jsonl"))
        store.insert(_s("a", "/two.jsonl"))
        assert len(store) == 1
        assert store.get("a").file_path == Path("/two.jsonl")

    def test_replace_all(self):
        store = SessionStore({"a": _s("a")})
        store.replace_all({"b": _s("b"), "c": _s("c")})
        assert sorted(store) == ["b", "c"]
        assert "a" not in store

    def test_find_by_path(self):
        store = SessionStore({"a": _s("a", "/p/a.jsonl"), "b": _s("b", "/p/b.jsonl")})
        assert store.find_by_path("/p/b.jsonl").id == "b"
        assert store.find_by_path("/p/c.jsonl") is None

    def test_ids_and_values_are_copies(self):
        store = SessionStore({"a": _s("a")})
        ids = store.ids()
        ids.append("zzz")
        assert store.ids() == ["a"]
        assert [s.id for s in store.values()] == ["a"]
