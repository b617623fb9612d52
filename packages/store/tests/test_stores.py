"""Tests for prwatch-store implementations."""

from __future__ import annotations

import json
import threading
from unittest.mock import MagicMock

from prwatch_store.gist import GistStore
from prwatch_store.json_file import JsonFileStore
from prwatch_store.models import ReviewEntry, SessionRecord, TrackedRecord
from prwatch_store.noop import NoOpStore
from prwatch_store.sqlite import SQLiteStore


def _make_record(acknowledged=True, last_refresh_time="2024-05-01T12:00:00Z"):
    return SessionRecord(
        last_refresh_time=last_refresh_time,
        items=[
            TrackedRecord(
                id="42",
                title="Fix bug",
                repository="org/r1",
                acknowledged=acknowledged,
                reviews=[ReviewEntry(id="r1", author="bob", submitted_at="2024-05-01T11:00:00Z")],
            ),
            TrackedRecord(id="43", title="Add docs", repository="org/r2", acknowledged=False),
        ],
    )


def _assert_same_record(restored: SessionRecord, original: SessionRecord):
    assert restored.last_refresh_time == original.last_refresh_time
    assert [(t.id, t.title, t.repository, t.acknowledged) for t in restored.items] == [
        (t.id, t.title, t.repository, t.acknowledged) for t in original.items
    ]
    assert restored.items[0].reviews[0].submitted_at == original.items[0].reviews[0].submitted_at


# ---------------------------------------------------------------------------
# NoOpStore
# ---------------------------------------------------------------------------


class TestNoOpStore:
    def test_save_does_not_raise(self):
        NoOpStore().save("default", _make_record())  # must not raise

    def test_load_returns_none(self):
        store = NoOpStore()
        store.save("default", _make_record())
        assert store.load("default") is None
        assert store.list_names() == []


# ---------------------------------------------------------------------------
# JsonFileStore
# ---------------------------------------------------------------------------


class TestJsonFileStore:
    def test_save_and_load(self, tmp_path):
        store = JsonFileStore(tmp_path / "state.json")
        record = _make_record()
        store.save("default", record)

        _assert_same_record(store.load("default"), record)

    def test_missing_file_loads_none(self, tmp_path):
        assert JsonFileStore(tmp_path / "absent.json").load("default") is None

    def test_sessions_kept_side_by_side(self, tmp_path):
        store = JsonFileStore(tmp_path / "state.json")
        store.save("work", _make_record(acknowledged=True))
        store.save("home", _make_record(acknowledged=False))

        assert store.list_names() == ["home", "work"]
        assert store.load("work").items[0].acknowledged is True
        assert store.load("home").items[0].acknowledged is False

    def test_save_creates_parent_directory(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "state.json"
        JsonFileStore(path).save("default", _make_record())
        assert path.exists()

    def test_never_refreshed_roundtrips_as_none(self, tmp_path):
        store = JsonFileStore(tmp_path / "state.json")
        store.save("default", SessionRecord())
        restored = store.load("default")
        assert restored.last_refresh_time is None
        assert restored.items == []

    def test_corrupt_file_loads_none(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("{not json")
        assert JsonFileStore(path).load("default") is None

    def test_malformed_entry_loads_none(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text(json.dumps({"default": {"items": [{"title": "no id"}]}}))
        assert JsonFileStore(path).load("default") is None

    def test_save_failure_does_not_raise(self, tmp_path, capsys):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")
        store = JsonFileStore(blocker / "state.json")

        store.save("default", _make_record())  # must not raise

        assert "Warning" in capsys.readouterr().out

    def test_delete(self, tmp_path):
        store = JsonFileStore(tmp_path / "state.json")
        store.save("work", _make_record())
        store.save("home", _make_record())

        store.delete("work")
        store.delete("never-saved")

        assert store.list_names() == ["home"]

    def test_concurrent_saves_keep_every_session(self, tmp_path):
        store = JsonFileStore(tmp_path / "state.json")
        errors = []

        def worker(n):
            try:
                for _ in range(20):
                    store.save(f"s{n}", _make_record())
                    assert store.load(f"s{n}") is not None
            except AssertionError as e:
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert store.list_names() == [f"s{n}" for n in range(8)]
        assert list(tmp_path.iterdir()) == [tmp_path / "state.json"]


# ---------------------------------------------------------------------------
# SQLiteStore
# ---------------------------------------------------------------------------


class TestSQLiteStore:
    def test_save_and_load(self, tmp_path):
        store = SQLiteStore(db_path=str(tmp_path / "test.db"))
        record = _make_record()
        store.save("default", record)

        _assert_same_record(store.load("default"), record)
        store.close()

    def test_save_replaces_previous_state(self, tmp_path):
        store = SQLiteStore(db_path=str(tmp_path / "test.db"))
        store.save("default", _make_record(acknowledged=True))
        store.save("default", _make_record(acknowledged=False))

        assert store.list_names() == ["default"]
        assert store.load("default").items[0].acknowledged is False
        store.close()

    def test_missing_session_loads_none(self, tmp_path):
        store = SQLiteStore(db_path=str(tmp_path / "test.db"))
        assert store.load("nope") is None
        store.close()

    def test_delete(self, tmp_path):
        store = SQLiteStore(db_path=str(tmp_path / "test.db"))
        store.save("work", _make_record())
        store.delete("work")
        assert store.load("work") is None
        store.close()

    def test_persists_across_connections(self, tmp_path):
        """Data written by one SQLiteStore instance must be readable by another."""
        db_path = str(tmp_path / "test.db")
        store_a = SQLiteStore(db_path=db_path)
        store_a.save("default", _make_record())
        store_a.close()

        store_b = SQLiteStore(db_path=db_path)
        assert store_b.load("default") is not None
        store_b.close()

    def test_closed_connection_does_not_raise(self, tmp_path, capsys):
        store = SQLiteStore(db_path=str(tmp_path / "test.db"))
        store.close()

        assert store.load("default") is None
        assert store.list_names() == []
        store.delete("default")  # must not raise
        store.save("default", _make_record())

        assert "Warning" in capsys.readouterr().out


# ---------------------------------------------------------------------------
# GistStore
# ---------------------------------------------------------------------------


def _make_gist_mock(sessions: dict | None = None):
    """Return a mock Gist object with prwatch_state.json pre-populated."""
    gist = MagicMock()
    if sessions is None:
        gist.files = {}
    else:
        file_mock = MagicMock()
        file_mock.content = json.dumps(sessions)
        gist.files = {"prwatch_state.json": file_mock}
    return gist


def _make_gist_store():
    """Return a GistStore with a mocked Github client."""
    # Github is a local import inside __init__, so bypass it entirely
    # by constructing the object and injecting the mock client directly.
    store = object.__new__(GistStore)
    store._gist_id = "abc123"
    store._gh = MagicMock()
    return store


class TestGistStore:
    def test_save_writes_session(self):
        store = _make_gist_store()
        gist = _make_gist_mock(sessions={})
        store._gh.get_gist.return_value = gist

        store.save("default", _make_record())

        gist.edit.assert_called_once()
        content = json.loads(gist.edit.call_args[1]["files"]["prwatch_state.json"]["content"])
        assert list(content) == ["default"]
        assert content["default"]["items"][0]["id"] == "42"

    def test_save_keeps_other_sessions(self):
        store = _make_gist_store()
        gist = _make_gist_mock(sessions={"home": SessionRecord().to_dict()})
        store._gh.get_gist.return_value = gist

        store.save("work", _make_record())

        content = json.loads(gist.edit.call_args[1]["files"]["prwatch_state.json"]["content"])
        assert set(content) == {"home", "work"}

    def test_save_does_not_raise_on_exception(self, capsys):
        store = _make_gist_store()
        store._gh.get_gist.side_effect = Exception("network error")

        store.save("default", _make_record())  # must not raise

        assert "Warning" in capsys.readouterr().out

    def test_load_returns_saved_session(self):
        record = _make_record()
        store = _make_gist_store()
        store._gh.get_gist.return_value = _make_gist_mock(sessions={"default": record.to_dict()})

        _assert_same_record(store.load("default"), record)

    def test_load_returns_none_on_exception(self):
        store = _make_gist_store()
        store._gh.get_gist.side_effect = Exception("network error")
        assert store.load("default") is None

    def test_load_handles_missing_file(self):
        store = _make_gist_store()
        store._gh.get_gist.return_value = _make_gist_mock(sessions=None)
        assert store.load("default") is None
        assert store.list_names() == []

    def test_delete_removes_session(self):
        store = _make_gist_store()
        gist = _make_gist_mock(sessions={"home": {}, "work": {}})
        store._gh.get_gist.return_value = gist

        store.delete("work")

        content = json.loads(gist.edit.call_args[1]["files"]["prwatch_state.json"]["content"])
        assert list(content) == ["home"]

    def test_delete_unknown_session_does_not_write(self):
        store = _make_gist_store()
        gist = _make_gist_mock(sessions={"home": {}})
        store._gh.get_gist.return_value = gist

        store.delete("work")

        gist.edit.assert_not_called()
