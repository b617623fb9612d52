"""Tests for the in-memory item store."""

import pytest

from prwatch_core.item_store import ItemStore
from prwatch_core.models import PullRequest, TrackedPullRequest


def _tracked(pr_id="1", acknowledged=False):
    pr = PullRequest(id=pr_id, title=f"PR {pr_id}", repository="org/r1")
    return TrackedPullRequest(pull_request=pr, acknowledged=acknowledged)


class TestItemStore:
    def test_get_missing_returns_none(self):
        assert ItemStore().get("nope") is None

    def test_upsert_inserts_and_replaces(self):
        store = ItemStore()
        store.upsert("1", _tracked("1"))
        replacement = _tracked("1", acknowledged=True)
        store.upsert("1", replacement)

        assert len(store) == 1
        assert store.get("1") is replacement

    def test_upsert_rejects_mismatched_key(self):
        with pytest.raises(ValueError):
            ItemStore().upsert("2", _tracked("1"))

    def test_remove_missing_is_noop(self):
        store = ItemStore([_tracked("1")])
        store.remove("nope")
        assert store.keys() == {"1"}

    def test_keys_is_a_copy(self):
        store = ItemStore([_tracked("1"), _tracked("2")])
        keys = store.keys()
        store.remove("1")
        assert keys == {"1", "2"}

    def test_iter_filtered_by_flag(self):
        store = ItemStore([_tracked("1", True), _tracked("2", False), _tracked("3", True)])

        assert {pr.id for pr in store.iter_filtered(acknowledged=True)} == {"1", "3"}
        assert {pr.id for pr in store.iter_filtered(acknowledged=False)} == {"2"}

    def test_iter_filtered_is_restartable(self):
        store = ItemStore([_tracked("1")])
        assert list(store.iter_filtered(False)) == list(store.iter_filtered(False))

    def test_clear_and_contains(self):
        store = ItemStore([_tracked("1")])
        assert "1" in store
        store.clear()
        assert "1" not in store
        assert len(store) == 0
