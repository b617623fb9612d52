"""In-memory mapping of pull request id to tracked pull request.

Holds no refresh logic and performs no I/O. The refresh policy and the
session are the only writers.
"""

from __future__ import annotations

from typing import Iterable, Iterator

from prwatch_core.models import PullRequest, TrackedPullRequest


class ItemStore:
    def __init__(self, tracked: Iterable[TrackedPullRequest] = ()):
        self._items: dict[str, TrackedPullRequest] = {}
        for t in tracked:
            self.upsert(t.pull_request.id, t)

    def get(self, pr_id: str) -> TrackedPullRequest | None:
        return self._items.get(pr_id)

    def upsert(self, pr_id: str, tracked: TrackedPullRequest) -> None:
        """Insert or replace. The key must equal the wrapped pull request's id."""
        if pr_id != tracked.pull_request.id:
            raise ValueError(f"Key {pr_id!r} does not match PR id {tracked.pull_request.id!r}")
        self._items[pr_id] = tracked

    def remove(self, pr_id: str) -> None:
        self._items.pop(pr_id, None)

    def keys(self) -> set[str]:
        return set(self._items)

    def iter_filtered(self, acknowledged: bool) -> Iterator[PullRequest]:
        """Yield pull requests whose flag equals ``acknowledged``. Order is unspecified."""
        return (t.pull_request for t in self._items.values() if t.acknowledged == acknowledged)

    def items(self) -> list[tuple[str, TrackedPullRequest]]:
        return list(self._items.items())

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, pr_id: object) -> bool:
        return pr_id in self._items
