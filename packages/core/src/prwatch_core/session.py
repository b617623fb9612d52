"""Session — the unit callers interact with.

Coordinates the refresh policy, the item store and the injected fetcher.
Every query refreshes first (when due) and then answers from the store.
Persistence is not a session concern: callers restore a session by passing
``items`` and ``last_refresh_time`` and read them back to save.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Callable, Iterable

from prwatch_core.errors import FetchError, PullRequestNotFound
from prwatch_core.item_store import ItemStore
from prwatch_core.models import PullRequest, TrackedPullRequest, review_sort_key, utcnow
from prwatch_core.refresh import RefreshPolicy

if TYPE_CHECKING:
    from prwatch_core.gh.pull_request import PullRequestFetcher
    from prwatch_core.models import SessionSelection

logger = logging.getLogger(__name__)


class Session:
    def __init__(
        self,
        selection: SessionSelection,
        fetcher: PullRequestFetcher,
        policy: RefreshPolicy | None = None,
        items: Iterable[TrackedPullRequest] = (),
        last_refresh_time: datetime | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.selection = selection
        self.items = ItemStore(items)
        self.last_refresh_time = last_refresh_time
        self._fetcher = fetcher
        self._policy = policy or RefreshPolicy()
        self._clock = clock

    def refresh(self) -> bool:
        """Fetch and reconcile if the TTL has expired. Returns True if a fetch happened.

        FetcherUnavailable propagates and leaves the session untouched.
        """
        if not self._policy.is_due(self.last_refresh_time, self._clock()):
            logger.debug("Using cached PRs, last refresh at %s", self.last_refresh_time)
            return False

        logger.info(
            "Fetching PRs for %s across %d repositories (last refresh: %s)",
            self.selection.author,
            len(self.selection.repositories),
            self.last_refresh_time or "never",
        )
        fetched = self._fetch_all()
        self._policy.reconcile(fetched, self.items)
        self.last_refresh_time = self._clock()
        return True

    def _fetch_all(self) -> list[PullRequest]:
        fetched: list[PullRequest] = []
        for repository in sorted(self.selection.repositories):
            try:
                fetched.extend(self._fetcher.fetch(repository, self.selection.author))
            except FetchError as e:
                logger.warning(
                    "Skipping %s for author %s, fetch failed: %s", repository, self.selection.author, e
                )
        return fetched

    def list_unacknowledged(self) -> list[PullRequest]:
        self.refresh()
        return self._listing(acknowledged=False)

    def list_acknowledged(self) -> list[PullRequest]:
        self.refresh()
        return self._listing(acknowledged=True)

    def _listing(self, acknowledged: bool) -> list[PullRequest]:
        # Pull requests without reviews have nothing to acknowledge.
        reviewed = [pr for pr in self.items.iter_filtered(acknowledged) if pr.reviews]
        return sorted(reviewed, key=review_sort_key)

    def acknowledge(self, pr_id: str) -> None:
        self._set_acknowledged(pr_id, True)

    def unacknowledge(self, pr_id: str) -> None:
        self._set_acknowledged(pr_id, False)

    def _set_acknowledged(self, pr_id: str, value: bool) -> None:
        self.refresh()
        tracked = self.items.get(pr_id)
        if tracked is None:
            raise PullRequestNotFound(pr_id)
        tracked.acknowledged = value
        logger.info("%s PR %s", "Acked" if value else "Unacked", pr_id)

    def clear(self) -> None:
        """Forget every tracked PR; the next query refetches immediately."""
        self.items.clear()
        self.last_refresh_time = None

    def force_next_refresh(self) -> None:
        self.last_refresh_time = None
