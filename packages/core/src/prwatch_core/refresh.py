"""TTL-gated refresh policy and reconciliation of fetched pull requests.

Reconciliation rules:
- a pull request seen for the first time is tracked as unacknowledged;
- a known pull request whose latest review time advanced is reset to
  unacknowledged, otherwise its flag is kept;
- the stored payload is always replaced so titles stay current;
- anything not present in the fetched batch is pruned.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Iterable

from prwatch_core.models import TrackedPullRequest, review_time_advanced

if TYPE_CHECKING:
    from prwatch_core.item_store import ItemStore
    from prwatch_core.models import PullRequest

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(minutes=5)


class RefreshPolicy:
    def __init__(self, ttl: timedelta = DEFAULT_TTL):
        self.ttl = ttl

    def is_due(self, last_refresh_time: datetime | None, now: datetime) -> bool:
        """A refresh is due if there never was one or the last one is older than the TTL."""
        if last_refresh_time is None:
            return True
        return now - last_refresh_time > self.ttl

    def reconcile(self, fetched: Iterable[PullRequest], store: ItemStore) -> None:
        seen: set[str] = set()

        for pr in fetched:
            seen.add(pr.id)
            existing = store.get(pr.id)
            if existing is None:
                store.upsert(pr.id, TrackedPullRequest(pull_request=pr, acknowledged=False))
                continue

            previous = existing.pull_request.latest_review_time
            incoming = pr.latest_review_time
            if review_time_advanced(previous, incoming):
                if existing.acknowledged:
                    logger.info("New review on %s (%s > %s), resetting acknowledgement", pr.id, incoming, previous)
                existing.acknowledged = False
            existing.pull_request = pr

        for stale_id in store.keys() - seen:
            logger.debug("Pruning %s, no longer returned by fetch", stale_id)
            store.remove(stale_id)
