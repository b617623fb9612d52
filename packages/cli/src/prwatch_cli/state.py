"""Bridge between prwatch_core sessions and prwatch_store records.

prwatch_core has no store knowledge and prwatch_store has no core
knowledge. This module maps one to the other and is shared by the CLI
commands and the HTTP server.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from prwatch_core.config import refresh_ttl, session_selection
from prwatch_core.models import PullRequest, Review, TrackedPullRequest, format_timestamp, parse_timestamp
from prwatch_core.refresh import RefreshPolicy
from prwatch_core.session import Session
from prwatch_store.models import ReviewEntry, SessionRecord, TrackedRecord

if TYPE_CHECKING:
    from prwatch_core.gh.pull_request import PullRequestFetcher
    from prwatch_store.base import BaseStore

logger = logging.getLogger(__name__)


def session_to_record(session: Session) -> SessionRecord:
    return SessionRecord(
        last_refresh_time=format_timestamp(session.last_refresh_time) if session.last_refresh_time else None,
        items=[
            TrackedRecord(
                id=pr_id,
                title=tracked.pull_request.title,
                repository=tracked.pull_request.repository,
                acknowledged=tracked.acknowledged,
                reviews=[
                    ReviewEntry(id=r.id, author=r.author, submitted_at=format_timestamp(r.submitted_at))
                    for r in tracked.pull_request.reviews
                ],
            )
            for pr_id, tracked in session.items.items()
        ],
    )


def record_to_tracked(record: SessionRecord) -> list[TrackedPullRequest]:
    return [
        TrackedPullRequest(
            pull_request=PullRequest(
                id=t.id,
                title=t.title,
                repository=t.repository,
                reviews=[
                    Review(id=r.id, author=r.author, submitted_at=parse_timestamp(r.submitted_at))
                    for r in t.reviews
                ],
            ),
            acknowledged=t.acknowledged,
        )
        for t in record.items
    ]


def build_session(config: dict, fetcher: PullRequestFetcher, record: SessionRecord | None = None) -> Session:
    """Create a session from config, restoring ``record`` when given.

    A record that cannot be converted (unparseable timestamps) is
    dropped with a warning and the session starts empty.
    """
    selection = session_selection(config)
    policy = RefreshPolicy(ttl=refresh_ttl(config))

    if record is not None:
        try:
            items = record_to_tracked(record)
            last_refresh_time = parse_timestamp(record.last_refresh_time) if record.last_refresh_time else None
            return Session(selection, fetcher, policy=policy, items=items, last_refresh_time=last_refresh_time)
        except ValueError as e:
            logger.warning("Discarding unreadable saved session state: %s", e)

    return Session(selection, fetcher, policy=policy)


def load_session(store: BaseStore, name: str, config: dict, fetcher: PullRequestFetcher) -> Session:
    return build_session(config, fetcher, store.load(name))


def save_session(store: BaseStore, name: str, session: Session) -> None:
    store.save(name, session_to_record(session))
