"""Pull request data model tracked by a session.

A PullRequest is what the fetcher returns; a TrackedPullRequest wraps it
with the session-local acknowledgement flag.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass(frozen=True)
class Review:
    """A single submitted review on a pull request."""

    id: str
    author: str
    submitted_at: datetime  # timezone-aware UTC


@dataclass
class PullRequest:
    id: str
    title: str
    repository: str
    reviews: list[Review] = field(default_factory=list)

    @property
    def latest_review_time(self) -> datetime | None:
        """Most recent review submission time, or None when there are no reviews."""
        return max((r.submitted_at for r in self.reviews), default=None)

    def to_dict(self) -> dict:
        """Serialise in the shape `gh pr list --json id,title,reviews` emits."""
        return {
            "id": self.id,
            "title": self.title,
            "repository": self.repository,
            "reviews": [
                {
                    "id": r.id,
                    "author": {"login": r.author},
                    "submittedAt": format_timestamp(r.submitted_at),
                }
                for r in self.reviews
            ],
        }

    @classmethod
    def from_dict(cls, d: dict, repository: str | None = None) -> PullRequest:
        return cls(
            id=str(d["id"]),
            title=d.get("title", ""),
            repository=repository if repository is not None else d.get("repository", ""),
            reviews=[
                Review(
                    id=str(r.get("id", "")),
                    author=(r.get("author") or {}).get("login", ""),
                    submitted_at=parse_timestamp(r["submittedAt"]),
                )
                for r in d.get("reviews") or []
                if r.get("submittedAt")
            ],
        )


@dataclass
class TrackedPullRequest:
    pull_request: PullRequest
    acknowledged: bool = False


@dataclass(frozen=True)
class SessionSelection:
    """Which pull requests a session tracks: one author across a set of repositories."""

    author: str
    repositories: frozenset[str] = frozenset()

    @classmethod
    def of(cls, author: str, repositories) -> SessionSelection:
        return cls(author=author, repositories=frozenset(repositories or ()))


def review_time_advanced(previous: datetime | None, incoming: datetime | None) -> bool:
    """Return True if ``incoming`` is strictly later than ``previous``.

    Absent times sort before any concrete time, so going from None to a
    timestamp counts as an advance and going to None never does.
    """
    if incoming is None:
        return False
    if previous is None:
        return True
    return incoming > previous


def review_sort_key(pr: PullRequest) -> tuple[datetime, str]:
    """Sort key for listings: oldest latest-review first, ties broken by id."""
    latest = pr.latest_review_time
    if latest is None:
        raise ValueError(f"PR {pr.id} has no reviews and cannot be ordered by review time")
    return latest, pr.id


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp (GitHub uses a trailing 'Z') into an aware UTC datetime."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_timestamp(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
