"""Persisted session state models.

Decoupled from prwatch_core so the store layer can be used independently
and prwatch_core has no knowledge of persistence concerns. Timestamps are
kept as ISO-8601 strings so every backend can store them as text.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ReviewEntry:
    id: str
    author: str
    submitted_at: str  # ISO-8601 UTC timestamp


@dataclass
class TrackedRecord:
    """A tracked pull request with its acknowledgement flag."""

    id: str
    title: str
    repository: str
    acknowledged: bool
    reviews: list[ReviewEntry] = field(default_factory=list)


@dataclass
class SessionRecord:
    """Everything needed to restore a session's state.

    The selection criteria are not persisted; they come from configuration.
    """

    last_refresh_time: str | None = None  # ISO-8601 UTC timestamp, None = never refreshed
    items: list[TrackedRecord] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "last_refresh_time": self.last_refresh_time,
            "items": [
                {
                    "id": t.id,
                    "title": t.title,
                    "repository": t.repository,
                    "acknowledged": t.acknowledged,
                    "reviews": [
                        {"id": r.id, "author": r.author, "submitted_at": r.submitted_at} for r in t.reviews
                    ],
                }
                for t in self.items
            ],
        }

    @classmethod
    def from_dict(cls, d: dict) -> SessionRecord:
        return cls(
            last_refresh_time=d.get("last_refresh_time"),
            items=[
                TrackedRecord(
                    id=t["id"],
                    title=t.get("title", ""),
                    repository=t.get("repository", ""),
                    acknowledged=bool(t.get("acknowledged", False)),
                    reviews=[
                        ReviewEntry(
                            id=r.get("id", ""),
                            author=r.get("author", ""),
                            submitted_at=r["submitted_at"],
                        )
                        for r in t.get("reviews", [])
                    ],
                )
                for t in d.get("items", [])
            ],
        )
