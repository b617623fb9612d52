"""No-op store — used when persistence is switched off.

Sessions then live only as long as the process. Using a NoOpStore rather
than None lets the CLI and the server always call store.save() without
conditional checks.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from prwatch_store.base import BaseStore

if TYPE_CHECKING:
    from prwatch_store.models import SessionRecord


class NoOpStore(BaseStore):
    """Discards every record."""

    def load(self, name: str) -> SessionRecord | None:
        return None

    def save(self, name: str, record: SessionRecord) -> None:
        pass  # intentional no-op

    def delete(self, name: str) -> None:
        pass

    def list_names(self) -> list[str]:
        return []
