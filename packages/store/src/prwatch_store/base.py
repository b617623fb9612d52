"""Abstract store interface.

Every persistence backend (JSON file, SQLite, Gist) implements this
interface. The CLI and the server depend on BaseStore, not on a concrete
backend, so backends are swappable without touching either.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prwatch_store.models import SessionRecord


class BaseStore(ABC):
    """Pluggable persistence layer for session state, keyed by session name.

    Failures never propagate: a failed load behaves like a missing session
    and a failed save is reported but does not undo the in-memory change
    that triggered it.
    """

    @abstractmethod
    def load(self, name: str) -> SessionRecord | None:
        """Return the saved state for ``name``, or None if there is none or it can't be read."""

    @abstractmethod
    def save(self, name: str, record: SessionRecord) -> None:
        """Persist the state of one session, replacing any previous state."""

    @abstractmethod
    def delete(self, name: str) -> None:
        """Forget the state of one session. Deleting an unknown name is not an error."""

    @abstractmethod
    def list_names(self) -> list[str]:
        """Return the names of all saved sessions. Never raises."""

    def close(self) -> None:
        """Release any resources held by the store (connections, file handles).

        Subclasses holding connections override this.
        Default is a no-op so callers can always call close() safely.
        """
