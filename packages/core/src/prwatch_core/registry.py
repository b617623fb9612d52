"""Name-indexed sessions for server mode.

Each session has its own lock so unrelated sessions never serialise on each
other. The registry lock only guards the name -> entry mapping and is never
held across a fetch or while the session factory runs.

Removal takes the session's lock, so it waits for in-flight work on that
session to finish. The removed entry is marked retired: a request that was
queued on its lock starts over with a fresh session instead of reviving the
old one.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Iterator

from prwatch_core.errors import SessionNotFound

if TYPE_CHECKING:
    from prwatch_core.session import Session


@dataclass
class _Entry:
    session: Session
    lock: threading.Lock = field(default_factory=threading.Lock)
    retired: bool = False


class SessionRegistry:
    """Maps session names to sessions, creating them on first access.

    ``session_factory`` receives the session name and returns the session to
    register: restored from persistence, or empty with the default
    selection criteria. It may do I/O and runs without the registry lock.
    """

    def __init__(self, session_factory: Callable[[str], Session]):
        self._session_factory = session_factory
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()
        # Bumped on every removal; a session built across a removal is stale.
        self._removals = 0

    def _entry(self, name: str) -> _Entry:
        while True:
            with self._lock:
                entry = self._entries.get(name)
                removals = self._removals
            if entry is not None:
                return entry

            session = self._session_factory(name)

            with self._lock:
                entry = self._entries.get(name)
                if entry is not None:
                    # Another thread registered it first.
                    return entry
                if removals == self._removals:
                    entry = _Entry(session)
                    self._entries[name] = entry
                    return entry
            # A removal ran while the factory was loading; load again.

    def get_or_create(self, name: str) -> Session:
        return self._entry(name).session

    @contextmanager
    def checkout(self, name: str) -> Iterator[Session]:
        """Hold the named session's lock for a whole refresh-and-query sequence."""
        while True:
            entry = self._entry(name)
            with entry.lock:
                if not entry.retired:
                    yield entry.session
                    return

    def remove(self, name: str, on_remove: Callable[[], None] | None = None) -> None:
        """Remove a session that is in memory; raises SessionNotFound otherwise.

        Waits for the session's lock. ``on_remove`` (e.g. deleting the
        persisted copy) runs while that lock is still held.
        """
        with self._lock:
            entry = self._entries.get(name)
        if entry is None:
            raise SessionNotFound(name)
        if not self._retire(name, entry, on_remove):
            raise SessionNotFound(name)

    def discard(self, name: str, on_remove: Callable[[], None] | None = None) -> None:
        """Like remove, but loads the session through the factory first if needed.

        Used when the session may exist only in persistent storage.
        """
        while not self._retire(name, self._entry(name), on_remove):
            pass

    def _retire(self, name: str, entry: _Entry, on_remove: Callable[[], None] | None) -> bool:
        with entry.lock:
            if entry.retired:
                return False
            if on_remove is not None:
                on_remove()
            entry.retired = True
            with self._lock:
                if self._entries.get(name) is entry:
                    del self._entries[name]
                self._removals += 1
        return True

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._entries
