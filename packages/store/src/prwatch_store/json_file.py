"""JsonFileStore — the default local store.

Data format: a single JSON object mapping session name to a SessionRecord
dict. The single-user CLI keeps one entry (its session name, "default"
unless configured); the server keeps one entry per named session.

The whole file is rewritten on every save via a temp file + rename, so a
crash mid-write never leaves a truncated state file behind. The server
saves different sessions from different threads; every read-modify-write
of the file runs under one lock.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path

from prwatch_store.base import BaseStore
from prwatch_store.models import SessionRecord

logger = logging.getLogger(__name__)


class JsonFileStore(BaseStore):
    def __init__(self, path: str | Path):
        self._path = Path(path)
        self._lock = threading.Lock()

    def _read_all(self) -> dict:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Could not read session state from %s, starting empty: %s", self._path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring session state in %s: expected a JSON object", self._path)
            return {}
        return data

    def _write_all(self, data: dict) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        # Same directory as the target so os.replace stays a rename.
        with tempfile.NamedTemporaryFile(
            "w", dir=self._path.parent, prefix=self._path.name + ".", suffix=".tmp", delete=False
        ) as tmp:
            json.dump(data, tmp, indent=2)
        try:
            os.replace(tmp.name, self._path)
        except OSError:
            os.unlink(tmp.name)
            raise

    def load(self, name: str) -> SessionRecord | None:
        with self._lock:
            entry = self._read_all().get(name)
        if entry is None:
            return None
        try:
            return SessionRecord.from_dict(entry)
        except (KeyError, TypeError, AttributeError) as e:
            logger.warning("Ignoring malformed state for session %r in %s: %s", name, self._path, e)
            return None

    def save(self, name: str, record: SessionRecord) -> None:
        try:
            with self._lock:
                data = self._read_all()
                data[name] = record.to_dict()
                self._write_all(data)
        except OSError as e:
            # The in-memory session is already updated; losing one save only
            # means the next run refetches and forgets recent acks.
            logger.warning("JsonFileStore.save() failed (%s): %s", type(e).__name__, e)
            print(f"Warning: could not save session state to {self._path} ({type(e).__name__}: {e})")

    def delete(self, name: str) -> None:
        try:
            with self._lock:
                data = self._read_all()
                if data.pop(name, None) is None:
                    return
                self._write_all(data)
        except OSError as e:
            logger.warning("JsonFileStore.delete() failed (%s): %s", type(e).__name__, e)

    def list_names(self) -> list[str]:
        with self._lock:
            return sorted(self._read_all())
