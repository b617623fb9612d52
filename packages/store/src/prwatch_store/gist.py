"""GistStore — acknowledgement state that follows you across machines.

Why a Gist:
- Zero infra: no DB to provision, no server to keep running.
- Acking a review on a laptop hides it on the desktop too, since both read
  the same private Gist with the same GitHub login.

Data format: a single JSON file named `prwatch_state.json` inside the Gist,
holding a JSON object that maps session name to SessionRecord dict (the
same layout as JsonFileStore).
"""

from __future__ import annotations

import json
import logging

from prwatch_store.base import BaseStore
from prwatch_store.models import SessionRecord

logger = logging.getLogger(__name__)

_GIST_FILENAME = "prwatch_state.json"


class GistStore(BaseStore):
    """Stores session state in a GitHub Gist.

    The Gist ID is stored in .prwatch.yml under `gist_id`. Running
    `prwatch init` can create the Gist and write the ID automatically.
    """

    def __init__(self, gist_id: str, token: str):
        try:
            from github import Github
        except ImportError:
            raise ImportError("PyGithub is required for GistStore. Install prwatch.")
        self._gist_id = gist_id
        self._gh = Github(token)

    def _get_gist(self):
        return self._gh.get_gist(self._gist_id)

    def load(self, name: str) -> SessionRecord | None:
        try:
            sessions = self._read_sessions(self._get_gist())
        except Exception as e:
            logger.warning("GistStore.load() failed: %s", e)
            return None
        entry = sessions.get(name)
        if entry is None:
            return None
        try:
            return SessionRecord.from_dict(entry)
        except (KeyError, TypeError, AttributeError) as e:
            logger.warning("Ignoring malformed state for session %r in Gist: %s", name, e)
            return None

    def save(self, name: str, record: SessionRecord) -> None:
        try:
            gist = self._get_gist()
            sessions = self._read_sessions(gist)
            sessions[name] = record.to_dict()
            self._write_sessions(gist, sessions)
        except Exception as e:
            # Never fail the command because persistence failed; the state
            # in memory is correct and the next save will catch up.
            logger.warning("GistStore.save() failed (%s): %s", type(e).__name__, e)
            print(f"Warning: could not persist session state to Gist ({type(e).__name__}: {e})")

    def delete(self, name: str) -> None:
        try:
            gist = self._get_gist()
            sessions = self._read_sessions(gist)
            if sessions.pop(name, None) is not None:
                self._write_sessions(gist, sessions)
        except Exception as e:
            logger.warning("GistStore.delete() failed (%s): %s", type(e).__name__, e)

    def list_names(self) -> list[str]:
        try:
            return sorted(self._read_sessions(self._get_gist()))
        except Exception as e:
            logger.warning("GistStore.list_names() failed: %s", e)
            return []

    def _read_sessions(self, gist) -> dict:
        """Read the current JSON object from the Gist file, or return {}."""
        file_obj = gist.files.get(_GIST_FILENAME)
        if file_obj is None:
            return {}
        try:
            data = json.loads(file_obj.content) or {}
        except (json.JSONDecodeError, AttributeError, TypeError):
            return {}
        return data if isinstance(data, dict) else {}

    @staticmethod
    def _write_sessions(gist, sessions: dict) -> None:
        gist.edit(files={_GIST_FILENAME: {"content": json.dumps(sessions, indent=2)}})
