"""HTTP server holding many named sessions in memory.

Routes (all scoped by session name, sessions created on first use):
  GET    /<session>/unacknowledged-prs
  GET    /<session>/acknowledgement
  POST   /<session>/acknowledgement/<pr_id>
  DELETE /<session>/acknowledgement/<pr_id>
  POST   /<session>/refresh
  DELETE /<session>/clear-session

Every request runs under the session's lock for its whole
refresh-and-query sequence, then saves the session to the store.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from flask import Blueprint, Flask, current_app, jsonify, request

from prwatch_cli.state import load_session, save_session
from prwatch_core.errors import FetcherUnavailable, PullRequestNotFound, SessionNotFound
from prwatch_core.registry import SessionRegistry

if TYPE_CHECKING:
    from prwatch_core.gh.pull_request import PullRequestFetcher
    from prwatch_store.base import BaseStore

logger = logging.getLogger(__name__)

sessions_bp = Blueprint("sessions", __name__)


def _registry() -> SessionRegistry:
    return current_app.extensions["prwatch"]["registry"]


def _store() -> BaseStore:
    return current_app.extensions["prwatch"]["store"]


def _pr_list(prs) -> list[dict]:
    return [pr.to_dict() for pr in prs]


@sessions_bp.errorhandler(FetcherUnavailable)
def _fetcher_unavailable(e):
    logger.error("Cannot fetch pull requests: %s", e)
    return jsonify({"error": str(e)}), 503


@sessions_bp.route("/<session_name>/unacknowledged-prs", methods=["GET"])
def unacknowledged_prs(session_name: str):
    with _registry().checkout(session_name) as session:
        prs = session.list_unacknowledged()
        save_session(_store(), session_name, session)
    return jsonify(_pr_list(prs))


@sessions_bp.route("/<session_name>/acknowledgement", methods=["GET"])
def acknowledged_prs(session_name: str):
    with _registry().checkout(session_name) as session:
        prs = session.list_acknowledged()
        save_session(_store(), session_name, session)
    return jsonify(_pr_list(prs))


@sessions_bp.route("/<session_name>/acknowledgement/<pr_id>", methods=["POST", "DELETE"])
def acknowledgement(session_name: str, pr_id: str):
    with _registry().checkout(session_name) as session:
        try:
            if request.method == "POST":
                session.acknowledge(pr_id)
            else:
                session.unacknowledge(pr_id)
        except PullRequestNotFound as e:
            return jsonify({"error": str(e)}), 404
        finally:
            save_session(_store(), session_name, session)
    return jsonify({"id": pr_id, "acknowledged": request.method == "POST"})


@sessions_bp.route("/<session_name>/refresh", methods=["POST"])
def refresh(session_name: str):
    with _registry().checkout(session_name) as session:
        session.force_next_refresh()
        prs = session.list_unacknowledged()
        save_session(_store(), session_name, session)
    return jsonify(_pr_list(prs))


@sessions_bp.route("/<session_name>/clear-session", methods=["DELETE"])
def clear_session(session_name: str):
    registry = _registry()
    store = _store()
    if session_name not in registry and session_name not in store.list_names():
        return jsonify({"error": str(SessionNotFound(session_name))}), 404
    # Deleting under the session lock keeps in-flight requests from saving it back.
    registry.discard(session_name, on_remove=lambda: store.delete(session_name))
    return jsonify({"cleared": session_name})


def create_app(config: dict, store: BaseStore, fetcher: PullRequestFetcher) -> Flask:
    """Build the Flask app with an explicit registry; no module-level session state.

    Sessions not yet in memory are restored from ``store`` on first access,
    or start empty with the configured author and repositories.
    """
    registry = SessionRegistry(lambda name: load_session(store, name, config, fetcher))

    app = Flask(__name__)
    app.extensions["prwatch"] = {"registry": registry, "store": store}
    app.register_blueprint(sessions_bp)
    return app
