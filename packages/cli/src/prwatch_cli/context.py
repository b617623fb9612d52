"""Helpers shared by the session commands."""

from __future__ import annotations

import functools

import click

from prwatch_core.errors import PrwatchError


def session_from_context(ctx: click.Context):
    """Load the configured session, saving it back when the command finishes.

    Loaded once per invocation; later calls return the same session.
    """
    from prwatch_cli.state import load_session, save_session

    obj = ctx.find_object(dict)
    if "session" in obj:
        return obj["session"]

    config = obj["config"]
    store = obj["store"]
    name = config.get("session_name") or "default"

    if obj.get("server"):
        from prwatch_cli.remote import RemoteSession

        session = RemoteSession(obj["server"], name)
        if obj.get("force"):
            session.force_next_refresh()
        obj["session"] = session
        return session

    try:
        session = load_session(store, name, config, obj["fetcher_factory"]())
    except ValueError as e:
        raise click.UsageError(str(e))

    if obj.get("force"):
        session.force_next_refresh()

    obj["session"] = session
    # Registered after main's store.close, so it runs first (callbacks are LIFO).
    ctx.find_root().call_on_close(lambda: save_session(store, name, session))
    return session


def reports_errors(f):
    """Turn prwatch errors (missing PR, gh not logged in, ...) into clean CLI errors."""

    @functools.wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except PrwatchError as e:
            raise click.ClickException(str(e))

    return wrapper
