"""CLI entry point for prwatch.

Commands (short aliases in parentheses):
  count (c)        — number of pull requests with unacknowledged reviews
  fetch (f)        — list pull requests with unacknowledged reviews
  fetch-acked (fa) — list pull requests whose reviews are acknowledged
  ack (a)          — acknowledge the reviews on a pull request
  unack (ua)       — bring a pull request back into the unacknowledged list
  clear (cls)      — forget all tracked pull requests in the session
  serve            — run the multi-session HTTP server
  init             — interactive setup wizard
"""

from __future__ import annotations

import importlib.metadata

import click
from rich.console import Console

from prwatch_cli.commands.ack import ack_cmd, unack_cmd
from prwatch_cli.commands.clear import clear_cmd
from prwatch_cli.commands.init import init_cmd
from prwatch_cli.commands.listing import count_cmd, fetch_acked_cmd, fetch_cmd
from prwatch_cli.commands.serve import serve_cmd

console = Console()


def _build_store(config: dict):
    """Instantiate the configured store from .prwatch.yml settings.

    Store selection hierarchy:
      store: json   → JsonFileStore (store_path or <config dir>/state.json)
      store: sqlite → SQLiteStore   (store_path or <config dir>/prwatch.db)
      store: gist   → GistStore     (requires gist_id and a GitHub token)
      store: noop   → NoOpStore     (nothing survives the process)

    This factory lives in cli.py so neither prwatch_core nor prwatch_store
    know about the CLI config format.
    """
    from prwatch_core.config import STATE_FILENAME, config_directory
    from prwatch_store.noop import NoOpStore

    store_type = config.get("store", "json")

    if store_type == "json":
        from prwatch_store.json_file import JsonFileStore

        return JsonFileStore(config.get("store_path") or config_directory() / STATE_FILENAME)

    if store_type == "sqlite":
        from prwatch_store.sqlite import SQLiteStore

        db_path = config.get("store_path")
        if not db_path:
            config_directory().mkdir(parents=True, exist_ok=True)
            db_path = str(config_directory() / "prwatch.db")
        return SQLiteStore(db_path=db_path)

    if store_type == "gist":
        from prwatch_store.gist import GistStore

        gist_id = config.get("gist_id")
        token = config.get("github_token")
        if not gist_id or not token:
            console.print("[yellow]GistStore requires gist_id and a GitHub token. Falling back to no store.[/yellow]")
            return NoOpStore()
        return GistStore(gist_id=gist_id, token=token)

    return NoOpStore()


def _build_fetcher(config: dict):
    """Instantiate the pull request fetcher: the gh CLI by default, PyGithub with `fetcher: api`."""
    from prwatch_core.gh.pull_request import GhCliFetcher, GithubApiFetcher

    if config.get("fetcher", "gh") == "api":
        return GithubApiFetcher(token=config.get("github_token"))
    return GhCliFetcher()


@click.group()
@click.version_option(
    version=importlib.metadata.version("prwatch"),
    prog_name="prwatch",
)
@click.option(
    "--config",
    "config_path",
    default=".prwatch.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="PRWATCH_CONFIG",
)
@click.option("--session", "session_name", default=None, help="Session name. Overrides config file.")
@click.option("--force", "-f", is_flag=True, help="Refetch pull requests even if the cache is still fresh.")
@click.option(
    "--server",
    "server_url",
    default=None,
    metavar="URL",
    help="Send session commands to a running `prwatch serve` instead of fetching locally.",
    envvar="PRWATCH_SERVER",
)
@click.pass_context
def main(ctx: click.Context, config_path: str, session_name: str | None, force: bool, server_url: str | None):
    """Track review activity on your GitHub pull requests."""
    from prwatch_core.config import load_config
    from prwatch_cli.auth import resolve_github_token

    ctx.ensure_object(dict)

    config = load_config(config_path, cli_overrides={"session_name": session_name})
    ctx.obj["config"] = config
    ctx.obj["config_path"] = config_path
    ctx.obj["force"] = force
    ctx.obj["server"] = server_url

    if server_url:
        # The server fetches and persists; nothing local is needed.
        from prwatch_store.noop import NoOpStore

        ctx.obj["store"] = NoOpStore()
        return

    # The API fetcher and the Gist store both need a token; resolve it once.
    token = resolve_github_token()
    if token:
        config["github_token"] = token

    store = _build_store(config)
    ctx.obj["store"] = store
    ctx.obj["fetcher_factory"] = lambda: _build_fetcher(config)
    ctx.call_on_close(store.close)


main.add_command(count_cmd)
main.add_command(count_cmd, name="c")
main.add_command(fetch_cmd)
main.add_command(fetch_cmd, name="f")
main.add_command(fetch_acked_cmd)
main.add_command(fetch_acked_cmd, name="fa")
main.add_command(ack_cmd)
main.add_command(ack_cmd, name="a")
main.add_command(unack_cmd)
main.add_command(unack_cmd, name="ua")
main.add_command(clear_cmd)
main.add_command(clear_cmd, name="cls")
main.add_command(serve_cmd)
main.add_command(init_cmd)
