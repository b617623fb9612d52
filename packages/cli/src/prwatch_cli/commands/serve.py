"""serve command — run the multi-session HTTP server."""

from __future__ import annotations

import logging
import os

import click
from rich.console import Console

console = Console()


@click.command("serve")
@click.option("--host", default=None, help="Interface to bind. Overrides config file.")
@click.option("--port", type=int, default=None, help="Port to listen on. Overrides config file.")
@click.pass_context
def serve_cmd(ctx, host: str | None, port: int | None):
    """Serve sessions over HTTP so several clients can share cached fetches.

    \b
    Environment variables:
      PRWATCH_LOG_LEVEL    Logging level for the server (default: INFO)
    """
    from prwatch_core.config import session_selection
    from prwatch_core.errors import FetcherUnavailable
    from prwatch_cli.server import create_app

    if ctx.obj.get("server"):
        raise click.UsageError("--server points at a running server; `serve` starts one.")

    config = ctx.obj["config"]
    try:
        session_selection(config)
        fetcher = ctx.obj["fetcher_factory"]()
    except (ValueError, FetcherUnavailable) as e:
        raise click.UsageError(str(e))

    logging.basicConfig(
        level=os.environ.get("PRWATCH_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    host = host or config["host"]
    port = port or config["port"]
    app = create_app(config, ctx.obj["store"], fetcher)

    console.print(f"[bold cyan]prwatch[/bold cyan] serving on http://{host}:{port}")
    app.run(host=host, port=port, threaded=True)
