"""clear command — forget every tracked pull request in the session."""

from __future__ import annotations

import click
from rich.console import Console

from prwatch_cli.context import reports_errors, session_from_context

console = Console()


@click.command("clear")
@click.pass_context
@reports_errors
def clear_cmd(ctx):
    """Clear all session state.

    Every acknowledgement is dropped; the next command refetches and shows
    all reviewed pull requests as unacknowledged again.
    """
    session = session_from_context(ctx)
    session.clear()
    console.print("[green]Session cleared.[/green]")
