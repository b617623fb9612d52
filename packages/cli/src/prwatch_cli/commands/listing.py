"""count / fetch / fetch-acked commands — show tracked pull requests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.table import Table

from prwatch_cli.context import reports_errors, session_from_context

if TYPE_CHECKING:
    from prwatch_core.models import PullRequest

console = Console()


def render_pull_requests(prs: list[PullRequest], title: str) -> Table:
    """Build the numbered table the ack/unack prompts refer to by index."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("#", style="bold", justify="right", width=4)
    table.add_column("Title", max_width=40)
    table.add_column("Repository")
    table.add_column("Latest Review", width=20)

    for num, pr in enumerate(prs):
        latest = pr.latest_review_time
        table.add_row(
            str(num),
            pr.title,
            pr.repository,
            latest.astimezone().strftime("%Y-%m-%d %H:%M:%S") if latest else "",
        )
    return table


@click.command("count")
@click.pass_context
@reports_errors
def count_cmd(ctx):
    """Print how many pull requests have unacknowledged reviews."""
    session = session_from_context(ctx)
    click.echo(len(session.list_unacknowledged()))


@click.command("fetch")
@click.pass_context
@reports_errors
def fetch_cmd(ctx):
    """List pull requests with unacknowledged reviews, oldest review first."""
    session = session_from_context(ctx)
    prs = session.list_unacknowledged()
    if not prs:
        console.print("[green]No unacknowledged reviews.[/green]")
        return
    console.print(render_pull_requests(prs, "Unacknowledged Reviews"))


@click.command("fetch-acked")
@click.pass_context
@reports_errors
def fetch_acked_cmd(ctx):
    """List pull requests whose reviews you have acknowledged."""
    session = session_from_context(ctx)
    prs = session.list_acknowledged()
    if not prs:
        console.print("[yellow]No acknowledged reviews.[/yellow]")
        return
    console.print(render_pull_requests(prs, "Acknowledged Reviews"))
