"""ack / unack commands — mark a pull request's reviews as seen (or not)."""

from __future__ import annotations

import click
from rich.console import Console

from prwatch_cli.commands.listing import render_pull_requests
from prwatch_cli.context import reports_errors, session_from_context

console = Console()


def _select_pr(prs, title: str, pr_id: str | None, index: int | None) -> str | None:
    """Resolve the target PR id from --id, --index, or an interactive prompt."""
    if pr_id is not None:
        return pr_id

    if not prs:
        console.print("[yellow]No pull requests to choose from.[/yellow]")
        return None

    if index is None:
        console.print(render_pull_requests(prs, title))
        index = click.prompt("Enter index", type=click.IntRange(0, len(prs) - 1))
    elif not 0 <= index < len(prs):
        raise click.BadParameter(f"must be between 0 and {len(prs) - 1}", param_hint="--index")

    pr = prs[index]
    console.print(f"Selected '{pr.title}'")
    return pr.id


_id_option = click.option("--id", "pr_id", default=None, help="Pull request id as reported by GitHub.")
_index_option = click.option("--index", type=int, default=None, help="Row number from the listing.")


@click.command("ack")
@_id_option
@_index_option
@click.pass_context
@reports_errors
def ack_cmd(ctx, pr_id: str | None, index: int | None):
    """Acknowledge the reviews on a pull request.

    It stays hidden from `prwatch fetch` until someone submits a new review.
    Without --id or --index, pick from the list of unacknowledged reviews.
    """
    session = session_from_context(ctx)
    target = _select_pr(session.list_unacknowledged(), "Unacknowledged Reviews", pr_id, index)
    if target is None:
        return

    session.acknowledge(target)
    console.print(f"[green]Acknowledged {target}[/green]")
    remaining = session.list_unacknowledged()
    if remaining:
        console.print(render_pull_requests(remaining, "Now"))


@click.command("unack")
@_id_option
@_index_option
@click.pass_context
@reports_errors
def unack_cmd(ctx, pr_id: str | None, index: int | None):
    """Move a pull request back into the unacknowledged list.

    Without --id or --index, pick from the list of acknowledged reviews.
    """
    session = session_from_context(ctx)
    target = _select_pr(session.list_acknowledged(), "Acknowledged Reviews", pr_id, index)
    if target is None:
        return

    session.unacknowledge(target)
    console.print(f"[green]Unacknowledged {target}[/green]")
    remaining = session.list_acknowledged()
    if remaining:
        console.print(render_pull_requests(remaining, "Now"))
