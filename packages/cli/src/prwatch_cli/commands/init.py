"""init command — interactive setup wizard.

Writes .prwatch.yml with the author to track and the repositories to
watch, and optionally creates a private Gist so acknowledgements follow
the user across machines.
"""

from __future__ import annotations

import logging
import subprocess
import tempfile
from pathlib import Path

import click
import yaml
from rich.console import Console

console = Console()
logger = logging.getLogger(__name__)

_GIST_FILENAME = "prwatch_state.json"


@click.command("init")
@click.option("--author", default=None, help="GitHub login whose pull requests to track. Auto-detected from gh.")
@click.option(
    "--repo",
    "repos",
    multiple=True,
    help="Repository to watch (owner/name); repeatable. Defaults to the current checkout.",
)
@click.pass_context
def init_cmd(ctx, author: str | None, repos: tuple[str, ...]):
    """Set up prwatch for the current directory.

    Creates .prwatch.yml and, if requested, a private GitHub Gist for
    sharing acknowledgement state between machines.
    """
    from prwatch_cli.auth import detect_github_login

    console.print("\n[bold cyan]prwatch init[/bold cyan] — setup wizard\n")

    config_path = Path(ctx.obj.get("config_path", ".prwatch.yml"))

    # --- Author ---
    if author is None:
        author = detect_github_login()
        if author:
            console.print(f"[dim]Detected GitHub login: {author}[/dim]")
        else:
            author = click.prompt("GitHub login whose pull requests to track")

    # --- Repositories ---
    repositories = list(repos)
    if not repositories:
        detected = _detect_repo_from_git()
        answer = click.prompt(
            "Repositories to watch (comma-separated owner/name)",
            default=detected or "",
            show_default=bool(detected),
        )
        repositories = [r.strip() for r in answer.split(",") if r.strip()]
    if not repositories:
        raise click.UsageError("At least one repository is required.")

    # --- Fetcher ---
    fetcher = click.prompt(
        "Fetch pull requests with",
        type=click.Choice(["gh", "api"]),
        default="gh",
    )

    # --- Store backend ---
    console.print("\nAcknowledgement state store:")
    console.print("  [bold]json[/bold]    — local JSON file (default)")
    console.print("  [bold]sqlite[/bold]  — local SQLite file (good for `prwatch serve`)")
    console.print("  [bold]gist[/bold]    — private GitHub Gist, shared across your machines")
    console.print("  [bold]noop[/bold]    — keep nothing between runs")
    store_type = click.prompt(
        "Store backend",
        type=click.Choice(["json", "sqlite", "gist", "noop"]),
        default="json",
    )

    config: dict = {"author": author, "repositories": repositories, "fetcher": fetcher, "store": store_type}

    if store_type == "gist":
        gist_id = _create_state_gist(author)
        if gist_id:
            console.print(f"[green]Created state Gist: {gist_id}[/green]")
            config["gist_id"] = gist_id
        else:
            console.print("[yellow]Gist creation failed — add gist_id manually to .prwatch.yml[/yellow]")

    _write_config(config, config_path)
    console.print(f"[green]Created {config_path}[/green]")

    console.print("\n[bold green]Setup complete![/bold green]")
    console.print("List unacknowledged reviews with: [bold]prwatch fetch[/bold]")


def _detect_repo_from_git() -> str | None:
    """Ask gh which GitHub repository the current checkout belongs to."""
    try:
        result = subprocess.run(
            ["gh", "repo", "view", "--json", "nameWithOwner", "--jq", ".nameWithOwner"],
            capture_output=True,
            text=True,
            timeout=10,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return None
    slug = result.stdout.strip()
    return slug if result.returncode == 0 and "/" in slug else None


def _create_state_gist(author: str) -> str | None:
    """Create a private Gist holding an empty state file and return its ID."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        # gh names the Gist file after the local file.
        state_file = Path(tmp_dir) / _GIST_FILENAME
        state_file.write_text("{}")
        try:
            result = subprocess.run(
                ["gh", "gist", "create", "--public=false", "--desc", f"prwatch state for {author}", str(state_file)],
                capture_output=True,
                text=True,
                timeout=15,
            )
        except (FileNotFoundError, subprocess.TimeoutExpired) as e:
            logger.warning("Could not run gh gist create: %s", e)
            return None

    if result.returncode != 0:
        logger.warning("gh gist create exited with %d: %s", result.returncode, result.stderr.strip())
        return None
    # gh prints the URL of the new Gist; its last path segment is the ID.
    return result.stdout.strip().rsplit("/", 1)[-1] or None


def _write_config(config: dict, path: Path) -> None:
    """Write or update the config file, preserving any existing keys."""
    existing: dict = {}
    if path.exists():
        existing = yaml.safe_load(path.read_text()) or {}
    existing.update(config)
    path.write_text(yaml.dump(existing, default_flow_style=False, sort_keys=False))
