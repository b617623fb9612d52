"""GitHub identity helpers built on the gh CLI.

Only the PyGithub-backed pieces (the `fetcher: api` source and the Gist
store) need a token; the default gh fetcher authenticates on its own.

Token resolution order (stops at first success):
  1. GITHUB_TOKEN environment variable (CI / explicit override)
  2. `gh auth token` (GitHub CLI session, available after `gh auth login`)
"""

from __future__ import annotations

import logging
import os
import subprocess

logger = logging.getLogger(__name__)


def _gh_output(args: list[str], timeout: float) -> str | None:
    """Run a gh subcommand and return its stripped stdout, or None on any failure."""
    try:
        result = subprocess.run(["gh", *args], capture_output=True, text=True, timeout=timeout)
    except (FileNotFoundError, subprocess.TimeoutExpired) as e:
        logger.debug("gh %s unavailable: %s", " ".join(args), e)
        return None
    if result.returncode != 0:
        return None
    return result.stdout.strip() or None


def resolve_github_token() -> str | None:
    """Return a GitHub token or None if no source has one.

    Never raises. Callers decide whether a missing token is an error.
    """
    token = os.environ.get("GITHUB_TOKEN")
    if token:
        return token

    token = _gh_output(["auth", "token"], timeout=5)
    if token:
        logger.debug("Resolved GitHub token via gh CLI session.")
    return token


def detect_github_login() -> str | None:
    """Return the login of the user the gh CLI is authenticated as, or None."""
    return _gh_output(["api", "user", "--jq", ".login"], timeout=10)
