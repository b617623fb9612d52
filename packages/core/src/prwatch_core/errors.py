"""Exception taxonomy for prwatch.

Nothing here is fatal to the process: every error is surfaced to the caller
(CLI command or HTTP handler) as a normal, recoverable result.
"""

from __future__ import annotations


class PrwatchError(Exception):
    """Base class for all prwatch errors."""


class PullRequestNotFound(PrwatchError):
    """An acknowledge/unacknowledge referenced an id absent after refresh."""

    def __init__(self, pr_id: str):
        super().__init__(f"Could not find PR with ID: {pr_id}")
        self.pr_id = pr_id


class SessionNotFound(PrwatchError):
    """A registry removal referenced a session name that does not exist."""

    def __init__(self, name: str):
        super().__init__(f"No session named {name!r}")
        self.name = name


class FetchError(PrwatchError):
    """Fetching pull requests for one repository failed.

    Tolerated by the session: the repository is skipped for that refresh
    cycle and the remaining repositories are still reconciled.
    """

    def __init__(self, repository: str, message: str, stdout: str = "", stderr: str = ""):
        super().__init__(f"{repository}: {message}")
        self.repository = repository
        self.stdout = stdout
        self.stderr = stderr


class FetcherUnavailable(PrwatchError):
    """The fetch step as a whole cannot run (no gh binary, not logged in, no token).

    Unlike FetchError this aborts the refresh: the store and the refresh
    timestamp are left untouched.
    """


class ServerError(PrwatchError):
    """A prwatch server could not be reached or answered with an error."""
