"""Pull request fetchers.

Two interchangeable sources implement PullRequestFetcher:

- GhCliFetcher shells out to `gh pr list --json id,title,reviews`. This is
  the default: anyone who can run `gh pr view` can use prwatch with no
  token setup.
- GithubApiFetcher talks to the REST API through PyGithub, for hosts where
  the gh CLI is not installed but a GITHUB_TOKEN is available.

Both raise FetchError for a single repository (the session skips it) and
FetcherUnavailable when nothing can be fetched at all.
"""

from __future__ import annotations

import json
import logging
import subprocess
from abc import ABC, abstractmethod
from datetime import datetime, timezone

from github import Github, GithubException

from prwatch_core.errors import FetcherUnavailable, FetchError
from prwatch_core.models import PullRequest, Review

logger = logging.getLogger(__name__)

_GH_JSON_FIELDS = "id,title,reviews"


class PullRequestFetcher(ABC):
    @abstractmethod
    def fetch(self, repository: str, author: str | None) -> list[PullRequest]:
        """Return the open pull requests of ``author`` in ``repository``.

        Raises FetchError when only this repository failed, FetcherUnavailable
        when the fetcher cannot run at all.
        """


def parse_gh_pull_requests(payload: str, repository: str) -> list[PullRequest]:
    """Convert `gh pr list --json id,title,reviews` output into PullRequests."""
    raw = json.loads(payload)
    if not isinstance(raw, list):
        raise ValueError(f"expected a JSON array, got {type(raw).__name__}")
    return [PullRequest.from_dict(d, repository=repository) for d in raw]


class GhCliFetcher(PullRequestFetcher):
    def __init__(self, timeout: float = 30):
        self._timeout = timeout
        self._checked_auth = False

    def ensure_ready(self) -> None:
        """Check once that gh is installed and logged in."""
        if self._checked_auth:
            return
        try:
            result = subprocess.run(
                ["gh", "auth", "status"],
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
        except FileNotFoundError:
            raise FetcherUnavailable("Cannot find github cli binary in PATH")
        except subprocess.TimeoutExpired:
            raise FetcherUnavailable("Timed out checking gh auth status")

        if result.returncode == 1:
            raise FetcherUnavailable("Not logged into github cli, please use 'gh auth login'")
        if result.returncode != 0:
            raise FetcherUnavailable(f"Unexpected exit code {result.returncode} from gh auth status")
        self._checked_auth = True

    def fetch(self, repository: str, author: str | None) -> list[PullRequest]:
        self.ensure_ready()

        cmd = ["gh", "pr", "list", "--repo", repository]
        if author:
            cmd += ["--author", author]
        cmd += ["--json", _GH_JSON_FIELDS]

        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=self._timeout)
        except subprocess.TimeoutExpired:
            raise FetchError(repository, f"gh pr list timed out after {self._timeout}s")
        except FileNotFoundError:
            raise FetcherUnavailable("Cannot find github cli binary in PATH")

        if result.returncode != 0:
            raise FetchError(
                repository,
                f"gh pr list exited with {result.returncode}: {result.stderr.strip()}",
                stdout=result.stdout,
                stderr=result.stderr,
            )

        try:
            prs = parse_gh_pull_requests(result.stdout, repository)
        except (ValueError, KeyError, TypeError) as e:
            raise FetchError(
                repository,
                f"unexpected output from gh pr list: {e}",
                stdout=result.stdout,
                stderr=result.stderr,
            )
        logger.debug("Fetched %d PRs from %s", len(prs), repository)
        return prs


def _as_utc(value: datetime) -> datetime:
    # PyGithub < 2.0 returns naive UTC datetimes.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class GithubApiFetcher(PullRequestFetcher):
    def __init__(self, token: str | None):
        if not token:
            raise FetcherUnavailable(
                "No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first."
            )
        self._gh = Github(token)

    def fetch(self, repository: str, author: str | None) -> list[PullRequest]:
        try:
            repo = self._gh.get_repo(repository)
            return [
                self._convert(pr, repository)
                for pr in repo.get_pulls(state="open")
                if not author or pr.user.login == author
            ]
        except GithubException as e:
            raise FetchError(repository, f"GitHub API error {e.status}: {e.data}")

    @staticmethod
    def _convert(pr, repository: str) -> PullRequest:
        reviews = [
            Review(
                id=str(r.id),
                author=r.user.login if r.user else "",
                submitted_at=_as_utc(r.submitted_at),
            )
            for r in pr.get_reviews()
            # Pending reviews have not been submitted yet.
            if r.submitted_at is not None
        ]
        return PullRequest(id=str(pr.id), title=pr.title or "", repository=repository, reviews=reviews)
