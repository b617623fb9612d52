"""Client for a running `prwatch serve`.

RemoteSession offers the same operations as prwatch_core.session.Session,
but each one is a request to the server's session routes. The server owns
the fetching, caching and persistence, so several terminals (or machines)
share one cache and one set of acknowledgements.
"""

from __future__ import annotations

import logging
from urllib.parse import quote

import requests

from prwatch_core.errors import FetcherUnavailable, PullRequestNotFound, ServerError, SessionNotFound
from prwatch_core.models import PullRequest

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


class RemoteSession:
    def __init__(self, base_url: str, name: str, http: requests.Session | None = None, timeout: float = DEFAULT_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.name = name
        self._http = http or requests.Session()
        self._timeout = timeout
        self._force = False

    def _url(self, *parts: str) -> str:
        return "/".join([self.base_url, quote(self.name, safe=""), *(quote(p, safe="") for p in parts)])

    def _request(self, method: str, *parts: str) -> requests.Response:
        url = self._url(*parts)
        try:
            response = self._http.request(method, url, timeout=self._timeout)
        except requests.RequestException as e:
            raise ServerError(f"Could not reach prwatch server at {self.base_url}: {e}")
        logger.debug("%s %s -> %d", method, url, response.status_code)

        if response.status_code == 503:
            raise FetcherUnavailable(self._error_message(response))
        return response

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            return response.json().get("error") or response.reason
        except ValueError:
            return response.text or response.reason

    def _check(self, response: requests.Response) -> None:
        if not response.ok:
            raise ServerError(f"Got error from server: {response.status_code} {self._error_message(response)}")

    def _pull_requests(self, response: requests.Response) -> list[PullRequest]:
        self._check(response)
        return [PullRequest.from_dict(d) for d in response.json()]

    def refresh(self) -> bool:
        """Ask the server to refetch now. Returns True, as the server always fetches."""
        self._check(self._request("POST", "refresh"))
        self._force = False
        return True

    def list_unacknowledged(self) -> list[PullRequest]:
        if self._force:
            self._force = False
            return self._pull_requests(self._request("POST", "refresh"))
        return self._pull_requests(self._request("GET", "unacknowledged-prs"))

    def list_acknowledged(self) -> list[PullRequest]:
        if self._force:
            self.refresh()
        return self._pull_requests(self._request("GET", "acknowledgement"))

    def acknowledge(self, pr_id: str) -> None:
        self._set_acknowledged("POST", pr_id)

    def unacknowledge(self, pr_id: str) -> None:
        self._set_acknowledged("DELETE", pr_id)

    def _set_acknowledged(self, method: str, pr_id: str) -> None:
        if self._force:
            self.refresh()
        response = self._request(method, "acknowledgement", pr_id)
        if response.status_code == 404:
            raise PullRequestNotFound(pr_id)
        self._check(response)

    def clear(self) -> None:
        response = self._request("DELETE", "clear-session")
        if response.status_code == 404:
            raise SessionNotFound(self.name)
        self._check(response)

    def force_next_refresh(self) -> None:
        self._force = True
