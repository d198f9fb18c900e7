"""GitHub API client for fetching release notes context.

This module talks to GitHub's REST API. It gathers:
- Releases (to locate the release window)
- Raw pages of pull requests and issues (filtered by release_notes.fetch)
- Commit author dates (to turn pinned dependency commits into times)

Design notes:
- Uses a blocking httpx.Client; requests are issued strictly one after
  another and the first failure aborts the run
- Pages are yielded lazily so callers can stop paginating as soon as they
  have crossed the lower bound of their time window
- Uses a Protocol so the generator doesn't depend on the concrete
  implementation (makes testing with mocks easy)

GitHub API docs: https://docs.github.com/en/rest
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime
from typing import Any, Protocol, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from release_notes.exceptions import MalformedResponseError
from release_notes.logging_config import get_logger
from release_notes.schemas import Release

logger = get_logger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


def parse_record(model: type[RecordT], payload: Any) -> RecordT:
    """Validate one API payload into a model, failing loudly on bad data."""
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise MalformedResponseError(
            f"Unexpected {model.__name__} payload from GitHub: {exc}"
        ) from exc


# ---------------------------------------------------------------------------
# Protocol (Interface)
# ---------------------------------------------------------------------------


class GitHubClientProtocol(Protocol):
    """Protocol defining the interface for GitHub data fetching.

    By coding against this protocol (not the concrete class), the generator
    and tests can use mock implementations without touching real GitHub.
    """

    def iter_pages(
        self, path: str, params: dict[str, Any] | None = None
    ) -> Iterator[list[dict[str, Any]]]:
        """Yield the pages of a collection endpoint, newest page first.

        Args:
            path: API path, e.g. "/repos/owner/name/pulls"
            params: Query parameters sent with every page request

        Returns:
            An iterator over pages; each page is a non-empty list of items
        """
        ...

    def iter_releases(self, repo: str) -> Iterator[Release]:
        """Yield a repository's releases, most recent first."""
        ...

    def get_commit_time(self, repo: str, sha: str) -> datetime:
        """Return the author date of a commit."""
        ...


# ---------------------------------------------------------------------------
# Concrete Implementation
# ---------------------------------------------------------------------------


class GitHubClient:
    """Real GitHub API client using httpx.

    Usage:
        with GitHubClient(token="ghp_...") as client:
            for page in client.iter_pages("/repos/dolthub/dolt/pulls"):
                ...
    """

    BASE_URL = "https://api.github.com"

    def __init__(
        self,
        token: str | None = None,
        base_url: str | None = None,
        per_page: int = 100,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the GitHub client.

        Args:
            token: GitHub personal access token. Unauthenticated access is
                   rate limited to 60 requests an hour.
            base_url: API root, for GitHub Enterprise installations.
            per_page: Items requested per page (GitHub caps this at 100).
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport, used by tests.
        """
        self._token = token or ""
        self._headers: dict[str, str] = {
            "Accept": "application/vnd.github.v3+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self._token:
            self._headers["Authorization"] = f"Bearer {self._token}"
        self.per_page = per_page
        self._client = httpx.Client(
            base_url=base_url or self.BASE_URL,
            headers=self._headers,
            timeout=timeout,
            transport=transport,
        )

    def __enter__(self) -> GitHubClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def iter_pages(
        self, path: str, params: dict[str, Any] | None = None
    ) -> Iterator[list[dict[str, Any]]]:
        """Walk a collection endpoint with ``page=1, 2, ...``.

        Stops on the first empty page, or when the response carries a
        Link header that offers no next page.

        Raises:
            httpx.HTTPStatusError: If any GitHub API call fails
            MalformedResponseError: If a page is not a JSON list
        """
        query = {"per_page": self.per_page, **(params or {})}
        page = 1
        while True:
            logger.info("fetching_page", path=path, page=page, params=query)
            resp = self._client.get(path, params={**query, "page": page})
            resp.raise_for_status()
            items = self._json_list(resp)
            if not items:
                return
            yield items
            link_header = resp.headers.get("link")
            if link_header is not None and not self._has_next_link(link_header):
                return
            page += 1

    def iter_releases(self, repo: str) -> Iterator[Release]:
        """Yield releases of ``repo``, most recent first.

        Raises:
            httpx.HTTPStatusError: If any GitHub API call fails
            MalformedResponseError: If a release payload is malformed
        """
        for page in self.iter_pages(f"/repos/{repo}/releases"):
            for item in page:
                yield parse_record(Release, item)

    def get_commit_time(self, repo: str, sha: str) -> datetime:
        """Return the author date of ``sha`` in ``repo``.

        Raises:
            httpx.HTTPStatusError: If the GitHub API call fails
            MalformedResponseError: If the commit is missing or malformed
        """
        logger.info("fetching_commit", repo=repo, sha=sha)
        resp = self._client.get(
            f"/repos/{repo}/commits", params={"sha": sha, "per_page": 1}
        )
        resp.raise_for_status()
        commits = self._json_list(resp)
        if not commits:
            raise MalformedResponseError(f"Couldn't find commit {sha} in {repo}")
        try:
            date = commits[0]["commit"]["author"]["date"]
        except (KeyError, TypeError) as exc:
            raise MalformedResponseError(
                f"Commit {sha} in {repo} has no author date"
            ) from exc
        return parse_record(_CommitDate, {"date": date}).date

    @staticmethod
    def _json_list(resp: httpx.Response) -> list[dict[str, Any]]:
        try:
            data = resp.json()
        except ValueError as exc:
            raise MalformedResponseError(
                f"Response from {resp.request.url} is not JSON"
            ) from exc
        if not isinstance(data, list):
            raise MalformedResponseError(
                f"Response from {resp.request.url} does not contain a list"
            )
        return data

    @staticmethod
    def _has_next_link(link_header: str) -> bool:
        """Whether a GitHub Link header advertises a next page."""
        return any('rel="next"' in part for part in link_header.split(","))


class _CommitDate(BaseModel):
    date: datetime


# ---------------------------------------------------------------------------
# Mock Implementation (for testing)
# ---------------------------------------------------------------------------


class MockGitHubClient:
    """Mock GitHub client that serves predefined data.

    Use this in tests and local development when you don't want to hit
    the real GitHub API. Every path requested through iter_pages is
    recorded in ``requested_paths`` with its query in ``requested_params``,
    and every commit lookup in ``requested_commits``.

    Usage:
        client = MockGitHubClient(
            pages={"/repos/org/app/pulls": [[pr1, pr2], [pr3]]},
            releases={"org/app": [release_new, release_old]},
            commit_times={("org/lib", "566f0ba75abc"): "2021-01-07T19:38:23Z"},
        )
    """

    def __init__(
        self,
        pages: dict[str, list[list[dict[str, Any]]]] | None = None,
        releases: dict[str, list[dict[str, Any]]] | None = None,
        commit_times: dict[tuple[str, str], datetime | str] | None = None,
    ) -> None:
        self._pages = pages or {}
        self._releases = releases or {}
        self._commit_times = commit_times or {}
        self.requested_paths: list[str] = []
        self.requested_params: list[dict[str, Any]] = []
        self.requested_commits: list[tuple[str, str]] = []

    def iter_pages(
        self, path: str, params: dict[str, Any] | None = None
    ) -> Iterator[list[dict[str, Any]]]:
        self.requested_paths.append(path)
        self.requested_params.append(dict(params or {}))
        for page in self._pages.get(path, []):
            if not page:
                return
            yield page

    def iter_releases(self, repo: str) -> Iterator[Release]:
        for item in self._releases.get(repo, []):
            yield parse_record(Release, item)

    def get_commit_time(self, repo: str, sha: str) -> datetime:
        """Return the predefined commit time.

        Raises:
            MalformedResponseError: If no commit time exists for this repo/sha
        """
        self.requested_commits.append((repo, sha))
        if (repo, sha) not in self._commit_times:
            raise MalformedResponseError(f"Couldn't find commit {sha} in {repo}")
        return parse_record(_CommitDate, {"date": self._commit_times[(repo, sha)]}).date
