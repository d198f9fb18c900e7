"""Pydantic models for the records that flow through release notes generation.

The GitHub-facing models validate straight from REST API payloads, so
field aliases follow GitHub's JSON names (``html_url``, ``created_at``...)
while attribute names stay pythonic. Nothing here is persisted; every
record lives for a single invocation.

Key design decisions:
- GitHub records are frozen snapshots, fetched once and never mutated
- Timestamps are parsed into timezone-aware datetimes so window checks
  compare instants, not strings
- Derived records (windows, pinned versions) are plain models too, which
  keeps them printable in logs and easy to build in tests
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# GitHub Records
# ---------------------------------------------------------------------------


class GitHubRecord(BaseModel):
    """Common configuration for models validated from GitHub payloads."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class Release(GitHubRecord):
    """A published release.

    Attributes:
        tag: Git tag the release points at (e.g., "v0.22.9")
        created_at: When the release was created
    """

    tag: str = Field(..., alias="tag_name", description="Release tag name")
    created_at: datetime = Field(..., description="Release creation time")


class PullRequest(GitHubRecord):
    """A pull request snapshot.

    Attributes:
        number: Pull request number
        url: Browser URL of the pull request
        title: Pull request title
        body: Pull request description (may be empty)
        merged_at: When the PR was merged, None if it was closed unmerged
        created_at: When the PR was opened
    """

    number: int = Field(..., gt=0, description="Pull request number")
    url: str = Field(..., alias="html_url", description="Browser URL")
    title: str = Field(..., description="Pull request title")
    body: str | None = Field(None, description="Pull request description")
    merged_at: datetime | None = Field(None, description="Merge time")
    created_at: datetime = Field(..., description="Creation time")

    @property
    def relevant_time(self) -> datetime | None:
        return self.merged_at


class Issue(GitHubRecord):
    """An issue snapshot.

    GitHub's issues endpoint also lists pull requests; those are recognised
    by their URL and filtered out by the fetcher.

    Attributes:
        number: Issue number
        url: Browser URL of the issue
        title: Issue title
        body: Issue description (may be empty)
        closed_at: When the issue was closed, None if still open
        created_at: When the issue was opened
    """

    number: int = Field(..., gt=0, description="Issue number")
    url: str = Field(..., alias="html_url", description="Browser URL")
    title: str = Field(..., description="Issue title")
    body: str | None = Field(None, description="Issue description")
    closed_at: datetime | None = Field(None, description="Close time")
    created_at: datetime = Field(..., description="Creation time")

    @property
    def relevant_time(self) -> datetime | None:
        return self.closed_at

    @property
    def is_pull_request(self) -> bool:
        """True when the issues API cross-listed a pull request."""
        return "/pull/" in self.url


# ---------------------------------------------------------------------------
# Derived Records
# ---------------------------------------------------------------------------


class TimeWindow(BaseModel):
    """An inclusive time interval; an absent upper bound means "until now"."""

    model_config = ConfigDict(frozen=True)

    lower: datetime = Field(..., description="Inclusive lower bound")
    upper: datetime | None = Field(None, description="Inclusive upper bound")

    def contains(self, moment: datetime) -> bool:
        if moment < self.lower:
            return False
        return self.upper is None or moment <= self.upper


class ReleaseWindow(BaseModel):
    """The two points in a repository's history the notes are written for.

    Attributes:
        repo: Repository in "owner/name" format
        from_release: The older release, bounding the window from below
        to_release: The newer release, or None when the window runs to HEAD
        from_commit: Commit the older release's tag points at
        to_commit: Commit the newer release's tag (or HEAD) points at
    """

    repo: str = Field(..., description="Repository identifier")
    from_release: Release
    to_release: Release | None = None
    from_commit: str = Field(..., description="Commit of the older release")
    to_commit: str = Field(..., description="Commit of the newer release or HEAD")

    @property
    def time_window(self) -> TimeWindow:
        return TimeWindow(
            lower=self.from_release.created_at,
            upper=self.to_release.created_at if self.to_release else None,
        )


class PinnedVersion(BaseModel):
    """A dependency version as recorded in a manifest at some commit.

    Attributes:
        dependency: Dependency repository in "owner/name" format
        version: The version string exactly as the manifest spells it
        commit: Commit identifier the version resolves to
    """

    model_config = ConfigDict(frozen=True)

    dependency: str
    version: str
    commit: str


class DependencyWindow(BaseModel):
    """The span of a dependency's history pulled in between two releases."""

    repo_name: str = Field(..., description="Dependency repository")
    from_commit: str = Field(..., description="Pinned commit at the older release")
    to_commit: str = Field(..., description="Pinned commit at the newer release")
    from_time: datetime = Field(..., description="Author date of from_commit")
    to_time: datetime = Field(..., description="Author date of to_commit")

    @property
    def time_window(self) -> TimeWindow:
        return TimeWindow(lower=self.from_time, upper=self.to_time)


class ReleaseNotes(BaseModel):
    """Everything the renderer needs for one release."""

    window: ReleaseWindow
    pull_requests: list[PullRequest] = Field(default_factory=list)
    issues: list[Issue] = Field(default_factory=list)
    dependency_windows: list[DependencyWindow] = Field(default_factory=list)
