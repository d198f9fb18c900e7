"""Shared test doubles."""

from __future__ import annotations

import pytest

from release_notes.exceptions import CommitNotFoundError


class FakeRepository:
    """In-memory stand-in for a git checkout.

    Attributes:
        tags: tag -> commit
        files: (commit, path) -> contents
        head: commit returned by head_commit()
    """

    def __init__(
        self,
        tags: dict[str, str] | None = None,
        files: dict[tuple[str, str], str] | None = None,
        head: str = "HEAD_COMMIT",
    ) -> None:
        self.tags = tags or {}
        self.files = files or {}
        self.head = head
        self.resolved: list[str] = []

    def resolve_tag(self, tag: str) -> str:
        self.resolved.append(tag)
        if tag not in self.tags:
            raise CommitNotFoundError(f"Couldn't determine commit hash for tag {tag}")
        return self.tags[tag]

    def head_commit(self) -> str:
        return self.head

    def show_file(self, commit: str, path: str) -> str:
        return self.files[(commit, path)]


class FakeCheckouts:
    """Checkout callable serving FakeRepository objects by repo name."""

    def __init__(self, repos: dict[str, FakeRepository]) -> None:
        self.repos = repos
        self.calls: list[str] = []

    def __call__(self, repo: str) -> FakeRepository:
        self.calls.append(repo)
        return self.repos[repo]


@pytest.fixture
def fake_repository() -> type[FakeRepository]:
    return FakeRepository


@pytest.fixture
def fake_checkouts() -> type[FakeCheckouts]:
    return FakeCheckouts
