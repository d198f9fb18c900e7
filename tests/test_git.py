"""Tests for the GitPython-backed checkout.

These run against throw-away repositories created in tmp_path.

Run with: pytest tests/test_git.py -v
"""

from __future__ import annotations

from pathlib import Path

import git
import pytest

from release_notes.context.git import GitRepository, checkout_repo
from release_notes.exceptions import CommitNotFoundError

AUTHOR = git.Actor("Release Bot", "bot@example.com")


def commit_file(repo: git.Repo, relpath: str, content: str, message: str) -> str:
    path = Path(repo.working_tree_dir) / relpath
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    repo.index.add([relpath])
    return repo.index.commit(message, author=AUTHOR, committer=AUTHOR).hexsha


@pytest.fixture
def origin(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> tuple[git.Repo, dict[str, str]]:
    """A repository with two tagged commits and one untagged HEAD commit."""
    monkeypatch.setenv("GIT_COMMITTER_NAME", AUTHOR.name)
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", AUTHOR.email)
    repo = git.Repo.init(tmp_path / "origin" / "app")
    commits = {
        "v0.1.0": commit_file(repo, "go/go.mod", "require a/b v0.1.0\n", "first"),
    }
    repo.create_tag("v0.1.0")
    commits["v0.2.0"] = commit_file(repo, "go/go.mod", "require a/b v0.2.0\n", "second")
    repo.create_tag("v0.2.0", message="annotated release tag")
    commits["HEAD"] = commit_file(repo, "README", "hello\n", "third")
    return repo, commits


class TestGitRepository:
    def test_resolve_lightweight_tag(self, origin) -> None:
        repo, commits = origin
        assert GitRepository(repo).resolve_tag("v0.1.0") == commits["v0.1.0"]

    def test_resolve_annotated_tag_to_commit(self, origin) -> None:
        repo, commits = origin
        assert GitRepository(repo).resolve_tag("v0.2.0") == commits["v0.2.0"]

    def test_unknown_tag(self, origin) -> None:
        repo, _ = origin
        with pytest.raises(CommitNotFoundError):
            GitRepository(repo).resolve_tag("v9.9.9")

    def test_head_commit(self, origin) -> None:
        repo, commits = origin
        assert GitRepository(repo.working_tree_dir).head_commit() == commits["HEAD"]

    def test_show_file_at_commit(self, origin) -> None:
        repo, commits = origin
        checkout = GitRepository(repo)
        assert checkout.show_file(commits["v0.1.0"], "go/go.mod") == "require a/b v0.1.0"
        assert checkout.show_file(commits["HEAD"], "go/go.mod") == "require a/b v0.2.0"

    def test_show_missing_file(self, origin) -> None:
        repo, commits = origin
        with pytest.raises(git.GitCommandError):
            GitRepository(repo).show_file(commits["v0.1.0"], "README")


class TestCheckoutRepo:
    def test_clones_when_absent(self, origin, tmp_path: Path) -> None:
        repo, commits = origin
        workdir = tmp_path / "work"
        workdir.mkdir()

        checkout = checkout_repo("org/app", workdir, str(tmp_path / "origin" / "app"))

        assert (workdir / "app" / ".git").is_dir()
        assert checkout.resolve_tag("v0.2.0") == commits["v0.2.0"]
        assert checkout.head_commit() == commits["HEAD"]

    def test_url_template(self, origin, tmp_path: Path) -> None:
        repo, commits = origin
        workdir = tmp_path / "work"

        checkout = checkout_repo("origin/app", workdir, str(tmp_path) + "/{repo}")

        assert checkout.resolve_tag("v0.1.0") == commits["v0.1.0"]

    def test_reuses_existing_checkout(self, origin, tmp_path: Path) -> None:
        repo, commits = origin
        checkout = checkout_repo("someone/app", tmp_path / "origin", "unused://{repo}")
        assert Path(checkout.repo.working_tree_dir).resolve() == Path(repo.working_tree_dir).resolve()

    def test_rejects_bare_name(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError):
            checkout_repo("app", tmp_path, "{repo}")

    def test_existing_directory_that_is_not_a_checkout(self, tmp_path: Path) -> None:
        (tmp_path / "app").mkdir()
        with pytest.raises(git.InvalidGitRepositoryError):
            checkout_repo("org/app", tmp_path, "unused://{repo}")
