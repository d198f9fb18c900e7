"""Local git checkouts of the repositories release notes are written for.

Tags are mapped to commits with the local repository metadata rather than
the REST API, and manifest files are read at arbitrary commits without
touching the working tree (``git show <commit>:<path>``).

Design notes:
- Uses GitPython; a repository is cloned into the work directory only if
  it is not there yet, and an existing checkout is used as-is
- Uses the same Protocol pattern as the GitHub client so the generator
  can be driven by an in-memory double in tests
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

import git

from release_notes.exceptions import CommitNotFoundError
from release_notes.logging_config import get_logger

logger = get_logger(__name__)

# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


class GitRepositoryProtocol(Protocol):
    """Protocol for the git operations release notes generation needs."""

    def resolve_tag(self, tag: str) -> str:
        """Return the commit a tag points at."""
        ...

    def head_commit(self) -> str:
        """Return the commit currently checked out."""
        ...

    def show_file(self, commit: str, path: str) -> str:
        """Return the contents of ``path`` as of ``commit``."""
        ...


class CheckoutFn(Protocol):
    def __call__(self, repo: str) -> GitRepositoryProtocol: ...


# ---------------------------------------------------------------------------
# GitPython Implementation
# ---------------------------------------------------------------------------


class GitRepository:
    """A local clone, wrapped with the lookups release notes need."""

    def __init__(self, repo: git.Repo | str | Path) -> None:
        if not isinstance(repo, git.Repo):
            repo = git.Repo(repo)
        self.repo = repo

    def resolve_tag(self, tag: str) -> str:
        """Translate ``tag`` into a full commit hash.

        Raises:
            CommitNotFoundError: If the tag does not exist locally
        """
        logger.debug("resolving_tag", tag=tag, repo=self.repo.working_dir)
        try:
            line = self.repo.git.rev_list("-n", "1", tag)
        except git.GitCommandError as exc:
            raise CommitNotFoundError(f"Couldn't determine commit hash for tag {tag}") from exc
        commit = line.strip()
        if not commit:
            raise CommitNotFoundError(f"Couldn't determine commit hash for tag {tag}")
        return commit

    def head_commit(self) -> str:
        return self.repo.head.commit.hexsha

    def show_file(self, commit: str, path: str) -> str:
        """Read a file at a commit.

        Raises:
            git.GitCommandError: If the commit or the path does not exist
        """
        logger.debug("reading_file", commit=commit, path=path)
        return self.repo.git.show(f"{commit}:{path}")


def checkout_repo(repo: str, workdir: str | Path, clone_url: str) -> GitRepository:
    """Clone ``repo`` into ``workdir`` unless a checkout is already there.

    Args:
        repo: Repository in "owner/name" format
        workdir: Directory that holds the checkouts
        clone_url: URL template with a ``{repo}`` placeholder

    Returns:
        The checkout at ``<workdir>/<name>``

    Raises:
        ValueError: If ``repo`` has no "owner/name" shape
        git.GitCommandError: If cloning fails
        git.InvalidGitRepositoryError: If ``<workdir>/<name>`` exists but
            is not a git checkout
    """
    owner, _, name = repo.rpartition("/")
    if not owner or not name:
        raise ValueError(f"Couldn't determine directory name for {repo!r}")

    target = Path(workdir) / name
    if not target.exists():
        url = clone_url.format(repo=repo)
        logger.info("cloning_repo", repo=repo, url=url, target=str(target))
        return GitRepository(git.Repo.clone_from(url, target))

    logger.info("using_checkout", repo=repo, target=str(target))
    return GitRepository(target)
