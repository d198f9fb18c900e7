"""Release notes orchestrator and command-line entry point.

This module ties together all the components:
- Release location (releases.py)
- Tag to commit resolution (context/git.py)
- Windowed PR and issue collection (fetch.py over context/github.py)
- Dependency version diffing (dependencies.py)
- Markdown rendering (render.py)

The generator follows this flow:
1. Find the releases bounding the window (or the latest release and HEAD)
2. Check out the repository and resolve both ends to commits
3. Collect merged PRs and closed issues inside the window
4. For every dependency whose pinned commit moved, collect its PRs and
   issues inside the dependency's own window
5. Render the markdown

Any failure aborts the run; nothing is printed unless everything succeeded.
"""

from __future__ import annotations

import argparse
import functools
import sys

import git
import httpx

from release_notes.config import NotesConfig, load_config
from release_notes.context.git import CheckoutFn, checkout_repo
from release_notes.context.github import GitHubClient, GitHubClientProtocol
from release_notes.dependencies import diff_dependency
from release_notes.fetch import fetch_issues, fetch_pull_requests
from release_notes.logging_config import get_logger, setup_logging
from release_notes.releases import build_release_window, locate_releases
from release_notes.render import render_markdown
from release_notes.schemas import ReleaseNotes

logger = get_logger(__name__)


class ReleaseNotesGenerator:
    """Collects everything that went into one release.

    Usage:
        with GitHubClient(token="ghp_...") as client:
            notes = ReleaseNotesGenerator(client).generate("dolthub/dolt", "v0.22.9")
    """

    def __init__(
        self,
        client: GitHubClientProtocol,
        config: NotesConfig | None = None,
        checkout: CheckoutFn | None = None,
    ) -> None:
        """Initialize the generator with its dependencies.

        Args:
            client: Source of releases, PR/issue pages and commit dates
            config: Run settings. Uses defaults if None.
            checkout: Returns the local checkout of an "owner/name" repo.
                      Clones into config.workdir if None.
        """
        self.client = client
        self.config = config or NotesConfig()
        self.checkout = checkout or functools.partial(
            checkout_repo,
            workdir=self.config.workdir,
            clone_url=self.config.clone_url,
        )

    def generate(self, repo: str, tag: str | None = None) -> ReleaseNotes:
        """Collect the notes for ``tag``, or for everything since the last release.

        Args:
            repo: Repository in "owner/name" format
            tag: Release tag; None for changes since the most recent release

        Returns:
            The aggregated ReleaseNotes

        Raises:
            ReleaseNotesError: If the window or a dependency can't be resolved
            httpx.HTTPStatusError: If a GitHub API call fails
            git.GitError: If a git command fails or a checkout is not a repository
        """
        logger.info("generation_started", repo=repo, tag=tag or "HEAD")
        try:
            from_release, to_release = locate_releases(self.client.iter_releases(repo), tag)
            checkout = self.checkout(repo)
            window = build_release_window(repo, from_release, to_release, checkout)

            marker = self.config.exclusion_marker
            notes = ReleaseNotes(
                window=window,
                pull_requests=fetch_pull_requests(
                    self.client, repo, window.time_window, marker
                ),
                issues=fetch_issues(self.client, repo, window.time_window, marker),
            )

            for dependency in self.config.dependencies:
                dependency_window = diff_dependency(
                    dependency,
                    window.from_commit,
                    window.to_commit,
                    checkout,
                    self.client,
                    self.config.manifest_path,
                    self.checkout,
                )
                if dependency_window is None:
                    continue
                notes.dependency_windows.append(dependency_window)
                notes.pull_requests.extend(
                    fetch_pull_requests(
                        self.client, dependency, dependency_window.time_window, marker
                    )
                )
                notes.issues.extend(
                    fetch_issues(self.client, dependency, dependency_window.time_window, marker)
                )
        except Exception as e:
            logger.error("generation_failed", repo=repo, tag=tag, error=str(e))
            raise

        logger.info(
            "generation_complete",
            repo=repo,
            pull_requests=len(notes.pull_requests),
            issues=len(notes.issues),
            dependencies_changed=len(notes.dependency_windows),
        )
        return notes


# ---------------------------------------------------------------------------
# CLI Entry Point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gen-release-notes",
        description=(
            "Generate markdown release notes from the PRs merged and issues "
            "closed between two GitHub releases."
        ),
    )
    parser.add_argument("repo", help="GitHub repository, owner/name")
    parser.add_argument(
        "tag",
        nargs="?",
        help="Release tag to generate notes for (default: changes since the last release)",
    )
    parser.add_argument(
        "--dependency", "--dependencies", "-d",
        dest="dependencies",
        action="append",
        default=[],
        metavar="OWNER/REPO",
        help="Pinned dependency whose changes are included; may be repeated",
    )
    parser.add_argument(
        "--token", "-t",
        help="GitHub token (default: $GITHUB_TOKEN)",
    )
    parser.add_argument("--config", "-c", help="Path to a YAML config file")
    parser.add_argument("--workdir", help="Directory holding repository checkouts")
    parser.add_argument("--manifest", help="Manifest file holding dependency pins")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR")
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point.

    Usage:
        gen-release-notes dolthub/dolt v0.22.9
        gen-release-notes -d dolthub/go-mysql-server dolthub/dolt > notes.md

    Markdown goes to stdout, the diagnostic trace to stderr.
    """
    args = build_parser().parse_args(argv)
    setup_logging(log_level=args.log_level)

    try:
        config = load_config(args.config)
        config = config.with_overrides(
            token=args.token,
            workdir=args.workdir,
            manifest_path=args.manifest,
            dependencies=list(dict.fromkeys([*config.dependencies, *args.dependencies])),
        )
        with GitHubClient(
            token=config.token,
            base_url=config.api_url,
            per_page=config.per_page,
            timeout=config.timeout,
        ) as client:
            notes = ReleaseNotesGenerator(client, config).generate(args.repo, args.tag)
    except (ValueError, httpx.HTTPError, git.GitError) as exc:
        logger.error("aborted", error=str(exc))
        sys.exit(1)

    sys.stdout.write(render_markdown(notes))


if __name__ == "__main__":
    main()
