"""Locating the release window the notes are written for.

Without a tag, the notes cover everything since the most recent release
(the window is open-ended and its upper commit is the local HEAD). With
a tag, they cover the span between the release before it and the tagged
release itself.
"""

from __future__ import annotations

from collections.abc import Iterable

from release_notes.context.git import GitRepositoryProtocol
from release_notes.exceptions import ReleaseNotFoundError
from release_notes.logging_config import get_logger
from release_notes.schemas import Release, ReleaseWindow

logger = get_logger(__name__)


def locate_releases(
    releases: Iterable[Release], tag: str | None = None
) -> tuple[Release, Release | None]:
    """Pick the releases bounding the window.

    Args:
        releases: Releases, most recent first. Consumed only as far as needed.
        tag: Release to write notes for; None for "since the last release"

    Returns:
        (older release, newer release); the newer release is None when no
        tag was given

    Raises:
        ReleaseNotFoundError: If there are no releases, the tag is unknown,
            or the tagged release has no predecessor
    """
    remaining = iter(releases)
    if tag is None:
        latest = next(remaining, None)
        if latest is None:
            raise ReleaseNotFoundError("Couldn't find any release")
        return latest, None

    for release in remaining:
        if release.tag != tag:
            continue
        previous = next(remaining, None)
        if previous is None:
            raise ReleaseNotFoundError(f"Release {tag} has no earlier release to compare with")
        return previous, release

    raise ReleaseNotFoundError(f"Couldn't find release {tag}")


def build_release_window(
    repo: str,
    from_release: Release,
    to_release: Release | None,
    checkout: GitRepositoryProtocol,
) -> ReleaseWindow:
    """Attach commits to the located releases using the local checkout."""
    from_commit = checkout.resolve_tag(from_release.tag)
    if to_release is None:
        to_commit = checkout.head_commit()
    else:
        to_commit = checkout.resolve_tag(to_release.tag)

    window = ReleaseWindow(
        repo=repo,
        from_release=from_release,
        to_release=to_release,
        from_commit=from_commit,
        to_commit=to_commit,
    )
    logger.info(
        "release_window_located",
        repo=repo,
        from_tag=from_release.tag,
        to_tag=to_release.tag if to_release else "HEAD",
        from_time=from_release.created_at.isoformat(),
        to_time=to_release.created_at.isoformat() if to_release else None,
    )
    return window
