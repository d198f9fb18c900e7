"""Errors raised while generating release notes.

Every failure is fatal: the CLI logs the error and exits without printing
partial notes.
"""

from __future__ import annotations


class ReleaseNotesError(ValueError):
    """Base class for all release notes failures."""


class MalformedResponseError(ReleaseNotesError):
    """The GitHub API returned something we cannot interpret."""


class ReleaseNotFoundError(ReleaseNotesError):
    """The release window could not be determined from the release list."""


class DependencyVersionError(ReleaseNotesError):
    """A dependency's pinned version could not be resolved to a commit."""


class CommitNotFoundError(ReleaseNotesError):
    """A tag or commit could not be resolved."""
