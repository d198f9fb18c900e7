"""Detecting which pinned dependencies moved between two releases.

A dependency's version is read from a manifest (``go.mod`` by default) at
both release commits and normalized to a commit hash:

- Go pseudo-versions embed a 12 digit short hash, which is used directly:
  ``github.com/dolthub/go-mysql-server v0.6.1-0.20210107193823-566f0ba75abc``
- Any other version is treated as a tag of the dependency repository,
  which is checked out and asked for the tag's commit

Dependencies whose commit did not change are skipped before any request
is made for them. For the others, the commits' author dates delimit the
window in which the dependency's own PRs and issues are collected.
"""

from __future__ import annotations

import re

from release_notes.context.git import CheckoutFn, GitRepositoryProtocol
from release_notes.context.github import GitHubClientProtocol
from release_notes.exceptions import CommitNotFoundError, DependencyVersionError
from release_notes.logging_config import get_logger
from release_notes.schemas import DependencyWindow, PinnedVersion

logger = get_logger(__name__)

SHORT_HASH_LENGTH = 12

_PSEUDO_VERSION_HASH = re.compile(r"-([0-9a-f]{12})(?:\+incompatible)?$")
_INCOMPATIBLE_SUFFIX = "+incompatible"
_DIRECTIVES = {"module", "go", "toolchain", "replace", "exclude", "retract"}


def find_pinned_version(manifest: str, dependency: str) -> str:
    """Return the version string ``manifest`` pins ``dependency`` at.

    Handles both ``require x v1`` lines and entries inside a
    ``require ( ... )`` block. Comments and replace directives are ignored.

    Raises:
        DependencyVersionError: If the manifest does not mention the dependency
    """
    for line in manifest.splitlines():
        tokens = line.split("//", 1)[0].split()
        if tokens and tokens[0] == "require":
            tokens = tokens[1:]
        if len(tokens) < 2 or tokens[0] in _DIRECTIVES or tokens[1] == "=>":
            continue
        if _module_matches(tokens[0], dependency):
            return tokens[1]
    raise DependencyVersionError(f"Couldn't find {dependency} in manifest")


def _module_matches(module: str, dependency: str) -> bool:
    # "github.com/dolthub/vitess" matches dependency "dolthub/vitess"
    segments = module.split("/")
    wanted = dependency.split("/")
    width = len(wanted)
    return any(
        segments[start:start + width] == wanted
        for start in range(len(segments) - width + 1)
    )


def resolve_pinned_version(
    dependency: str,
    version: str,
    checkout_dependency: CheckoutFn,
) -> PinnedVersion:
    """Normalize a manifest version to a (short) commit hash.

    Raises:
        DependencyVersionError: If a tag version can't be found in the
            dependency repository
    """
    match = _PSEUDO_VERSION_HASH.search(version)
    if match:
        return PinnedVersion(dependency=dependency, version=version, commit=match.group(1))

    tag = version.removesuffix(_INCOMPATIBLE_SUFFIX)
    logger.info("resolving_dependency_tag", dependency=dependency, tag=tag)
    try:
        commit = checkout_dependency(dependency).resolve_tag(tag)
    except CommitNotFoundError as exc:
        raise DependencyVersionError(
            f"Couldn't determine dependency version {version} of {dependency}"
        ) from exc
    return PinnedVersion(
        dependency=dependency, version=version, commit=commit[:SHORT_HASH_LENGTH]
    )


def pinned_version_at(
    checkout: GitRepositoryProtocol,
    commit: str,
    manifest_path: str,
    dependency: str,
    checkout_dependency: CheckoutFn,
) -> PinnedVersion:
    """Read the manifest at ``commit`` and resolve the dependency's pin."""
    manifest = checkout.show_file(commit, manifest_path)
    try:
        version = find_pinned_version(manifest, dependency)
    except DependencyVersionError as exc:
        raise DependencyVersionError(
            f"Couldn't find {dependency} in {manifest_path} at {commit}"
        ) from exc
    return resolve_pinned_version(dependency, version, checkout_dependency)


def diff_dependency(
    dependency: str,
    from_commit: str,
    to_commit: str,
    checkout: GitRepositoryProtocol,
    client: GitHubClientProtocol,
    manifest_path: str,
    checkout_dependency: CheckoutFn,
) -> DependencyWindow | None:
    """Work out the dependency's history between two commits of its user.

    Returns:
        The dependency's window, or None when the pinned version is the
        same at both commits
    """
    old = pinned_version_at(checkout, from_commit, manifest_path, dependency, checkout_dependency)
    new = pinned_version_at(checkout, to_commit, manifest_path, dependency, checkout_dependency)

    if old.commit == new.commit:
        logger.info("dependency_unchanged", dependency=dependency, commit=old.commit)
        return None

    logger.info(
        "dependency_changed",
        dependency=dependency,
        from_commit=old.commit,
        to_commit=new.commit,
    )
    return DependencyWindow(
        repo_name=dependency,
        from_commit=old.commit,
        to_commit=new.commit,
        from_time=client.get_commit_time(dependency, old.commit),
        to_time=client.get_commit_time(dependency, new.commit),
    )
