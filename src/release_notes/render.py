"""Markdown rendering of collected release notes."""

from __future__ import annotations

import re

from release_notes.schemas import DependencyWindow, Issue, PullRequest, ReleaseNotes

_LINE_BREAKS = re.compile(r"\s*[\r\n]+\s*")


def render_item(item: PullRequest | Issue) -> str:
    return f"* [{item.number}]({item.url}): {item.title}"


def render_body(body: str | None) -> list[str]:
    """Split a PR description into indented lines, dropping blank ones."""
    if not body:
        return []
    return [f"  {line}" for line in _LINE_BREAKS.split(body.strip()) if line]


def render_dependency(window: DependencyWindow) -> str:
    return f"* {window.repo_name}: {window.from_commit}..{window.to_commit}"


def render_markdown(notes: ReleaseNotes) -> str:
    """Render merged PRs (with descriptions) and closed issues.

    Dependencies whose pin moved are listed last, and only when there are any.
    """
    lines = ["# Merged PRs", ""]
    for pull in notes.pull_requests:
        lines.append(render_item(pull))
        lines.extend(render_body(pull.body))

    lines += ["", "# Closed Issues", ""]
    lines.extend(render_item(issue) for issue in notes.issues)

    if notes.dependency_windows:
        lines += ["", "# Dependency Updates", ""]
        lines.extend(render_dependency(window) for window in notes.dependency_windows)
    return "\n".join(lines) + "\n"
