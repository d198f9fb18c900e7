"""Time-windowed collection of merged pull requests and closed issues.

GitHub is asked for closed items sorted by creation time, newest first.
Walking those pages, an item is kept when its relevant timestamp (merge
time for pull requests, close time for issues) lies inside the window.
Because the listing is in descending creation order, the first item
created before the window's lower bound means nothing further down can
have been merged or closed inside the window, so paging stops there.
The number of requests is therefore bounded by how many items were
created since the lower bound, not by the size of the repository's
history.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from typing import Any, TypeVar

from release_notes.context.github import GitHubClientProtocol, parse_record
from release_notes.logging_config import get_logger
from release_notes.schemas import Issue, PullRequest, TimeWindow

logger = get_logger(__name__)

ItemT = TypeVar("ItemT", PullRequest, Issue)


def collect_items(
    pages: Iterable[list[dict[str, Any]]],
    model: type[ItemT],
    window: TimeWindow,
    exclusion_marker: str,
    skip: Callable[[ItemT], bool] | None = None,
) -> list[ItemT]:
    """Filter pages of items down to those that belong in the window.

    Args:
        pages: Pages in descending creation-time order. Consumed lazily;
               pages after the stopping point are never requested.
        model: PullRequest or Issue
        window: Inclusive window for the relevant timestamp
        exclusion_marker: Title substring that keeps an item out
        skip: Extra per-item exclusion

    Returns:
        The kept items, in input order
    """
    collected: list[ItemT] = []
    for page in pages:
        for payload in page:
            item = parse_record(model, payload)
            relevant_time = item.relevant_time
            if relevant_time is None:
                continue
            if item.created_at < window.lower:
                logger.debug(
                    "window_boundary_crossed",
                    number=item.number,
                    created_at=item.created_at.isoformat(),
                )
                return collected
            if exclusion_marker in item.title:
                logger.debug("item_excluded", number=item.number, title=item.title)
                continue
            if skip is not None and skip(item):
                continue
            if window.contains(relevant_time):
                collected.append(item)
    return collected


def fetch_pull_requests(
    client: GitHubClientProtocol,
    repo: str,
    window: TimeWindow,
    exclusion_marker: str,
) -> list[PullRequest]:
    """Return the pull requests of ``repo`` merged inside ``window``."""
    pages = client.iter_pages(
        f"/repos/{repo}/pulls",
        {"state": "closed", "sort": "created", "direction": "desc"},
    )
    pulls = collect_items(pages, PullRequest, window, exclusion_marker)
    logger.info("pull_requests_collected", repo=repo, count=len(pulls))
    return pulls


def fetch_issues(
    client: GitHubClientProtocol,
    repo: str,
    window: TimeWindow,
    exclusion_marker: str,
) -> list[Issue]:
    """Return the issues of ``repo`` closed inside ``window``.

    Pull requests cross-listed by the issues endpoint are left out.
    """
    pages = client.iter_pages(
        f"/repos/{repo}/issues",
        {
            "state": "closed",
            "sort": "created",
            "direction": "desc",
            "since": format_timestamp(window.lower),
        },
    )
    issues = collect_items(
        pages,
        Issue,
        window,
        exclusion_marker,
        skip=lambda issue: issue.is_pull_request,
    )
    logger.info("issues_collected", repo=repo, count=len(issues))
    return issues


def format_timestamp(moment: datetime) -> str:
    """Render a timestamp the way GitHub's ``since`` parameter expects."""
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
