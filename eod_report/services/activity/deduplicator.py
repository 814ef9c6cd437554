"""
Per-event sub-lookups: assignment resolution, issue linking and commit dedup.

A commit that reached the timeline through one of the user's pull requests
is already represented by that pull request and is dropped. Assigned issues
get their linked pull requests attached so the report can tell finished
work from what's next.

Lookups run one event at a time by default. With ``max_concurrent > 1``
they fan out under a semaphore; inclusion and exclusion outcomes are the
same either way.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import replace
from typing import TypeVar

from eod_report.services.activity.exceptions import UpstreamUnavailable
from eod_report.services.activity.fetcher import ActivityFetcher
from eod_report.services.activity.normalizer import parse_timestamp, to_pull_request_ref
from eod_report.services.activity.types import ActivityEvent, PullRequestRef

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def run_lookups(
    events: Sequence[ActivityEvent],
    lookup: Callable[[ActivityEvent], Awaitable[T]],
    max_concurrent: int = 1,
) -> list[T]:
    """Run ``lookup`` for every event, results in event order."""
    if max_concurrent <= 1:
        return [await lookup(event) for event in events]

    semaphore = asyncio.Semaphore(max_concurrent)

    async def lookup_with_limit(event: ActivityEvent) -> T:
        async with semaphore:
            return await lookup(event)

    return list(await asyncio.gather(*[lookup_with_limit(e) for e in events]))


async def resolve_assignments(
    issues: Sequence[ActivityEvent],
    username: str,
    fetcher: ActivityFetcher,
    notices: list[str],
    max_concurrent: int = 1,
) -> list[ActivityEvent]:
    """
    Stamp each issue with the time it was assigned to ``username``.

    Issues whose event history holds no such assignment (or could not be
    fetched) are left out.
    """
    login = username.lower()

    async def find_assignment(issue: ActivityEvent) -> ActivityEvent | None:
        if not issue.events_url:
            return None
        try:
            history = await fetcher.fetch_event_history(issue.events_url)
        except UpstreamUnavailable as e:
            logger.warning(f"Event history unavailable for {issue.url}: {e.message}")
            notices.append(f"Could not load events for {issue.url}: {e.message}")
            return None

        for event in history:
            assignee = (event.get("assignee") or {}).get("login") or ""
            if event.get("event") == "assigned" and assignee.lower() == login:
                assigned_at = parse_timestamp(event.get("created_at"))
                if assigned_at is None:
                    return None
                return replace(issue, assigned_at=assigned_at)
        return None

    results = await run_lookups(issues, find_assignment, max_concurrent)
    return [issue for issue in results if issue is not None]


async def attach_linked_pull_requests(
    issues: Sequence[ActivityEvent],
    fetcher: ActivityFetcher,
    notices: list[str],
    max_concurrent: int = 1,
) -> list[ActivityEvent]:
    """Attach the pull requests linked to each issue. A failed lookup links nothing."""

    async def link(issue: ActivityEvent) -> ActivityEvent:
        if not issue.api_url:
            return issue
        try:
            raw_prs = await fetcher.fetch_issue_linked_pull_requests(issue.api_url)
        except UpstreamUnavailable as e:
            logger.warning(f"Linked PR lookup failed for {issue.url}: {e.message}")
            notices.append(f"Could not load linked pull requests for {issue.url}: {e.message}")
            return issue
        refs = tuple(ref for ref in map(to_pull_request_ref, raw_prs) if ref is not None)
        return replace(issue, linked_pull_requests=refs)

    return await run_lookups(issues, link, max_concurrent)


async def drop_commits_covered_by_pull_requests(
    commits: Sequence[ActivityEvent],
    pull_requests: Sequence[ActivityEvent],
    fetcher: ActivityFetcher,
    notices: list[str],
    max_concurrent: int = 1,
) -> list[ActivityEvent]:
    """
    Remove commits already represented by one of the fetched pull requests.

    Identity is the upstream node id. A commit whose lookup fails is kept.
    """
    known = {pr.node_id for pr in pull_requests if pr.node_id}

    async def check(commit: ActivityEvent) -> ActivityEvent | None:
        if not commit.api_url:
            return commit
        try:
            raw_prs = await fetcher.fetch_commit_pull_requests(commit.api_url)
        except UpstreamUnavailable as e:
            logger.warning(f"Commit PR lookup failed for {commit.identifier}: {e.message}")
            notices.append(f"Could not check pull requests for commit {commit.identifier}")
            return commit

        refs: tuple[PullRequestRef, ...] = tuple(
            ref for ref in map(to_pull_request_ref, raw_prs) if ref is not None
        )
        if any(ref.node_id in known for ref in refs):
            logger.debug(f"Dropping commit {commit.identifier}: covered by a pull request")
            return None
        return replace(commit, linked_pull_requests=refs)

    results = await run_lookups(commits, check, max_concurrent)
    return [commit for commit in results if commit is not None]
