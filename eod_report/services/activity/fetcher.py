"""Boundary the activity engine consumes to reach the upstream source."""

from typing import Any, Protocol

from eod_report.services.activity.types import ActivityKind, ActivityScope, DateRange


class ActivityFetcher(Protocol):
    """
    Source of raw activity items.

    Every method returns first-page results only and raises
    UpstreamUnavailable (or a subclass) on transport or not-found errors.
    """

    async def fetch(
        self, kind: ActivityKind, scope: ActivityScope, date_range: DateRange
    ) -> list[dict[str, Any]]: ...

    async def fetch_event_history(self, events_url: str) -> list[dict[str, Any]]: ...

    async def fetch_commit_pull_requests(self, commit_url: str) -> list[dict[str, Any]]: ...

    async def fetch_issue_linked_pull_requests(self, issue_url: str) -> list[dict[str, Any]]: ...
