"""
Activity collection and report synthesis.

One collection cycle:
1. Validate the report configuration (nothing is fetched on failure)
2. Fetch every stream; a failed stream contributes zero events
3. Resolve assignments and linked pull requests for assigned issues
4. Drop commits already represented by a fetched pull request
5. Merge everything into one timeline, newest first
"""

import logging
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from eod_report.services.activity.deduplicator import (
    attach_linked_pull_requests,
    drop_commits_covered_by_pull_requests,
    resolve_assignments,
)
from eod_report.services.activity.exceptions import ReportValidationError, UpstreamUnavailable
from eod_report.services.activity.fetcher import ActivityFetcher
from eod_report.services.activity.normalizer import normalize_stream
from eod_report.services.activity.template import EOD_TEMPLATE, render_report
from eod_report.services.activity.timeline import merge_timeline
from eod_report.services.activity.types import (
    STREAM_ORDER,
    ActivityBundle,
    ActivityEvent,
    ActivityKind,
    ActivityScope,
    DateRange,
    ReportConfig,
)

logger = logging.getLogger(__name__)


def validate_config(config: ReportConfig) -> DateRange:
    """
    Check the configuration before anything is fetched.

    Returns:
        The validated date range

    Raises:
        ReportValidationError: If the username, date range, timezone or week start
            is missing or invalid
    """
    if not config.username or not config.username.strip():
        raise ReportValidationError("Username is required")
    if config.date_range is None:
        raise ReportValidationError("Date range is required")
    if config.date_range.start >= config.date_range.end:
        raise ReportValidationError("Start date should be before end date")
    try:
        ZoneInfo(config.timezone)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ReportValidationError(f"Unknown timezone: {config.timezone}") from e
    if not 0 <= config.week_start <= 6:
        raise ReportValidationError("Week start must be between 0 (Monday) and 6 (Sunday)")
    return config.date_range


async def _fetch_stream(
    fetcher: ActivityFetcher,
    kind: ActivityKind,
    scope: ActivityScope,
    date_range: DateRange,
    notices: list[str],
) -> list[ActivityEvent]:
    try:
        raw_items = await fetcher.fetch(kind, scope, date_range)
    except UpstreamUnavailable as e:
        logger.warning(f"Stream {kind.value} unavailable: {e.message}")
        notices.append(f"Failed to fetch {kind.value}: {e.message}")
        return []

    if kind is ActivityKind.COMMIT_CREATED:
        login = scope.username.lower()
        raw_items = [
            item
            for item in raw_items
            if ((item.get("committer") or {}).get("login") or "").lower() == login
        ]
    return normalize_stream(raw_items, kind)


async def collect_activity(config: ReportConfig, fetcher: ActivityFetcher) -> ActivityBundle:
    """
    Run one collection cycle and return the merged timeline.

    Raises:
        ReportValidationError: If the configuration is incomplete
    """
    date_range = validate_config(config)

    scope = config.scope
    notices: list[str] = []
    streams: dict[ActivityKind, list[ActivityEvent]] = {}
    for kind in STREAM_ORDER:
        streams[kind] = await _fetch_stream(fetcher, kind, scope, date_range, notices)

    assigned = await resolve_assignments(
        streams[ActivityKind.ISSUE_ASSIGNED],
        scope.username,
        fetcher,
        notices,
        config.max_concurrent_lookups,
    )
    assigned = await attach_linked_pull_requests(
        assigned, fetcher, notices, config.max_concurrent_lookups
    )
    streams[ActivityKind.ISSUE_ASSIGNED] = assigned

    streams[ActivityKind.COMMIT_CREATED] = await drop_commits_covered_by_pull_requests(
        streams[ActivityKind.COMMIT_CREATED],
        streams[ActivityKind.PR_CREATED] + streams[ActivityKind.PR_MERGED],
        fetcher,
        notices,
        config.max_concurrent_lookups,
    )

    timeline = merge_timeline(*(streams[kind] for kind in STREAM_ORDER))
    logger.info(
        f"Collected {len(timeline)} events for {scope.username} "
        f"({len(notices)} partial failures)"
    )
    return ActivityBundle(timeline=timeline, assigned_issues=tuple(assigned), notices=notices)


async def synthesize(
    config: ReportConfig,
    fetcher: ActivityFetcher,
    template: str = EOD_TEMPLATE,
) -> str:
    """Collect activity and render it as an EOD report."""
    bundle = await collect_activity(config, fetcher)
    return render_report(bundle, config, template)
