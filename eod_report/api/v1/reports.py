"""
EOD report endpoints.

Collects a user's GitHub activity over a date range and returns both the
merged timeline and the rendered report.
"""

import logging
from datetime import date, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from eod_report.api.deps import get_github_fetcher
from eod_report.config import settings
from eod_report.services.activity import (
    ActivityEvent,
    ActivityKind,
    DateRange,
    GroupingMode,
    ReportConfig,
    ReportValidationError,
    collect_activity,
    render_report,
)
from eod_report.services.github import GitHubActivityFetcher

router = APIRouter(prefix="/reports", tags=["reports"])
logger = logging.getLogger(__name__)


# --- Request / Response Models ---


class EODReportRequest(BaseModel):
    """Request to synthesize an EOD report."""

    username: str | None = None
    organization: str | None = None
    start_date: date | None = None
    end_date: date | None = Field(default=None, description="Last day included in the report")
    timezone: str | None = Field(default=None, description="IANA zone used for calendar days")
    include: list[ActivityKind] | None = Field(
        default=None, description="Activity kinds rendered in the report (default: all)"
    )
    group_by_day: bool = False
    group_by_week: bool = False
    week_start: int = Field(default=0, ge=0, le=6, description="0 = Monday ... 6 = Sunday")


class TimelineEntry(BaseModel):
    """One event on the merged timeline."""

    kind: ActivityKind
    identifier: str
    title: str
    repository: str
    url: str
    timestamp: datetime
    created_at: datetime
    merged_at: datetime | None
    assigned_at: datetime | None
    state: str | None


class TimelineResponse(BaseModel):
    timeline: list[TimelineEntry]
    notices: list[str]


class EODReportResponse(TimelineResponse):
    report: str


def _timeline_entry(event: ActivityEvent) -> TimelineEntry:
    return TimelineEntry(
        kind=event.kind,
        identifier=event.identifier,
        title=event.title,
        repository=event.repository,
        url=event.url,
        timestamp=event.ordering_timestamp,
        created_at=event.created_at,
        merged_at=event.merged_at,
        assigned_at=event.assigned_at,
        state=event.state.value if event.state else None,
    )


def build_report_config(body: EODReportRequest) -> ReportConfig:
    """Translate the request body into an explicit ReportConfig."""
    tz = body.timezone or settings.default_timezone
    try:
        ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ReportValidationError(f"Unknown timezone: {tz}") from e

    date_range = None
    if body.start_date and body.end_date:
        if body.start_date > body.end_date:
            raise ReportValidationError("Start date should be before end date")
        date_range = DateRange.from_dates(body.start_date, body.end_date, tz)

    return ReportConfig(
        username=body.username,
        date_range=date_range,
        organization=body.organization or None,
        include=frozenset(body.include) if body.include is not None else frozenset(ActivityKind),
        grouping=GroupingMode.resolve(body.group_by_day, body.group_by_week),
        timezone=tz,
        week_start=body.week_start,
        max_concurrent_lookups=settings.max_concurrent_lookups,
    )


# --- Endpoints ---


@router.post("/eod", response_model=EODReportResponse)
async def create_eod_report(
    body: EODReportRequest,
    fetcher: GitHubActivityFetcher = Depends(get_github_fetcher),
) -> EODReportResponse:
    """Collect activity and render the EOD report alongside the timeline."""
    try:
        config = build_report_config(body)
        bundle = await collect_activity(config, fetcher)
    except ReportValidationError as e:
        logger.info(f"Rejected report request for {body.username!r}: {e.message}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from e

    if not fetcher.authenticated:
        bundle.notices.append(
            "Using public data only. Add a GitHub token to see private repositories."
        )

    return EODReportResponse(
        report=render_report(bundle, config),
        timeline=[_timeline_entry(e) for e in bundle.timeline],
        notices=bundle.notices,
    )


@router.post("/timeline", response_model=TimelineResponse)
async def get_activity_timeline(
    body: EODReportRequest,
    fetcher: GitHubActivityFetcher = Depends(get_github_fetcher),
) -> TimelineResponse:
    """Collect activity and return the merged timeline only, newest first."""
    try:
        bundle = await collect_activity(build_report_config(body), fetcher)
    except ReportValidationError as e:
        logger.info(f"Rejected report request for {body.username!r}: {e.message}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from e

    return TimelineResponse(
        timeline=[_timeline_entry(e) for e in bundle.timeline],
        notices=bundle.notices,
    )
