"""
EOD report rendering.

Turns a collected ActivityBundle into the markdown status report:
kind-specific bullet lines, optional day/week grouping of the
"How did the day go?" section, and the "What's next?" section built from
unfinished assigned issues.
"""

import re
from datetime import date
from zoneinfo import ZoneInfo

from eod_report.services.activity.grouping import group_events
from eod_report.services.activity.types import (
    ActivityBundle,
    ActivityEvent,
    ActivityKind,
    Bucket,
    DateRange,
    GroupingMode,
    ReportConfig,
)

EOD_TEMPLATE = """**EOD {{DATE}}** @{{ORGANIZATION}}

**How did the day go?**
{{TODAY_ACTIVITIES}}

**What's next?**
{{TOMORROW_ACTIVITIES}}"""

DATE_FORMAT = "%d/%m/%Y"
TOKEN_PATTERN = re.compile(r"\{\{([A-Z_]+)\}\}")

# Kinds that belong to the "today" section; assigned issues feed "what's next"
TODAY_KINDS = frozenset(
    {
        ActivityKind.PR_CREATED,
        ActivityKind.PR_MERGED,
        ActivityKind.ISSUE_CREATED,
        ActivityKind.COMMIT_CREATED,
    }
)


def _link(event: ActivityEvent) -> str:
    return f"[{event.repository}#{event.identifier}]({event.url})"


def render_bullet(event: ActivityEvent) -> str:
    """Render one timeline event as a report bullet line."""
    match event.kind:
        case ActivityKind.PR_CREATED:
            verb = "Made PR"
        case ActivityKind.PR_MERGED:
            verb = "Merged PR"
        case ActivityKind.ISSUE_CREATED:
            verb = "Created issue"
        case ActivityKind.COMMIT_CREATED:
            verb = "Committed"
        case ActivityKind.ISSUE_ASSIGNED:
            verb = "Work on issue"
    return f"- {verb} {_link(event)}: {event.title}"


def format_day(day: date) -> str:
    return day.strftime(DATE_FORMAT)


def format_date_range(date_range: DateRange, tz: str = "UTC") -> str:
    """Single date when the range sits inside one calendar day, otherwise ``a - b``."""
    zone = ZoneInfo(tz)
    first = date_range.start.astimezone(zone).date()
    last = date_range.last_instant.astimezone(zone).date()
    if first == last:
        return format_day(first)
    return f"{format_day(first)} - {format_day(last)}"


def _bucket_heading(bucket: Bucket, mode: GroupingMode) -> str:
    if mode is GroupingMode.WEEK:
        return f"**Week of {format_day(bucket.start)} - {format_day(bucket.end)}**"
    return f"**{format_day(bucket.start)}**"


def render_today(events: list[ActivityEvent], config: ReportConfig) -> str:
    """Render the "How did the day go?" section."""
    if config.grouping is GroupingMode.NONE:
        return "\n".join(render_bullet(e) for e in events)

    buckets = group_events(events, config.grouping, config.timezone, config.week_start)
    blocks = [
        _bucket_heading(bucket, config.grouping)
        + "\n"
        + "\n".join(render_bullet(e) for e in bucket.events)
        for bucket in buckets
    ]
    return "\n" + "\n\n".join(blocks)


def render_whats_next(bundle: ActivityBundle, config: ReportConfig) -> str:
    """Render the "What's next?" section from unfinished assigned issues."""
    if ActivityKind.ISSUE_ASSIGNED not in config.include:
        return ""
    unfinished = [issue for issue in bundle.assigned_issues if issue.is_unfinished]
    return "\n".join(render_bullet(issue) for issue in unfinished)


def fill_template(template: str, values: dict[str, str]) -> str:
    """
    Substitute each ``{{TOKEN}}`` once, in a single pass.

    Only the first occurrence of a token is replaced. Tokens without a value
    are left as literal text, and substituted text is never rescanned.
    """
    used: set[str] = set()

    def substitute(match: re.Match[str]) -> str:
        token = match.group(1)
        if token not in values or token in used:
            return match.group(0)
        used.add(token)
        return values[token]

    return TOKEN_PATTERN.sub(substitute, template)


def render_report(
    bundle: ActivityBundle,
    config: ReportConfig,
    template: str = EOD_TEMPLATE,
) -> str:
    """Render the full EOD report for a collected bundle."""
    today = [
        event
        for event in bundle.timeline
        if event.kind in TODAY_KINDS and event.kind in config.include
    ]
    date_text = format_date_range(config.date_range, config.timezone) if config.date_range else ""

    return fill_template(
        template,
        {
            "DATE": date_text,
            "ORGANIZATION": config.organization or "",
            "TODAY_ACTIVITIES": render_today(today, config),
            "TOMORROW_ACTIVITIES": render_whats_next(bundle, config),
        },
    )
