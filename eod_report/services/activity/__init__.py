"""
Activity aggregation and report synthesis.

Usage: `from eod_report.services.activity import ReportConfig, synthesize`

Module structure:
- orchestrator.py: collect_activity() / synthesize() entry points
- normalizer.py: raw upstream items -> ActivityEvent
- deduplicator.py: assignment resolution, issue linking, commit dedup
- timeline.py: merge and stable sort
- grouping.py: day / week buckets
- template.py: bullet lines and EOD template substitution
- types.py: data types
- exceptions.py: error taxonomy
"""

from eod_report.services.activity.exceptions import (
    ActivityError,
    ExportInputError,
    MalformedUpstreamItem,
    ReportValidationError,
    UpstreamUnavailable,
)
from eod_report.services.activity.fetcher import ActivityFetcher
from eod_report.services.activity.grouping import group_events
from eod_report.services.activity.orchestrator import collect_activity, synthesize
from eod_report.services.activity.template import EOD_TEMPLATE, render_report
from eod_report.services.activity.timeline import merge_timeline
from eod_report.services.activity.types import (
    ActivityBundle,
    ActivityEvent,
    ActivityKind,
    ActivityScope,
    Bucket,
    DateRange,
    GroupingMode,
    ItemState,
    PullRequestRef,
    ReportConfig,
)

__all__ = [
    # Entry points
    "collect_activity",
    "synthesize",
    "render_report",
    "merge_timeline",
    "group_events",
    "EOD_TEMPLATE",
    # Fetcher boundary
    "ActivityFetcher",
    # Exceptions
    "ActivityError",
    "ExportInputError",
    "MalformedUpstreamItem",
    "ReportValidationError",
    "UpstreamUnavailable",
    # Types
    "ActivityBundle",
    "ActivityEvent",
    "ActivityKind",
    "ActivityScope",
    "Bucket",
    "DateRange",
    "GroupingMode",
    "ItemState",
    "PullRequestRef",
    "ReportConfig",
]
