"""
Repository activity export.

Fetches the requested streams of one repository, applies the state and
date filters, and encodes the projected rows as CSV or JSON.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Literal, Protocol

from eod_report.services.activity.exceptions import ExportInputError, UpstreamUnavailable
from eod_report.services.activity.normalizer import parse_timestamp
from eod_report.services.activity.types import DateRange
from eod_report.services.export.encoders import CSV_MEDIA_TYPE, JSON_MEDIA_TYPE, to_csv, to_json
from eod_report.services.export.projector import to_flat_rows, validate_export_input
from eod_report.services.github.constants import EXPORT_STATES, REPOSITORY_STREAMS

logger = logging.getLogger(__name__)

REPOSITORY_PATTERNS = [
    re.compile(r"github\.com/([^/]+)/([^/?#]+)"),
    re.compile(r"^([^/\s]+)/([^/\s]+)$"),
]

DEFAULT_EXPORT_FIELDS: list[str] = [
    "number",
    "title",
    "type",
    "state",
    "author",
    "created_at",
    "merged_at",
    "labels",
    "assignees",
    "html_url",
]


class RepositoryItemSource(Protocol):
    async def list_repository_items(
        self,
        owner: str,
        repo: str,
        stream: str,
        state: str = "all",
        date_range: DateRange | None = None,
    ) -> list[dict[str, Any]]: ...


@dataclass
class ExportRequest:
    """What to export from one repository."""

    repository: str  # "owner/repo" or a github.com URL
    date_range: DateRange
    activity_types: list[str] = field(default_factory=lambda: ["pull_requests", "issues"])
    state: str = "all"
    format: Literal["csv", "json"] = "csv"
    selected_fields: list[str] = field(default_factory=lambda: list(DEFAULT_EXPORT_FIELDS))


@dataclass
class ExportResult:
    filename: str
    media_type: str
    content: str
    total: int
    notices: list[str] = field(default_factory=list)


def parse_repository(value: str) -> tuple[str, str]:
    """
    Split a repository reference into (owner, repo).

    Accepts ``https://github.com/owner/repo[.git]`` or ``owner/repo``.

    Raises:
        ExportInputError: If the value matches neither form
    """
    value = value.strip()
    for pattern in REPOSITORY_PATTERNS:
        match = pattern.search(value)
        if match:
            return match.group(1), match.group(2).removesuffix(".git")
    raise ExportInputError("Please enter a valid repository URL or owner/repo")


def _item_timestamp(item: dict[str, Any]) -> str | None:
    return item.get("created_at") or ((item.get("commit") or {}).get("author") or {}).get("date")


def filter_items(
    items: list[dict[str, Any]], date_range: DateRange, state: str
) -> list[dict[str, Any]]:
    """Keep items inside the date range; for "merged", keep only merged pull requests."""
    kept = []
    for item in items:
        moment = parse_timestamp(_item_timestamp(item))
        if moment is None or not date_range.contains(moment):
            continue
        is_merged_pr = item.get("type") == "pull_requests" and bool(item.get("merged_at"))
        if state == "merged" and not is_merged_pr:
            continue
        kept.append(item)
    return kept


async def collect_repository_items(
    source: RepositoryItemSource,
    owner: str,
    repo: str,
    request: ExportRequest,
    notices: list[str],
) -> list[dict[str, Any]]:
    """Fetch every requested stream; a failing stream is skipped."""
    items: list[dict[str, Any]] = []
    for stream in request.activity_types:
        try:
            raw = await source.list_repository_items(
                owner, repo, stream, request.state, request.date_range
            )
        except UpstreamUnavailable as e:
            logger.warning(f"Error fetching {stream} for {owner}/{repo}: {e.message}")
            notices.append(f"Failed to fetch {stream}: {e.message}")
            continue
        items.extend({**item, "type": stream} for item in raw)
    return filter_items(items, request.date_range, request.state)


async def export_repository_activity(
    request: ExportRequest, source: RepositoryItemSource
) -> ExportResult:
    """
    Export one repository's activity as a downloadable file.

    Raises:
        ExportInputError: For an invalid repository, stream, state or field list
    """
    owner, repo = parse_repository(request.repository)
    unknown_streams = [s for s in request.activity_types if s not in REPOSITORY_STREAMS]
    if unknown_streams:
        raise ExportInputError(f"Unknown activity types: {', '.join(unknown_streams)}")
    if request.state not in EXPORT_STATES:
        raise ExportInputError(f"Unknown state: {request.state}")
    validate_export_input([], request.selected_fields)

    notices: list[str] = []
    items = await collect_repository_items(source, owner, repo, request, notices)
    rows = to_flat_rows(items, request.selected_fields)

    start = request.date_range.start.date().isoformat()
    end = request.date_range.last_instant.date().isoformat()
    filename = f"{owner}-{repo}-activity-{start}-to-{end}"

    if request.format == "json":
        content, media_type, filename = to_json(rows), JSON_MEDIA_TYPE, f"{filename}.json"
    else:
        content = to_csv(rows, request.selected_fields)
        media_type, filename = CSV_MEDIA_TYPE, f"{filename}.csv"

    logger.info(f"Exported {len(rows)} items from {owner}/{repo}")
    return ExportResult(
        filename=filename, media_type=media_type, content=content, total=len(rows), notices=notices
    )
