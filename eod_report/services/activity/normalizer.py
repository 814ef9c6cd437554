"""
Normalization of raw upstream items into timeline events.

Each raw search item is tagged with the stream it came from and reduced to
the fields the timeline and report need. Items without a parseable
ordering timestamp are dropped, never defaulted.
"""

import logging
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

from eod_report.services.activity.exceptions import MalformedUpstreamItem
from eod_report.services.activity.types import (
    PULL_REQUEST_KINDS,
    ActivityEvent,
    ActivityKind,
    ItemState,
    PullRequestRef,
)

logger = logging.getLogger(__name__)

SHORT_SHA_LENGTH = 7


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO 8601 timestamp. Naive values are taken as UTC."""
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def repository_name_from_url(url: str | None) -> str:
    """
    Extract the repository name from a GitHub URL.

    Handles both API URLs (``https://api.github.com/repos/{owner}/{repo}/...``)
    and HTML URLs (``https://github.com/{owner}/{repo}/...``).
    """
    if not url:
        return ""
    parts = url.split("/")
    for marker in ("repos", "github.com"):
        if marker in parts:
            index = parts.index(marker)
            if len(parts) > index + 2:
                return parts[index + 2]
    return ""


def first_line(text: str | None) -> str:
    if not text:
        return ""
    return text.split("\n", 1)[0]


def _state(raw: dict[str, Any]) -> ItemState | None:
    try:
        return ItemState(raw.get("state"))
    except ValueError:
        return None


def _merged_at(raw: dict[str, Any]) -> datetime | None:
    # Search results nest the merge timestamp under "pull_request"
    value = raw.get("merged_at") or (raw.get("pull_request") or {}).get("merged_at")
    return parse_timestamp(value)


def to_pull_request_ref(raw: dict[str, Any]) -> PullRequestRef | None:
    node_id = raw.get("node_id")
    if not node_id:
        return None
    return PullRequestRef(node_id=node_id, number=raw.get("number"), url=raw.get("html_url"))


def _normalize_commit(raw: dict[str, Any]) -> ActivityEvent:
    commit = raw.get("commit") or {}
    created_at = parse_timestamp((commit.get("committer") or {}).get("date")) or parse_timestamp(
        (commit.get("author") or {}).get("date")
    )
    if created_at is None:
        raise MalformedUpstreamItem(f"Commit {raw.get('sha')!r} has no commit date")

    return ActivityEvent(
        kind=ActivityKind.COMMIT_CREATED,
        identifier=(raw.get("sha") or "")[:SHORT_SHA_LENGTH],
        title=first_line(commit.get("message")),
        repository=repository_name_from_url(raw.get("html_url") or raw.get("url")),
        url=raw.get("html_url") or "",
        created_at=created_at,
        node_id=raw.get("node_id"),
        api_url=raw.get("url"),
    )


def normalize_item(raw: dict[str, Any], kind: ActivityKind) -> ActivityEvent:
    """
    Convert one raw upstream item into an ActivityEvent of the given kind.

    Raises:
        MalformedUpstreamItem: If the item has no usable ordering timestamp
    """
    if kind is ActivityKind.COMMIT_CREATED:
        return _normalize_commit(raw)

    created_at = parse_timestamp(raw.get("created_at"))
    if created_at is None:
        raise MalformedUpstreamItem(f"Item {raw.get('html_url')!r} has no created_at")

    merged_at = _merged_at(raw) if kind in PULL_REQUEST_KINDS else None
    if kind is ActivityKind.PR_MERGED and merged_at is None:
        raise MalformedUpstreamItem(f"Pull request {raw.get('html_url')!r} was never merged")

    number = raw.get("number")
    return ActivityEvent(
        kind=kind,
        identifier="" if number is None else str(number),
        title=raw.get("title") or "",
        repository=repository_name_from_url(raw.get("html_url") or raw.get("url")),
        url=raw.get("html_url") or "",
        created_at=created_at,
        merged_at=merged_at,
        state=_state(raw),
        node_id=raw.get("node_id"),
        api_url=raw.get("url"),
        events_url=raw.get("events_url"),
    )


def normalize_stream(items: Iterable[dict[str, Any]], kind: ActivityKind) -> list[ActivityEvent]:
    """Normalize a whole stream, silently dropping malformed items."""
    events: list[ActivityEvent] = []
    for raw in items:
        try:
            events.append(normalize_item(raw, kind))
        except MalformedUpstreamItem as e:
            logger.debug(f"Dropping {kind.value} item: {e.message}")
    return events
