"""Data types for activity aggregation and report synthesis."""

from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time, timedelta
from enum import Enum
from zoneinfo import ZoneInfo


class ActivityKind(str, Enum):
    """Stream a timeline event came from."""

    ISSUE_CREATED = "issue-created"
    ISSUE_ASSIGNED = "issue-assigned"
    PR_CREATED = "pr-created"
    PR_MERGED = "pr-merged"
    COMMIT_CREATED = "commit-created"


# Fetch and concatenation order of the streams in one collection cycle
STREAM_ORDER: tuple[ActivityKind, ...] = (
    ActivityKind.ISSUE_CREATED,
    ActivityKind.PR_CREATED,
    ActivityKind.PR_MERGED,
    ActivityKind.ISSUE_ASSIGNED,
    ActivityKind.COMMIT_CREATED,
)

PULL_REQUEST_KINDS = frozenset({ActivityKind.PR_CREATED, ActivityKind.PR_MERGED})


class ItemState(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class GroupingMode(str, Enum):
    """How the "today" section of a report is bucketed."""

    NONE = "none"
    DAY = "day"
    WEEK = "week"

    @classmethod
    def resolve(cls, by_day: bool, by_week: bool) -> "GroupingMode":
        """Map the two grouping toggles to a mode. Week grouping wins."""
        if by_week:
            return cls.WEEK
        if by_day:
            return cls.DAY
        return cls.NONE


@dataclass(frozen=True)
class PullRequestRef:
    """A pull request linked to a commit or an issue."""

    node_id: str
    number: int | None = None
    url: str | None = None


@dataclass(frozen=True)
class ActivityEvent:
    """One unit of user activity on the merged timeline."""

    kind: ActivityKind
    identifier: str  # issue/PR number, or commit short hash
    title: str
    repository: str  # repository name taken from the item URL
    url: str
    created_at: datetime
    merged_at: datetime | None = None
    assigned_at: datetime | None = None
    state: ItemState | None = None  # None for commits
    node_id: str | None = None
    api_url: str | None = None  # commit API URL, or issue URL for sub-lookups
    events_url: str | None = None
    linked_pull_requests: tuple[PullRequestRef, ...] = ()

    @property
    def ordering_timestamp(self) -> datetime:
        """Timestamp placing this event on the timeline: merged > assigned > created."""
        return self.merged_at or self.assigned_at or self.created_at

    @property
    def is_unfinished(self) -> bool:
        """True for an open issue that no pull request is linked to yet."""
        return self.state is ItemState.OPEN and not self.linked_pull_requests


@dataclass(frozen=True)
class DateRange:
    """Half-open interval ``[start, end)`` of timezone-aware datetimes."""

    start: datetime
    end: datetime

    @classmethod
    def from_dates(cls, first_day: date, last_day: date, tz: str = "UTC") -> "DateRange":
        """Range covering whole calendar days, ``last_day`` included."""
        zone = ZoneInfo(tz)
        start = datetime.combine(first_day, time.min, tzinfo=zone)
        end = datetime.combine(last_day + timedelta(days=1), time.min, tzinfo=zone)
        return cls(start=start, end=end)

    @property
    def last_instant(self) -> datetime:
        return self.end - timedelta(microseconds=1)

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end

    def to_search_qualifier(self) -> str:
        """Render as a GitHub search range: ``start..end-1s`` in UTC."""
        fmt = "%Y-%m-%dT%H:%M:%SZ"
        first = self.start.astimezone(UTC).strftime(fmt)
        last = (self.end - timedelta(seconds=1)).astimezone(UTC).strftime(fmt)
        return f"{first}..{last}"


@dataclass(frozen=True)
class ActivityScope:
    """Whose activity to collect, optionally restricted to one organization."""

    username: str
    organization: str | None = None


@dataclass
class ReportConfig:
    """Explicit configuration for one report synthesis cycle."""

    username: str | None
    date_range: DateRange | None
    organization: str | None = None
    include: frozenset[ActivityKind] = frozenset(ActivityKind)
    grouping: GroupingMode = GroupingMode.NONE
    timezone: str = "UTC"
    week_start: int = 0  # 0 = Monday ... 6 = Sunday
    max_concurrent_lookups: int = 1

    @property
    def scope(self) -> ActivityScope:
        return ActivityScope(username=self.username or "", organization=self.organization)


@dataclass
class ActivityBundle:
    """Everything one collection cycle produced."""

    timeline: tuple[ActivityEvent, ...]
    assigned_issues: tuple[ActivityEvent, ...]
    notices: list[str] = field(default_factory=list)  # partial-result messages

    def events_of(self, kind: ActivityKind) -> list[ActivityEvent]:
        return [event for event in self.timeline if event.kind is kind]


@dataclass(frozen=True)
class Bucket:
    """A day or week of timeline events."""

    start: date
    end: date  # inclusive
    events: tuple[ActivityEvent, ...]
