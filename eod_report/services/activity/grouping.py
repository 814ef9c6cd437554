"""Calendar bucketing of timeline events for report rendering."""

from collections.abc import Iterable
from datetime import date, timedelta
from zoneinfo import ZoneInfo

from eod_report.services.activity.types import ActivityEvent, Bucket, GroupingMode


def local_day(event: ActivityEvent, tz: str = "UTC") -> date:
    """Calendar day of the event's ordering timestamp in ``tz``."""
    return event.ordering_timestamp.astimezone(ZoneInfo(tz)).date()


def week_bounds(day: date, week_start: int = 0) -> tuple[date, date]:
    """First and last day of the week containing ``day``."""
    start = day - timedelta(days=(day.weekday() - week_start) % 7)
    return start, start + timedelta(days=6)


def group_events(
    events: Iterable[ActivityEvent],
    mode: GroupingMode,
    tz: str = "UTC",
    week_start: int = 0,
) -> list[Bucket]:
    """
    Bucket events by day or week of their ordering timestamp.

    Only non-empty buckets are returned, oldest first. Inside a bucket the
    events keep their input order. ``GroupingMode.NONE`` yields a single
    bucket spanning every event.
    """
    events = list(events)
    if not events:
        return []

    keyed: dict[tuple[date, date], list[ActivityEvent]] = {}
    for event in events:
        day = local_day(event, tz)
        if mode is GroupingMode.WEEK:
            key = week_bounds(day, week_start)
        elif mode is GroupingMode.DAY:
            key = (day, day)
        else:
            key = (date.min, date.max)
        keyed.setdefault(key, []).append(event)

    if mode is GroupingMode.NONE:
        days = [local_day(e, tz) for e in events]
        return [Bucket(start=min(days), end=max(days), events=tuple(events))]

    return [
        Bucket(start=start, end=end, events=tuple(bucket_events))
        for (start, end), bucket_events in sorted(keyed.items())
    ]


def flatten(buckets: Iterable[Bucket]) -> list[ActivityEvent]:
    return [event for bucket in buckets for event in bucket.events]
