"""Merging of normalized streams into one chronological timeline."""

from collections.abc import Iterable

from eod_report.services.activity.types import ActivityEvent


def merge_timeline(*streams: Iterable[ActivityEvent]) -> tuple[ActivityEvent, ...]:
    """
    Concatenate streams and order them newest first by ordering timestamp.

    ``sorted`` is stable, so events with equal timestamps keep their
    concatenation order.
    """
    concatenated = [event for stream in streams for event in stream]
    return tuple(sorted(concatenated, key=lambda e: e.ordering_timestamp, reverse=True))
