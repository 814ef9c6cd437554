"""
Field projection of raw activity records into flat export rows.

Every row starts with a 1-based ``slno`` column followed by the requested
fields, in the caller's order. Values are pulled through small per-field
fallback chains so pull requests, issues and commits share one column set.
Missing values become empty strings.
"""

from collections.abc import Callable, Mapping, Sequence
from typing import Any

from eod_report.services.activity.exceptions import ExportInputError
from eod_report.services.activity.normalizer import SHORT_SHA_LENGTH, first_line

ROW_INDEX_FIELD = "slno"

ExportRow = dict[str, str]


def _text(value: Any) -> str:
    if value is None or value is False:
        return ""
    return str(value)


def _dig(record: Mapping[str, Any], *path: str) -> Any:
    """Follow nested keys, returning None as soon as one is missing."""
    current: Any = record
    for key in path:
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
    return current


def _first(*values: Any) -> str:
    for value in values:
        if value not in (None, ""):
            return _text(value)
    return ""


def _joined(items: Any, key: str) -> str:
    if not isinstance(items, Sequence) or isinstance(items, str):
        return ""
    return ", ".join(_text(item.get(key)) for item in items if isinstance(item, Mapping))


def _number(record: Mapping[str, Any]) -> str:
    sha = record.get("sha")
    return _first(record.get("number"), sha[:SHORT_SHA_LENGTH] if isinstance(sha, str) else None)


def _state(record: Mapping[str, Any]) -> str:
    if record.get("merged_at"):
        return "merged"
    return _text(record.get("state"))


FIELD_EXTRACTORS: dict[str, Callable[[Mapping[str, Any]], str]] = {
    "number": _number,
    "title": lambda r: _first(r.get("title"), first_line(_dig(r, "commit", "message"))),
    "type": lambda r: _text(r.get("type")),
    "state": _state,
    "author": lambda r: _first(
        _dig(r, "user", "login"), _dig(r, "author", "login"), _dig(r, "commit", "author", "name")
    ),
    "created_at": lambda r: _first(r.get("created_at"), _dig(r, "commit", "author", "date")),
    "merged_at": lambda r: _text(r.get("merged_at")),
    "labels": lambda r: _joined(r.get("labels"), "name"),
    "assignees": lambda r: _joined(r.get("assignees"), "login"),
    "html_url": lambda r: _text(r.get("html_url")),
}

# Columns the export pipeline will ever emit, besides slno
FIELD_ALLOW_LIST: tuple[str, ...] = tuple(FIELD_EXTRACTORS)


def validate_export_input(records: Any, selected_fields: Sequence[str]) -> None:
    """
    Reject unusable export input before any row is produced.

    Raises:
        ExportInputError: If records is not a sequence of mappings or a field
            is not in the allow-list
    """
    if not isinstance(records, (list, tuple)):
        raise ExportInputError("Records must be a list of items")
    if not all(isinstance(record, Mapping) for record in records):
        raise ExportInputError("Every record must be a mapping")
    unknown = [name for name in selected_fields if name not in FIELD_EXTRACTORS]
    if unknown:
        raise ExportInputError(f"Unknown export fields: {', '.join(unknown)}")


def to_flat_rows(
    records: Sequence[Mapping[str, Any]], selected_fields: Sequence[str]
) -> list[ExportRow]:
    """
    Project records onto ``slno`` plus the selected fields.

    Example:
        >>> to_flat_rows([{"title": "x", "labels": [{"name": "a"}, {"name": "b"}]}],
        ...              ["title", "labels"])
        [{'slno': '1', 'title': 'x', 'labels': 'a, b'}]
    """
    validate_export_input(records, selected_fields)
    rows: list[ExportRow] = []
    for index, record in enumerate(records, start=1):
        row: ExportRow = {ROW_INDEX_FIELD: str(index)}
        for name in selected_fields:
            row[name] = FIELD_EXTRACTORS[name](record)
        rows.append(row)
    return rows
