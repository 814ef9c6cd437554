"""Serialization of flat export rows to CSV and JSON."""

import csv
import io
import json
from collections.abc import Mapping, Sequence

from eod_report.services.export.projector import ROW_INDEX_FIELD

CSV_MEDIA_TYPE = "text/csv"
JSON_MEDIA_TYPE = "application/json"


def to_csv(rows: Sequence[Mapping[str, str]], header_order: Sequence[str]) -> str:
    """
    Encode rows as CSV.

    The header is ``slno`` followed by ``header_order``. Every data value is
    double-quoted with embedded quotes doubled, whether or not quoting is
    needed. Lines are joined with ``\\n``. No rows means an empty string.
    """
    if not rows:
        return ""

    columns = [ROW_INDEX_FIELD, *(name for name in header_order if name != ROW_INDEX_FIELD)]
    buffer = io.StringIO()
    header = csv.writer(buffer, lineterminator="\n")
    header.writerow(columns)
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for row in rows:
        writer.writerow("" if row.get(name) is None else row[name] for name in columns)
    return buffer.getvalue().removesuffix("\n")


def to_json(rows: Sequence[Mapping[str, str]]) -> str:
    """Serialize rows as an indented JSON array."""
    return json.dumps(list(rows), indent=2)
