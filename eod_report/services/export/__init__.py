"""Tabular export pipeline: field projection, CSV/JSON encoding, repository export."""

from eod_report.services.export.encoders import to_csv, to_json
from eod_report.services.export.projector import FIELD_ALLOW_LIST, ExportRow, to_flat_rows
from eod_report.services.export.repository_activity import (
    ExportRequest,
    ExportResult,
    export_repository_activity,
    parse_repository,
)

__all__ = [
    "FIELD_ALLOW_LIST",
    "ExportRow",
    "to_flat_rows",
    "to_csv",
    "to_json",
    "ExportRequest",
    "ExportResult",
    "export_repository_activity",
    "parse_repository",
]
