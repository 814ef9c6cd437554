# Services package

from eod_report.services.activity import ReportConfig, collect_activity, synthesize
from eod_report.services.export import export_repository_activity, to_csv, to_flat_rows, to_json
from eod_report.services.github import GitHubActivityFetcher

__all__ = [
    # Report synthesis
    "ReportConfig",
    "collect_activity",
    "synthesize",
    # Export
    "export_repository_activity",
    "to_csv",
    "to_flat_rows",
    "to_json",
    # Upstream
    "GitHubActivityFetcher",
]
