from eod_report.api.v1 import exports, reports, users

__all__ = [
    "exports",
    "reports",
    "users",
]
