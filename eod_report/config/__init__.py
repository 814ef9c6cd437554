"""Configuration package."""

from eod_report.config.settings import Settings, settings

__all__ = [
    "Settings",
    "settings",
]
