"""Exceptions for activity aggregation and export."""


class ActivityError(Exception):
    """Base error for the activity engine."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ReportValidationError(ActivityError):
    """Report configuration is incomplete. Raised before anything is fetched."""


class UpstreamUnavailable(ActivityError):
    """A single stream or sub-lookup could not be fetched.

    Absorbed by the orchestrator: the affected stream contributes zero
    events and the failure is recorded as a partial-result notice.
    """


class MalformedUpstreamItem(ActivityError):
    """An upstream item has no usable ordering timestamp."""


class ExportInputError(ActivityError):
    """Export input is unusable. Raised before any row is produced."""
