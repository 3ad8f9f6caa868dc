"""Reports domain — business exceptions.

TargetNotFoundError and ContentDeletionFailedError are shared with the
moderation domain and live in app.moderation.exceptions.
"""


class SelfReportError(Exception):
    """Reporter owns the reported item."""


class DuplicateReportError(Exception):
    """Reporter already filed a report against this item."""


class ReportNotFoundError(Exception):
    pass


class ReportAlreadyProcessedError(Exception):
    """Report is in a terminal state."""


class InvalidStatusTransitionError(Exception):
    """Requested status is not reachable from the report's current status."""
