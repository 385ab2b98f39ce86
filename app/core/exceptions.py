"""Domain exceptions."""


class QuickCourtError(Exception):
    """Base class for errors raised by the booking domain."""


class NotFound(QuickCourtError):
    """A referenced record does not exist."""


class PermissionDenied(QuickCourtError):
    """The caller may not act on this record."""


class InvalidStatusTransition(QuickCourtError):
    """A booking status change that the state machine does not allow."""

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot change booking status from {current} to {requested}")


class ReportsDisabled(QuickCourtError):
    """The reports capability is turned off."""

    def __init__(self):
        super().__init__("Reports not supported")
