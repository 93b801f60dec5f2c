"""Fault hierarchy for hrdesk.

Business-rule violations are never raised; validators return them as values
(see ``hrdesk.rules.errors``). The classes here cover infrastructure problems
and misuse of the approval workflow.
"""


class HRDeskError(Exception):
    """Base class for exceptions in this package."""
    pass


class InvalidInputError(HRDeskError):
    """Raised when a validator receives a value of the wrong type."""
    pass


class DatabaseOperationError(HRDeskError):
    """Raised for errors during database operations."""
    pass


class RequestNotFoundError(HRDeskError):
    """Raised when a leave or overtime request id does not exist."""
    pass


class InvalidStateError(HRDeskError):
    """Raised when a request cannot move to the asked-for status."""
    pass


class InsufficientBalanceError(HRDeskError):
    """Raised when a balance no longer covers a request at approval time."""

    def __init__(self, requested: int, available: float):
        super().__init__(
            f"Insufficient leave balance at approval time "
            f"(requested {requested}, available {available})"
        )
        self.requested = requested
        self.available = available
