"""Error kinds raised by the service layer.

Routers let these propagate; ``main.py`` maps each kind to an HTTP status.
"""


class ExpenseTrackerError(Exception):
    """Base class for all service-layer errors."""

    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(ExpenseTrackerError):
    """Entity does not exist or belongs to another user."""

    status_code = 404


class InvalidArgumentError(ExpenseTrackerError):
    """Request failed validation (non-positive amount, empty field, bad date)."""

    status_code = 400


class ConflictError(ExpenseTrackerError):
    """Reserved; nothing raises it today."""

    status_code = 409


class StoreUnavailableError(ExpenseTrackerError):
    """The database is not open or could not be reached."""

    status_code = 503
