"""Exception types shared across the client."""


class LeetTrackerError(Exception):
    """Base class for all client errors."""


class InvalidTransition(LeetTrackerError):
    """Raised when a review status cannot move in the requested direction."""

    def __init__(self, status, message: str = ""):
        self.status = status
        super().__init__(message or f"Cannot advance a problem in status {status.label}")


class ApiError(LeetTrackerError):
    """Non-2xx response or transport failure talking to the problems API."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class ValidationError(LeetTrackerError):
    """Client-side form errors, keyed by field name."""

    def __init__(self, errors: dict[str, str]):
        self.errors = errors
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))
