class BookingFlowError(RuntimeError):
    """Base class for recoverable booking and search errors."""
    pass


class ValidationError(BookingFlowError):
    """Raised when a step's required fields are missing or malformed."""

    def __init__(self, message: str, step: str | None = None, field: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.step = step
        self.field = field


class NetworkError(BookingFlowError):
    """Raised when a backend call fails (transport error or error status)."""

    def __init__(self, message: str, code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class NotFoundError(BookingFlowError):
    """Raised when a booking, provider, step or session id does not resolve."""
    pass


class SubmissionInProgressError(BookingFlowError):
    """Raised when a submission is started while another is still in flight."""
    pass
