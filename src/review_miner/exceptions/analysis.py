"""Analysis-related exceptions: input shape and precondition violations."""

from .base import ReviewMinerError


class AnalysisError(ReviewMinerError):
    """Base class for analysis-related errors."""

    pass


class InvalidDateError(AnalysisError, ValueError):
    """Raised when a date is not a fixed-width ISO ``YYYY-MM-DD`` day.

    Date ordering in the analyzers relies on plain string comparison, which
    is only correct for zero-padded ISO days.
    """

    def __init__(self, value: object, context: str = "date"):
        super().__init__(
            f"Invalid {context}: {value!r}",
            details={"value": str(value), "expected": "YYYY-MM-DD"},
        )
        self.value = value
        self.context = context
