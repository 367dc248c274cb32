"""Exceptions raised by the survey scoring engine."""


class ScoringError(Exception):
    """Base class for scoring engine errors."""
    pass


class ConfigurationError(ScoringError, ValueError):
    """Raised when a survey definition is missing required fields or is malformed."""
    pass


class ResultCalculationError(ConfigurationError):
    """Raised by the result assembler when a submission cannot be scored.

    The message is generic on purpose; the underlying cause is chained and
    logged server-side.
    """

    def __init__(self, message: str = "Failed to calculate results"):
        super().__init__(message)
