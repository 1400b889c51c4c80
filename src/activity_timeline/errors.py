"""Error taxonomy for the activity timeline engine."""


class TimelineError(Exception):
    """Base class for all timeline errors."""


class ValidationError(TimelineError, ValueError):
    """Raised for malformed input such as empty content or an invalid date."""


class NotFoundError(TimelineError, LookupError):
    """Raised when a log or comment reference does not exist."""
