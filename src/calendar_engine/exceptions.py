"""Errors raised by the calendar engine."""


class ValidationError(ValueError):
    """
    Raised when a recurrence rule, window, or event payload is malformed.

    Always raised before any expansion work starts, so callers can block
    the triggering action instead of rendering a coerced result.
    """
