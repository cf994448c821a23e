"""
Domain-specific exception hierarchy for the free time finder.
"""


class FreetimeError(Exception):
    """Base class for all application-level errors."""


class CalendarAPIError(FreetimeError):
    """Raised when calendars or events cannot be fetched."""


class AuthenticationError(FreetimeError):
    """Raised when authentication or token handling fails."""


class EventParseError(FreetimeError):
    """Raised when an event carries a timestamp that is not RFC 3339."""
