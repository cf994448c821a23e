"""
Domain layer - Pure business logic without external dependencies.
"""

from .exceptions import AuthenticationError, CalendarAPIError, EventParseError, FreetimeError
from .models import BusyEvent, CalendarInfo, TimeRange, WorkingHours
from .slot_calculator import SlotCalculator

__all__ = [
    "AuthenticationError",
    "BusyEvent",
    "CalendarAPIError",
    "CalendarInfo",
    "EventParseError",
    "FreetimeError",
    "SlotCalculator",
    "TimeRange",
    "WorkingHours",
]
