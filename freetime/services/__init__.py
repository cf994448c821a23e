"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .free_time_finder import CalendarClientProtocol, FreeTimeService

__all__ = ["CalendarClientProtocol", "FreeTimeService"]
