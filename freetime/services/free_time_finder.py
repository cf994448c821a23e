"""
Application services for finding free time.

The service coordinates fetching busy events via a calendar client adapter
and delegates the interval arithmetic to the domain-level ``SlotCalculator``.
The calendar dependency is a simple protocol, so the Google adapter, the
mock adapter and test stubs are interchangeable.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Protocol, Sequence

import pendulum
from pendulum import DateTime

from ..domain.models import BusyEvent, CalendarInfo, TimeRange
from ..domain.slot_calculator import SlotCalculator

logger = logging.getLogger(__name__)


class CalendarClientProtocol(Protocol):
    """Protocol describing the calendar client behaviour needed by the service."""

    def list_calendars(self) -> List[CalendarInfo]:
        """Return every calendar visible to the user."""

    def list_events(self, calendar_id: str, window: TimeRange) -> List[BusyEvent]:
        """Return the events of one calendar intersecting ``window``."""


class FreeTimeService:
    """
    Orchestrates calendar resolution, event retrieval and free time calculation.

    Any error raised by the calendar client or while parsing events
    propagates unchanged; no partial result is ever returned.
    """

    def __init__(
        self,
        calendar_client: CalendarClientProtocol,
        slot_calculator: SlotCalculator,
    ) -> None:
        self._calendar_client = calendar_client
        self._slot_calculator = slot_calculator

    def find_slots(
        self,
        *,
        now: DateTime,
        busy_calendars: Sequence[str],
        lookahead_days: int = 3,
        min_duration_minutes: int = 30,
    ) -> List[TimeRange]:
        """
        Resolve the busy calendars, compute free ranges and filter them.
        """
        now = pendulum.instance(now)
        calendar_ids = self.resolve_busy_calendars(busy_calendars)

        free_ranges = self.compute_free_ranges(
            lookahead_days=lookahead_days,
            now=now,
            busy_calendar_ids=calendar_ids,
        )

        return self._slot_calculator.post_process(
            free_ranges,
            now=now,
            min_duration_minutes=min_duration_minutes,
        )

    def resolve_busy_calendars(self, names: Iterable[str]) -> List[str]:
        """
        Map calendar display names to calendar IDs.

        Names are matched case-sensitively; calendars not listed in
        ``names`` are ignored.
        """
        wanted = set(names)
        calendar_ids: List[str] = []

        for calendar in self._calendar_client.list_calendars():
            if calendar.summary in wanted:
                logger.info("Blocking with calendar: %s", calendar.summary)
                calendar_ids.append(calendar.id)

        return calendar_ids

    def compute_free_ranges(
        self,
        *,
        lookahead_days: int,
        now: DateTime,
        busy_calendar_ids: Sequence[str],
    ) -> List[TimeRange]:
        """
        Seed the workdays and subtract every busy event from them.

        Events from all days and calendars are collected into one list and
        tested against every free range.
        """
        days = self._slot_calculator.seed_workdays(pendulum.instance(now), lookahead_days)
        busy_events = self.fetch_busy_events(busy_calendar_ids, days)

        return self._slot_calculator.subtract_events(days, busy_events)

    def fetch_busy_events(
        self,
        calendar_ids: Sequence[str],
        days: Sequence[TimeRange],
    ) -> List[BusyEvent]:
        """Fetch the events of every busy calendar for every day window."""
        events: List[BusyEvent] = []

        for day in days:
            for calendar_id in calendar_ids:
                for event in self._calendar_client.list_events(calendar_id, day):
                    logger.info("Blocked by %s", event.summary)
                    events.append(event)

        return events
