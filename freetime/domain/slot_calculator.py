"""
Core business logic for calculating free time.

This is the heart of the application - pure domain logic without any
external dependencies (no API calls, no database, no I/O).
"""

import logging
from functools import reduce
from typing import Iterable, List

import pendulum
from pendulum import DateTime

from .models import BusyEvent, TimeRange, WorkingHours

logger = logging.getLogger(__name__)


class SlotCalculator:
    """
    Calculates free time ranges from workdays and busy events.

    Algorithm:
    1. Seed one working-hours range per lookahead day, clipped to now
    2. Subtract every busy event from every free range
    3. Clip to now again and drop ranges shorter than the minimum duration
    """

    def __init__(self, working_hours: WorkingHours):
        self.working_hours = working_hours

    def seed_workdays(self, now: DateTime, lookahead_days: int) -> List[TimeRange]:
        """
        Build the initial free ranges, one per lookahead day.

        Each range is the next workday at or after ``now + i days``,
        clipped so it does not start before ``now``. Seeds are neither
        merged nor de-duplicated.
        """
        now = pendulum.instance(now)
        seeds: List[TimeRange] = []

        for offset in range(lookahead_days):
            day = self.working_hours.next_work_day(now.add(days=offset))
            seeds.append(day.after(now))

        return seeds

    def subtract_events(
        self,
        free_ranges: List[TimeRange],
        events: Iterable[BusyEvent]
    ) -> List[TimeRange]:
        """
        Subtract busy events from the free ranges.

        All-day events never block time and are skipped. Every other event
        is split out of every range; ranges it does not touch pass through
        unchanged.

        Raises:
            EventParseError: If an event timestamp cannot be parsed
        """
        tz = self.working_hours.tzinfo()

        def subtract(ranges: List[TimeRange], event: BusyEvent) -> List[TimeRange]:
            if event.is_all_day:
                logger.debug("Ignoring all-day event '%s'", event.summary)
                return ranges

            busy = event.to_time_range(tz)
            return [
                piece
                for free in ranges
                for piece in free.split(busy.start, busy.end)
            ]

        return reduce(subtract, events, list(free_ranges))

    def filter_by_duration(
        self,
        ranges: Iterable[TimeRange],
        min_duration_minutes: int = 30
    ) -> List[TimeRange]:
        """Keep ranges lasting at least ``min_duration_minutes``, in order."""
        return [
            tr for tr in ranges
            if tr.duration_minutes() >= min_duration_minutes
        ]

    def post_process(
        self,
        ranges: Iterable[TimeRange],
        now: DateTime,
        min_duration_minutes: int = 30
    ) -> List[TimeRange]:
        """Clip the ranges to ``now`` and apply the minimum-duration filter."""
        clipped = [tr.after(now) for tr in ranges]
        return self.filter_by_duration(clipped, min_duration_minutes)
