"""
Domain models for time range and workday calculations.
"""

import re
from dataclasses import dataclass, field
from datetime import time, timedelta
from typing import List

import pendulum
from pendulum import DateTime

from .exceptions import EventParseError

RFC3339_PATTERN = re.compile(
    r"\d{4}-\d{2}-\d{2}[Tt]\d{2}:\d{2}:\d{2}(\.\d+)?([Zz]|[+-]\d{2}:\d{2})"
)


@dataclass(frozen=True, order=True)
class TimeRange:
    """
    Represents an immutable time range with start and end datetime.

    Invariant: end is never before start. A zero-length range marks a
    fully consumed period.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.end < self.start:
            raise ValueError(f"End time {self.end} must not be before start time {self.start}")

    def duration(self) -> timedelta:
        """Return the length of the range."""
        return self.end - self.start

    def duration_minutes(self) -> int:
        """Return the duration in whole minutes."""
        return int(self.duration().total_seconds() / 60)

    def overlaps(self, other: "TimeRange") -> bool:
        """Check if this range overlaps with another. Touching ranges do not overlap."""
        return self.start < other.end and self.end > other.start

    def contains(self, instant: DateTime) -> bool:
        """Check if an instant lies within the range, endpoints included."""
        return self.start <= instant <= self.end

    def split(self, split_start: DateTime, split_end: DateTime) -> List["TimeRange"]:
        """
        Subtract ``[split_start, split_end)`` from this range.

        Returns zero, one or two ranges: the part left of the splitter
        followed by the part right of it. A disjoint splitter returns the
        range unchanged, a covering one returns an empty list.

        Example:
        Range: 10:00 - 18:00
        Splitter: 12:00 - 13:00
        Result: [10:00-12:00, 13:00-18:00]
        """
        if split_end < split_start:
            raise ValueError(f"Splitter end {split_end} is before its start {split_start}")

        if self.end <= split_start or self.start >= split_end:
            return [self]

        pieces: List[TimeRange] = []

        if self.start < split_start < self.end:
            pieces.append(TimeRange(start=self.start, end=split_start))

        if self.start < split_end < self.end:
            pieces.append(TimeRange(start=split_end, end=self.end))

        return pieces

    def after(self, instant: DateTime) -> "TimeRange":
        """
        Clip the range so it does not start before ``instant``.

        An instant past the end yields a zero-length range anchored at the end.
        """
        if instant > self.end:
            return TimeRange(start=self.end, end=self.end)

        if instant < self.start:
            return self

        return TimeRange(start=instant, end=self.end)

    def __str__(self) -> str:
        return f"{self.start.format('ddd DD.MM.YYYY HH:mm')} - {self.end.format('HH:mm')}"


@dataclass(frozen=True)
class CalendarInfo:
    """A calendar as listed by the provider."""
    id: str
    summary: str


@dataclass(frozen=True)
class BusyEvent:
    """
    A calendar entry that may block free time.

    ``start`` and ``end`` are kept as the RFC 3339 strings the provider
    returned; they are only parsed when the event is subtracted. An empty
    ``start`` marks an all-day event.
    """
    start: str
    end: str
    summary: str = ""
    calendar_id: str = ""

    @property
    def is_all_day(self) -> bool:
        return not self.start

    def to_time_range(self, timezone=None) -> TimeRange:
        """
        Parse the event timestamps into a TimeRange.

        Raises:
            EventParseError: If a timestamp is not RFC 3339 or the event
                ends before it starts
        """
        start = _parse_timestamp(self.start, timezone)
        end = _parse_timestamp(self.end, timezone)

        try:
            return TimeRange(start=start, end=end)
        except ValueError as exc:
            raise EventParseError(f"Event '{self.summary}' has invalid bounds: {exc}") from exc


def _parse_timestamp(value: str, timezone=None) -> DateTime:
    """Parse an RFC 3339 timestamp, optionally converting it to ``timezone``."""
    if not RFC3339_PATTERN.fullmatch(value):
        raise EventParseError(f"Unable to parse time '{value}': not an RFC 3339 timestamp")

    try:
        parsed = pendulum.parse(value.upper(), exact=True)
    except (ValueError, TypeError) as exc:
        raise EventParseError(f"Unable to parse time '{value}': {exc}") from exc

    if not isinstance(parsed, DateTime) or parsed.tzinfo is None:
        raise EventParseError(f"Unable to parse time '{value}': not a date-time with an offset")

    if timezone is not None:
        return parsed.in_timezone(timezone)
    return parsed


@dataclass
class WorkingHours:
    """
    Configuration for working hours.

    ``timezone`` is an IANA name; ``None`` means the local system timezone.
    """
    start_time: time = time(10, 0)
    end_time: time = time(18, 0)
    exclude_weekdays: List[int] = field(default_factory=lambda: [5, 6])  # 0=Monday, 6=Sunday
    timezone: str | None = None

    def tzinfo(self):
        """Return the pendulum timezone working hours are expressed in."""
        if self.timezone:
            return pendulum.timezone(self.timezone)
        return pendulum.local_timezone()

    def is_working_day(self, dt: DateTime) -> bool:
        """Check if a given datetime falls on a working day."""
        return dt.weekday() not in self.exclude_weekdays

    def get_working_hours_for_day(self, date: DateTime) -> TimeRange | None:
        """
        Get the working hours range for a specific day.
        Returns None if it's not a working day.
        """
        if not self.is_working_day(date):
            return None

        return TimeRange(
            start=self._at(date, self.start_time),
            end=self._at(date, self.end_time),
        )

    def next_work_day(self, reference: DateTime) -> TimeRange:
        """
        Get the working hours of the next workday at or after ``reference``.

        A reference at or after the end of its day's working hours rolls
        over to the following day; excluded weekdays are then skipped.
        Clipping to ``reference`` is left to the caller.
        """
        if len(set(self.exclude_weekdays)) >= 7:
            raise ValueError("At least one weekday must be a working day")

        day = pendulum.instance(reference).in_timezone(self.tzinfo())

        if day >= self._at(day, self.end_time):
            day = day.add(days=1)

        while not self.is_working_day(day):
            day = day.add(days=1)

        return TimeRange(
            start=self._at(day, self.start_time),
            end=self._at(day, self.end_time),
        )

    @staticmethod
    def _at(date: DateTime, time_of_day: time) -> DateTime:
        return date.set(
            hour=time_of_day.hour,
            minute=time_of_day.minute,
            second=0,
            microsecond=0
        )
