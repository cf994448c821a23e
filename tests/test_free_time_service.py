"""
Tests for the FreeTimeService orchestration layer.
"""

from datetime import time
from typing import Dict, List

import pendulum
import pytest

from freetime.domain.exceptions import CalendarAPIError, EventParseError
from freetime.domain.models import BusyEvent, CalendarInfo, TimeRange, WorkingHours
from freetime.domain.slot_calculator import SlotCalculator
from freetime.services.free_time_finder import FreeTimeService

TZ = "Europe/Berlin"


def at(text: str):
    return pendulum.parse(text, tz=TZ)


def span(start: str, end: str) -> TimeRange:
    return TimeRange(start=at(start), end=at(end))


class StubCalendarClient:
    """Minimal stub matching CalendarClientProtocol."""

    def __init__(self, calendars: List[CalendarInfo], events: Dict[str, List[BusyEvent]]):
        self._calendars = calendars
        self._events = events
        self.calls: List[Dict[str, str]] = []

    def list_calendars(self) -> List[CalendarInfo]:
        return self._calendars

    def list_events(self, calendar_id: str, window: TimeRange) -> List[BusyEvent]:
        self.calls.append(
            {
                "calendar_id": calendar_id,
                "start": window.start.to_datetime_string(),
                "end": window.end.to_datetime_string(),
            }
        )
        result = []
        for event in self._events.get(calendar_id, []):
            if event.is_all_day:
                result.append(event)
                continue
            busy = event.to_time_range()
            if busy.start < window.end and busy.end > window.start:
                result.append(event)
        return result


class FailingCalendarClient(StubCalendarClient):
    def list_events(self, calendar_id: str, window: TimeRange) -> List[BusyEvent]:
        raise CalendarAPIError("Unable to retrieve events")


CALENDARS = [
    CalendarInfo(id="work-id", summary="Work"),
    CalendarInfo(id="personal-id", summary="Personal"),
    CalendarInfo(id="ymca-id", summary="YMCA"),
]


def _event(start: str, end: str, summary: str = "Busy") -> BusyEvent:
    return BusyEvent(
        start=at(start).to_iso8601_string(),
        end=at(end).to_iso8601_string(),
        summary=summary,
    )


def _build_service(client) -> FreeTimeService:
    working_hours = WorkingHours(
        start_time=time(10, 0),
        end_time=time(18, 0),
        exclude_weekdays=[5, 6],
        timezone=TZ,
    )
    calculator = SlotCalculator(working_hours=working_hours)
    return FreeTimeService(calendar_client=client, slot_calculator=calculator)


def test_resolve_busy_calendars_matches_names_case_sensitively():
    service = _build_service(StubCalendarClient(CALENDARS, {}))

    calendar_ids = service.resolve_busy_calendars(["Personal", "ymca", "UIUC"])

    assert calendar_ids == ["personal-id"]


def test_fetch_busy_events_queries_every_calendar_for_every_day():
    client = StubCalendarClient(CALENDARS, {})
    service = _build_service(client)
    days = [
        span("2024-11-25 10:00", "2024-11-25 18:00"),
        span("2024-11-26 10:00", "2024-11-26 18:00"),
    ]

    service.fetch_busy_events(["personal-id", "ymca-id"], days)

    assert [(call["calendar_id"], call["start"]) for call in client.calls] == [
        ("personal-id", "2024-11-25 10:00:00"),
        ("ymca-id", "2024-11-25 10:00:00"),
        ("personal-id", "2024-11-26 10:00:00"),
        ("ymca-id", "2024-11-26 10:00:00"),
    ]


def test_compute_free_ranges_single_event():
    """A Mon 12:00-13:00 event splits Monday in two."""
    client = StubCalendarClient(
        CALENDARS,
        {"personal-id": [_event("2024-11-25 12:00", "2024-11-25 13:00", "Lunch")]},
    )
    service = _build_service(client)

    free = service.compute_free_ranges(
        lookahead_days=1,
        now=at("2024-11-25 08:00"),
        busy_calendar_ids=["personal-id"],
    )

    assert free == [
        span("2024-11-25 10:00", "2024-11-25 12:00"),
        span("2024-11-25 13:00", "2024-11-25 18:00"),
    ]


def test_compute_free_ranges_full_day_event():
    """A Mon 09:00-19:00 event leaves nothing free on Monday."""
    client = StubCalendarClient(
        CALENDARS,
        {"personal-id": [_event("2024-11-25 09:00", "2024-11-25 19:00", "Offsite")]},
    )
    service = _build_service(client)

    free = service.compute_free_ranges(
        lookahead_days=1,
        now=at("2024-11-25 08:00"),
        busy_calendar_ids=["personal-id"],
    )

    assert free == []


def test_find_slots_end_to_end():
    """Events of busy calendars block time; other calendars and all-day events do not."""
    client = StubCalendarClient(
        CALENDARS,
        {
            "personal-id": [
                _event("2024-11-25 12:00", "2024-11-25 13:00", "Lunch"),
                _event("2024-11-26 17:45", "2024-11-26 19:00", "Dinner"),
                BusyEvent(start="", end="", summary="Birthday"),
            ],
            "ymca-id": [_event("2024-11-27 09:30", "2024-11-27 11:00", "Swim")],
            "work-id": [_event("2024-11-25 14:00", "2024-11-25 15:00", "Not blocking")],
        },
    )
    service = _build_service(client)

    slots = service.find_slots(
        now=at("2024-11-25 10:15"),
        busy_calendars=["Personal", "YMCA"],
        lookahead_days=3,
        min_duration_minutes=30,
    )

    assert slots == [
        span("2024-11-25 10:15", "2024-11-25 12:00"),
        span("2024-11-25 13:00", "2024-11-25 18:00"),
        span("2024-11-26 10:00", "2024-11-26 17:45"),
        span("2024-11-27 11:00", "2024-11-27 18:00"),
    ]


def test_find_slots_drops_short_remainders():
    client = StubCalendarClient(
        CALENDARS,
        {"personal-id": [_event("2024-11-25 10:20", "2024-11-25 17:40", "Workshop")]},
    )
    service = _build_service(client)

    slots = service.find_slots(
        now=at("2024-11-25 09:00"),
        busy_calendars=["Personal"],
        lookahead_days=1,
        min_duration_minutes=30,
    )

    assert slots == []


def test_find_slots_propagates_fetch_failure():
    service = _build_service(FailingCalendarClient(CALENDARS, {}))

    with pytest.raises(CalendarAPIError):
        service.find_slots(
            now=at("2024-11-25 09:00"),
            busy_calendars=["Personal"],
        )


def test_find_slots_propagates_parse_failure():
    client = StubCalendarClient(CALENDARS, {})
    client.list_events = lambda calendar_id, window: [
        BusyEvent(start="15/03/2017 16:00", end="15/03/2017 17:00", summary="Bad")
    ]
    service = _build_service(client)

    with pytest.raises(EventParseError):
        service.find_slots(
            now=at("2024-11-25 09:00"),
            busy_calendars=["Personal"],
        )
