"""
Mock calendar client for running without Google authentication.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import pendulum

from ..domain.models import BusyEvent, CalendarInfo, TimeRange

DEFAULT_DATA_FILE = Path(__file__).parent / "mock_calendar_data.json"


class MockCalendarClient:
    """
    Mock client that simulates Google Calendar API responses.

    Calendar data is loaded from a JSON file. Events are daily templates
    with ``"HH:mm"`` start and end times (or ``"all_day": true``) and an
    optional ``weekdays`` list (0=Monday); they are materialised on every
    day the caller asks for.
    """

    def __init__(self, data_file: Optional[Path] = None):
        """
        Initialize the mock client.

        Args:
            data_file: JSON file with calendars and event templates;
                defaults to the bundled mock_calendar_data.json
        """
        self.data_file = data_file or DEFAULT_DATA_FILE
        self._load_calendar_data()

    def _load_calendar_data(self) -> None:
        """Load mock calendar data from JSON file."""
        if self.data_file.exists():
            with open(self.data_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        else:
            # Fallback to empty if file doesn't exist
            data = {}

        self.calendars: List[Dict[str, Any]] = data.get("calendars", [])
        self.event_templates: List[Dict[str, Any]] = data.get("events", [])

    def list_calendars(self) -> List[CalendarInfo]:
        """Return the calendars defined in the mock data."""
        return [
            CalendarInfo(id=calendar["id"], summary=calendar.get("summary", ""))
            for calendar in self.calendars
        ]

    def list_events(self, calendar_id: str, window: TimeRange) -> List[BusyEvent]:
        """
        Materialise the templates of ``calendar_id`` on the window's day.

        Only events intersecting the window are returned, ordered by start.
        """
        day = window.start
        events: List[BusyEvent] = []

        for template in self.event_templates:
            if template.get("calendarId") != calendar_id:
                continue

            weekdays = template.get("weekdays")
            if weekdays is not None and day.weekday() not in weekdays:
                continue

            summary = template.get("summary", "")

            if template.get("all_day"):
                events.append(BusyEvent(start="", end="", summary=summary, calendar_id=calendar_id))
                continue

            start = self._on_day(day, template["start"])
            end = self._on_day(day, template["end"])

            if start < window.end and end > window.start:
                events.append(
                    BusyEvent(
                        start=start.to_iso8601_string(),
                        end=end.to_iso8601_string(),
                        summary=summary,
                        calendar_id=calendar_id,
                    )
                )

        return sorted(events, key=lambda event: event.start)

    @staticmethod
    def _on_day(day, time_of_day: str):
        parsed = pendulum.from_format(time_of_day, "HH:mm")
        return day.set(hour=parsed.hour, minute=parsed.minute, second=0, microsecond=0)
