"""
Google Calendar API client for fetching calendars and events.
"""

import logging
from typing import Any, Dict, List

from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from ..domain.exceptions import CalendarAPIError
from ..domain.models import BusyEvent, CalendarInfo, TimeRange

logger = logging.getLogger(__name__)


class GoogleCalendarClient:
    """
    Client for Google Calendar API v3 read operations.

    Uses ``calendarList.list`` to resolve calendars and ``events.list`` with
    recurring events expanded into single instances.
    """

    def __init__(self, credentials=None, service=None):
        """
        Initialize the Calendar API client.

        Args:
            credentials: Authorized Google credentials
            service: Prebuilt API resource; built from ``credentials`` if omitted
        """
        if service is None:
            service = build("calendar", "v3", credentials=credentials, cache_discovery=False)
        self.service = service

    def list_calendars(self) -> List[CalendarInfo]:
        """
        List every calendar on the user's calendar list.

        Raises:
            CalendarAPIError: If the API call fails
        """
        calendars: List[CalendarInfo] = []
        page_token = None

        while True:
            try:
                response = self.service.calendarList().list(pageToken=page_token).execute()
            except HttpError as e:
                raise CalendarAPIError(f"Unable to list calendars: {e}") from e

            for item in response.get("items", []):
                calendars.append(
                    CalendarInfo(id=item["id"], summary=item.get("summary", ""))
                )

            page_token = response.get("nextPageToken")
            if not page_token:
                return calendars

    def list_events(self, calendar_id: str, window: TimeRange) -> List[BusyEvent]:
        """
        List the events of a calendar that intersect ``window``.

        Deleted events are excluded and recurring events are expanded.

        Raises:
            CalendarAPIError: If the API call fails
        """
        events: List[BusyEvent] = []
        page_token = None

        while True:
            try:
                response = self.service.events().list(
                    calendarId=calendar_id,
                    showDeleted=False,
                    singleEvents=True,
                    timeMin=window.start.to_iso8601_string(),
                    timeMax=window.end.to_iso8601_string(),
                    orderBy="startTime",
                    pageToken=page_token,
                ).execute()
            except HttpError as e:
                raise CalendarAPIError(
                    f"Unable to retrieve events of calendar {calendar_id}: {e}"
                ) from e

            events.extend(
                self._parse_event(item, calendar_id)
                for item in response.get("items", [])
            )

            page_token = response.get("nextPageToken")
            if not page_token:
                return events

    @staticmethod
    def _parse_event(item: Dict[str, Any], calendar_id: str) -> BusyEvent:
        """
        Convert an API event resource into a BusyEvent.

        Resource format:
        {
            "summary": "Standup",
            "start": {"dateTime": "2017-03-15T16:00:00-05:00"},
            "end": {"dateTime": "2017-03-15T16:30:00-05:00"}
        }

        All-day events carry ``date`` instead of ``dateTime`` and become
        events with an empty start.
        """
        return BusyEvent(
            start=item.get("start", {}).get("dateTime", ""),
            end=item.get("end", {}).get("dateTime", ""),
            summary=item.get("summary", ""),
            calendar_id=calendar_id,
        )
