# voicecal/calendar/service.py
import datetime
import logging
from typing import Any, Dict, List, Optional

import google_auth_httplib2
import httplib2
from google.auth.credentials import Credentials
from googleapiclient.discovery import Resource, build
from googleapiclient.http import HttpRequest

logger = logging.getLogger(__name__)


class SimpleCalendarEvent:
    def __init__(self, id: str, summary: str, start_time: str, end_time: str, is_all_day: bool):
        self.id = id
        self.summary = summary
        self.startTime = start_time
        self.endTime = end_time
        self.isAllDay = is_all_day


def parse_event_item(event_item: dict) -> Optional[SimpleCalendarEvent]:
    """
    Parses one item of an events.list response into a SimpleCalendarEvent.
    Returns None for items without a start time.
    """
    start_info = event_item.get('start', {})
    end_info = event_item.get('end', {})

    start_time = start_info.get('dateTime') or start_info.get('date')
    if not start_time:
        logger.warning(f"Skipping event without start time: {event_item.get('id')}")
        return None

    is_all_day = 'dateTime' not in start_info
    end_time = end_info.get('dateTime') or end_info.get('date')
    if not end_time:
        if is_all_day:
            # all-day без end.date заканчивается в начале следующего дня
            end_time = (datetime.date.fromisoformat(start_time) + datetime.timedelta(days=1)).isoformat()
        else:
            end_time = start_time

    return SimpleCalendarEvent(
        id=event_item.get('id'),
        summary=event_item.get('summary') or '',
        start_time=start_time,
        end_time=end_time,
        is_all_day=is_all_day,
    )


class GoogleCalendarService:
    """
    Thin adapter over the Google Calendar v3 API bound to a single calendar.

    The discovery Resource is built once and shared by all request handlers.
    httplib2 is not thread-safe, so every API call gets its own authorized
    HTTP transport through ``requestBuilder``.
    """

    def __init__(self, creds: Credentials, calendar_id: str = 'primary'):
        """
        Args:
            creds: Scoped google-auth credentials (service account).
            calendar_id: Calendar every call is made against.

        Raises:
            ValueError: if creds are not provided.
        """
        if not creds:
            raise ValueError("Credentials are required to initialize GoogleCalendarService")
        self.creds = creds
        self.calendar_id = calendar_id

        def build_request(http, *args, **kwargs):
            new_http = google_auth_httplib2.AuthorizedHttp(self.creds, http=httplib2.Http())
            return HttpRequest(new_http, *args, **kwargs)

        authorized_http = google_auth_httplib2.AuthorizedHttp(self.creds, http=httplib2.Http())
        # cache_discovery=False: discovery-документ берется из пакета, файловый кэш не нужен
        self.service: Resource = build(
            'calendar', 'v3',
            http=authorized_http,
            requestBuilder=build_request,
            cache_discovery=False,
        )

    def list_events(self, time_min: datetime.datetime, time_max: datetime.datetime,
                    time_zone: Optional[str] = None) -> List[SimpleCalendarEvent]:
        """
        Returns events overlapping [time_min, time_max), recurring events
        expanded into single instances and ordered by start time.

        Raises:
            HttpError: on a Google Calendar API error.
        """
        time_min_iso = time_min.isoformat()
        time_max_iso = time_max.isoformat()
        logger.debug(f"Querying Google Calendar API with timeMin={time_min_iso}, timeMax={time_max_iso}")

        all_items = []
        page_token = None
        while True:
            params = {
                'calendarId': self.calendar_id,
                'timeMin': time_min_iso,
                'timeMax': time_max_iso,
                'singleEvents': True,
                'orderBy': 'startTime',
                'pageToken': page_token,
            }
            if time_zone:
                params['timeZone'] = time_zone
            events_result = self.service.events().list(**params).execute()

            all_items.extend(events_result.get('items', []))

            page_token = events_result.get('nextPageToken')
            if not page_token:
                break
            logger.debug("Fetching next page of events...")

        logger.info(f"Found {len(all_items)} event instances between {time_min_iso} and {time_max_iso}.")

        parsed_events = []
        for item in all_items:
            parsed = parse_event_item(item)
            if parsed:
                parsed_events.append(parsed)
        return parsed_events

    def insert_event(self, event_body: Dict[str, Any], send_updates: str = 'none') -> Dict[str, Any]:
        """
        Inserts an event and returns the created resource.

        Raises:
            HttpError: on a Google Calendar API error.
        """
        logger.info(f"Inserting new event into {self.calendar_id}: {event_body.get('summary')}")
        created_event = self.service.events().insert(
            calendarId=self.calendar_id,
            body=event_body,
            sendUpdates=send_updates,
        ).execute()
        logger.info(f"Event created successfully. Event ID: {created_event.get('id')}")
        return created_event

    def get_event(self, event_id: str) -> Dict[str, Any]:
        return self.service.events().get(calendarId=self.calendar_id, eventId=event_id).execute()

    def update_event(self, event_id: str, event_body: Dict[str, Any]) -> Dict[str, Any]:
        """Replaces the event with ``event_body`` (full update, not patch)."""
        logger.info(f"Updating event {event_id} in {self.calendar_id}")
        updated_event = self.service.events().update(
            calendarId=self.calendar_id,
            eventId=event_id,
            body=event_body,
        ).execute()
        logger.info(f"Event {updated_event.get('id')} updated successfully.")
        return updated_event

    def delete_event(self, event_id: str) -> None:
        logger.info(f"Deleting event {event_id} from {self.calendar_id}")
        self.service.events().delete(calendarId=self.calendar_id, eventId=event_id).execute()
        logger.info(f"Event {event_id} deleted.")

    def list_calendars(self, max_results: int = 1) -> List[Dict[str, Any]]:
        """Cheap call used as a connectivity probe."""
        result = self.service.calendarList().list(maxResults=max_results).execute()
        return result.get('items', [])
