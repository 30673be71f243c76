# voicecal/calendar/scheduling.py
"""
Date arithmetic for the voice agent endpoints.

All local values coming from the agent are a date (``YYYY-MM-DD``) and a
24h time (``HH:MM``) without an offset; they are interpreted in the
configured calendar timezone. Durations are added on the UTC timeline so a
60-minute appointment stays 60 minutes across DST transitions.
"""
import datetime
import logging
from typing import Any, Dict, Optional, Tuple
from zoneinfo import ZoneInfo

from dateutil.parser import isoparse

from .service import SimpleCalendarEvent

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"
DEFAULT_DURATION_MINUTES = 60


def parse_local_datetime(date_str: str, time_str: str, tz: ZoneInfo) -> datetime.datetime:
    """
    Combines a local date and time in ``tz``.

    Raises:
        ValueError: if the date or time cannot be parsed.
    """
    naive = datetime.datetime.strptime(f"{date_str.strip()} {time_str.strip()}", f"{DATE_FORMAT} {TIME_FORMAT}")
    return naive.replace(tzinfo=tz)


def is_valid_date(date_str: str) -> bool:
    try:
        datetime.datetime.strptime(date_str.strip(), DATE_FORMAT)
    except ValueError:
        return False
    return True


def is_valid_time(time_str: str) -> bool:
    try:
        datetime.datetime.strptime(time_str.strip(), TIME_FORMAT)
    except ValueError:
        return False
    return True


def add_minutes(start: datetime.datetime, minutes: int) -> datetime.datetime:
    """
    Raises:
        ValueError: if the result falls outside the supported date range.
    """
    tz = start.tzinfo
    try:
        end_utc = start.astimezone(datetime.timezone.utc) + datetime.timedelta(minutes=minutes)
        return end_utc.astimezone(tz)
    except OverflowError as e:
        raise ValueError(f"{minutes} minutes after {start.isoformat()} is out of range: {e}") from e


def availability_window(date_str: str, start_time: str, end_time: str,
                        tz: ZoneInfo) -> Tuple[datetime.datetime, datetime.datetime]:
    """
    Half-open window [start, end) for an availability check.

    Raises:
        ValueError: on unparseable input or when end is not after start.
    """
    start = parse_local_datetime(date_str, start_time, tz)
    end = parse_local_datetime(date_str, end_time, tz)
    if end <= start:
        raise ValueError(f"End time {end_time} is not after start time {start_time}")
    return start, end


def appointment_bounds(date_str: str, start_time: str, duration_minutes: int,
                       tz: ZoneInfo) -> Tuple[datetime.datetime, datetime.datetime]:
    start = parse_local_datetime(date_str, start_time, tz)
    return start, add_minutes(start, duration_minutes)


def format_spoken_time(value: datetime.datetime) -> str:
    """9:05 -> '9:05 AM', 14:30 -> '2:30 PM'."""
    hour = value.hour % 12 or 12
    suffix = "AM" if value.hour < 12 else "PM"
    return f"{hour}:{value.minute:02d} {suffix}"


def format_event_start(event: SimpleCalendarEvent, tz: ZoneInfo) -> str:
    if event.isAllDay:
        return "All day"
    start = isoparse(event.startTime)
    if start.tzinfo is None:
        start = start.replace(tzinfo=tz)
    return format_spoken_time(start.astimezone(tz))


def describe_events(events: list[SimpleCalendarEvent], tz: ZoneInfo) -> str:
    return ", ".join(f"{format_event_start(event, tz)}: {event.summary or 'Busy'}" for event in events)


def event_time_body(start: datetime.datetime, end: datetime.datetime, time_zone: str) -> Dict[str, Dict[str, Any]]:
    """Start/end blocks for an events resource, both tagged with the calendar timezone."""
    return {
        'start': {'dateTime': start.isoformat(), 'timeZone': time_zone},
        'end': {'dateTime': end.isoformat(), 'timeZone': time_zone},
    }


def reschedule(existing_event: Dict[str, Any], tz: ZoneInfo,
               new_date: Optional[str] = None,
               new_time: Optional[str] = None,
               new_duration: Optional[int] = None) -> Tuple[datetime.datetime, datetime.datetime]:
    """
    Merges requested changes with the stored event.

    Fields that are not supplied keep their current value; the current
    duration is ``end - start`` of the stored event.

    Raises:
        ValueError: if the stored event has no usable times, or an all-day
            event is rescheduled without a new time.
    """
    start_info = existing_event.get('start', {})
    end_info = existing_event.get('end', {})

    if start_info.get('dateTime'):
        current_start = isoparse(start_info['dateTime'])
        if current_start.tzinfo is None:
            current_start = current_start.replace(tzinfo=tz)
        current_start = current_start.astimezone(tz)
        current_date = current_start.strftime(DATE_FORMAT)
        current_time = current_start.strftime(TIME_FORMAT)

        current_duration = DEFAULT_DURATION_MINUTES
        if end_info.get('dateTime'):
            current_end = isoparse(end_info['dateTime'])
            if current_end.tzinfo is None:
                current_end = current_end.replace(tzinfo=tz)
            current_duration = int((current_end - current_start).total_seconds() // 60)
    elif start_info.get('date'):
        # all-day событие: времени нет, его обязан задать запрос
        current_date = start_info['date']
        current_time = None
        current_duration = DEFAULT_DURATION_MINUTES
    else:
        raise ValueError(f"Event {existing_event.get('id')} has no start time")

    date_str = new_date or current_date
    time_str = new_time or current_time
    if not time_str:
        raise ValueError(f"Event {existing_event.get('id')} is an all-day event; a new time is required")
    duration = new_duration or current_duration

    logger.debug(f"Rescheduling event {existing_event.get('id')} to {date_str} {time_str} for {duration} minutes")
    return appointment_bounds(date_str, time_str, duration, tz)
