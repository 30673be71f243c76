# voicecal/core/state.py
import logging
import time
from dataclasses import dataclass, field
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from googleapiclient.errors import HttpError

from voicecal.auth.credentials import CredentialsError, load_service_account_credentials
from voicecal.calendar.service import GoogleCalendarService
from voicecal.core.config import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalendarState:
    """
    Process-wide calendar state, built once in the app lifespan and read by
    every request through dependencies. Never mutated afterwards.
    """

    calendar: Optional[GoogleCalendarService] = None
    timezone: Optional[ZoneInfo] = None
    init_error: Optional[str] = None
    started_at: float = field(default_factory=time.monotonic)

    @property
    def ready(self) -> bool:
        return self.calendar is not None and self.timezone is not None

    @property
    def uptime(self) -> float:
        return time.monotonic() - self.started_at


def init_calendar_state(settings: Settings) -> CalendarState:
    """
    Builds the calendar handle from configuration. Never raises: failures
    are recorded in ``init_error`` and the service keeps running unready.
    """
    try:
        timezone = ZoneInfo(settings.TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError) as e:
        logger.error(f"Invalid TIMEZONE '{settings.TIMEZONE}': {e}")
        return CalendarState(init_error=f"Invalid timezone: {settings.TIMEZONE}")

    try:
        creds = load_service_account_credentials(
            scopes=settings.SCOPES,
            raw_key=settings.GOOGLE_SERVICE_ACCOUNT_KEY,
            key_file=settings.GOOGLE_SERVICE_ACCOUNT_FILE,
        )
        calendar = GoogleCalendarService(creds, calendar_id=settings.GOOGLE_CALENDAR_ID)
    except CredentialsError as e:
        logger.error(f"Google Calendar initialization failed: {e}")
        return CalendarState(timezone=timezone, init_error=str(e))
    except Exception as e:
        logger.error(f"Google Calendar initialization failed: {e}", exc_info=True)
        return CalendarState(timezone=timezone, init_error=str(e))

    init_error = None
    if settings.VERIFY_CALENDAR_ON_STARTUP:
        try:
            calendars = calendar.list_calendars(max_results=1)
            logger.info("Google Calendar connected successfully")
            logger.info(f"Found {len(calendars)} calendars")
        except HttpError as e:
            # хэндл оставляем: /ready перепроверит доступ при следующем запросе
            init_error = f"Calendar verification failed: {e.reason}"
            logger.warning(f"{init_error} (status {e.resp.status})")
        except Exception as e:
            init_error = f"Calendar verification failed: {e}"
            logger.warning(init_error, exc_info=True)

    return CalendarState(calendar=calendar, timezone=timezone, init_error=init_error)
