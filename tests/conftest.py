# tests/conftest.py
import pytest
from typing import Generator
from unittest.mock import MagicMock
from zoneinfo import ZoneInfo

from fastapi.testclient import TestClient

# Явно добавляем путь к проекту
import sys
import os
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from voicecal.app import create_app
from voicecal.calendar.service import GoogleCalendarService
from voicecal.core.config import Settings
from voicecal.core.state import CalendarState

TEST_TIMEZONE = "America/Chicago"


@pytest.fixture
def test_settings() -> Settings:
    """Настройки без .env и без ключа сервисного аккаунта."""
    return Settings(
        _env_file=None,
        GOOGLE_SERVICE_ACCOUNT_KEY=None,
        GOOGLE_SERVICE_ACCOUNT_FILE=None,
        GOOGLE_CALENDAR_ID="primary",
        TIMEZONE=TEST_TIMEZONE,
        DEFAULT_EVENT_DESCRIPTION="Appointment created via voice agent",
    )


@pytest.fixture
def fake_calendar() -> MagicMock:
    """
    Подменённый GoogleCalendarService: по умолчанию календарь пуст,
    вставка возвращает событие с id и ссылкой.
    """
    calendar = MagicMock(spec=GoogleCalendarService)
    calendar.list_events.return_value = []
    calendar.insert_event.return_value = {
        "id": "evt-new-1",
        "htmlLink": "https://calendar.google.com/event?eid=evt-new-1",
    }
    calendar.list_calendars.return_value = [{"id": "primary"}]
    return calendar


@pytest.fixture
def calendar_state(fake_calendar: MagicMock) -> CalendarState:
    return CalendarState(calendar=fake_calendar, timezone=ZoneInfo(TEST_TIMEZONE))


@pytest.fixture
def client(test_settings: Settings, calendar_state: CalendarState) -> Generator[TestClient, None, None]:
    """TestClient поверх приложения с готовым (подменённым) календарём."""
    app = create_app(settings=test_settings, calendar_state=calendar_state)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def unready_client(test_settings: Settings) -> Generator[TestClient, None, None]:
    """Приложение, у которого инициализация календаря не удалась."""
    state = CalendarState(
        timezone=ZoneInfo(TEST_TIMEZONE),
        init_error="GOOGLE_SERVICE_ACCOUNT_KEY environment variable not set",
    )
    app = create_app(settings=test_settings, calendar_state=state)
    with TestClient(app) as test_client:
        yield test_client
