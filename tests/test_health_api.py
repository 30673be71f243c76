# tests/test_health_api.py
from typing import Generator
from unittest.mock import MagicMock
from zoneinfo import ZoneInfo

import httplib2
import pytest
from fastapi.testclient import TestClient
from googleapiclient.errors import HttpError

from voicecal.app import create_app
from voicecal.core.config import Settings
from voicecal.core.state import CalendarState

CALENDAR_LIST_URI = "https://www.googleapis.com/calendar/v3/users/me/calendarList?maxResults=1&alt=json"


@pytest.fixture
def degraded_client(test_settings: Settings, fake_calendar: MagicMock) -> Generator[TestClient, None, None]:
    """Handle построен, но проверка календаря при старте не прошла."""
    state = CalendarState(
        calendar=fake_calendar,
        timezone=ZoneInfo("America/Chicago"),
        init_error="Calendar verification failed: Forbidden",
    )
    app = create_app(settings=test_settings, calendar_state=state)
    with TestClient(app) as test_client:
        yield test_client


def test_root_reports_ready_service(client: TestClient):
    response = client.get("/")

    assert response.status_code == 200
    data = response.json()
    assert data["service"] == "Voice Agent Calendar Bridge"
    assert data["status"] == "ready"
    assert data["authStatus"] == "connected"
    assert data["endpoints"]["createEvent"] == "POST /create-event"


def test_root_reports_initializing(unready_client: TestClient):
    data = unready_client.get("/").json()

    assert data["status"] == "initializing"
    assert data["authStatus"] == "GOOGLE_SERVICE_ACCOUNT_KEY environment variable not set"


def test_health_operational(client: TestClient, fake_calendar: MagicMock):
    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["calendar"] == {"connected": True, "status": "operational", "error": None}
    assert data["uptime"] >= 0
    fake_calendar.list_calendars.assert_called_once_with(max_results=1)


def test_health_stays_200_when_calendar_missing(unready_client: TestClient):
    response = unready_client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["calendar"]["connected"] is False
    assert data["calendar"]["status"] == "not_initialized"


def test_health_stays_200_when_probe_fails(client: TestClient, fake_calendar: MagicMock):
    fake_calendar.list_calendars.side_effect = RuntimeError("connection reset")

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["calendar"] == {"connected": True, "status": "error", "error": "RuntimeError"}


def test_ready_when_probe_succeeds(client: TestClient):
    response = client.get("/ready")

    assert response.status_code == 200
    assert response.json() == {"ready": True, "message": "Google Calendar is connected"}


def test_ready_503_when_not_initialized(unready_client: TestClient):
    response = unready_client.get("/ready")

    assert response.status_code == 503
    assert response.json() == {
        "ready": False,
        "message": "GOOGLE_SERVICE_ACCOUNT_KEY environment variable not set",
    }


def test_ready_503_when_probe_fails(client: TestClient, fake_calendar: MagicMock):
    fake_calendar.list_calendars.side_effect = RuntimeError("connection reset")

    response = client.get("/ready")

    assert response.status_code == 503
    assert response.json()["ready"] is False


def test_unknown_path_is_404(client: TestClient):
    response = client.get("/book-table")

    assert response.status_code == 404
    data = response.json()
    assert data["error"] == "Not found"
    assert data["path"] == "/book-table"
    assert "/create-event" in data["availableEndpoints"]


def test_root_reports_failed_startup_check(degraded_client: TestClient):
    data = degraded_client.get("/").json()

    assert data["status"] == "degraded"
    assert data["authStatus"] == "Calendar verification failed: Forbidden"


def test_probe_error_hides_request_url(client: TestClient, fake_calendar: MagicMock):
    fake_calendar.list_calendars.side_effect = HttpError(
        resp=httplib2.Response({"status": 403}),
        content=b'{"error": {"message": "Forbidden"}}',
        uri=CALENDAR_LIST_URI,
    )

    health = client.get("/health")
    ready = client.get("/ready")

    assert health.json()["calendar"]["error"] == "Google API error 403: Forbidden"
    assert ready.status_code == 503
    assert ready.json() == {"ready": False, "message": "Google API error 403: Forbidden"}
    assert "googleapis.com" not in health.text
    assert "googleapis.com" not in ready.text
