import json

import httplib2
from fastapi.testclient import TestClient
from googleapiclient.errors import HttpError
from pytest_mock import MockerFixture

from voicecal.app import create_app
from voicecal.core import state as state_module
from voicecal.core.config import Settings
from voicecal.core.state import init_calendar_state

FAKE_KEY = json.dumps({
    "client_email": "voice-agent@project.iam.gserviceaccount.com",
    "private_key": "fake",
    "token_uri": "https://oauth2.googleapis.com/token",
})


def test_missing_credentials_do_not_raise(test_settings: Settings):
    state = init_calendar_state(test_settings)

    assert state.ready is False
    assert state.calendar is None
    assert "GOOGLE_SERVICE_ACCOUNT_KEY" in state.init_error


def test_invalid_timezone_is_recorded(test_settings: Settings):
    settings = test_settings.model_copy(update={"TIMEZONE": "Mars/Olympus_Mons"})

    state = init_calendar_state(settings)

    assert state.ready is False
    assert "Mars/Olympus_Mons" in state.init_error


def test_successful_initialization_probes_calendar(test_settings: Settings, mocker: MockerFixture):
    mocker.patch.object(state_module, "load_service_account_credentials")
    service_cls = mocker.patch.object(state_module, "GoogleCalendarService")
    service_cls.return_value.list_calendars.return_value = [{"id": "primary"}]
    settings = test_settings.model_copy(update={"GOOGLE_SERVICE_ACCOUNT_KEY": FAKE_KEY})

    state = init_calendar_state(settings)

    assert state.ready is True
    assert state.init_error is None
    assert state.timezone.key == "America/Chicago"
    service_cls.assert_called_once()
    assert service_cls.call_args.kwargs == {"calendar_id": "primary"}
    service_cls.return_value.list_calendars.assert_called_once_with(max_results=1)


def test_failed_probe_keeps_handle(test_settings: Settings, mocker: MockerFixture):
    mocker.patch.object(state_module, "load_service_account_credentials")
    service_cls = mocker.patch.object(state_module, "GoogleCalendarService")
    service_cls.return_value.list_calendars.side_effect = HttpError(
        resp=httplib2.Response({"status": 403}), content=b'{"error": {"message": "Forbidden"}}'
    )
    settings = test_settings.model_copy(update={"GOOGLE_SERVICE_ACCOUNT_KEY": FAKE_KEY})

    state = init_calendar_state(settings)

    assert state.calendar is service_cls.return_value
    assert state.init_error.startswith("Calendar verification failed")


def test_lifespan_builds_state_and_serves_unready(test_settings: Settings):
    app = create_app(settings=test_settings)

    with TestClient(app) as client:
        assert client.get("/health").status_code == 200
        assert client.get("/ready").status_code == 503
        assert client.get("/").json()["status"] == "initializing"
        assert app.state.calendar_state.init_error is not None
