# tests/test_errors.py
from fastapi.testclient import TestClient

from voicecal.app import create_app
from voicecal.core.config import Settings
from voicecal.core.dependencies import get_scheduling_service
from voicecal.core.state import CalendarState


def test_wrong_method_on_agent_path_is_404(client: TestClient):
    response = client.get("/create-event")

    assert response.status_code == 404
    data = response.json()
    assert data["error"] == "Not found"
    assert data["path"] == "/create-event"
    assert "/cancel-event" in data["availableEndpoints"]


def test_wrong_method_on_health_path_is_404(client: TestClient):
    response = client.post("/health")

    assert response.status_code == 404
    assert response.json()["path"] == "/health"


def test_unhandled_error_is_json_500_and_service_keeps_serving(test_settings: Settings,
                                                               calendar_state: CalendarState):
    # Arrange: сборка сервиса агента падает непредвиденной ошибкой
    def broken_scheduling_service():
        raise RuntimeError("agent wiring exploded")

    app = create_app(settings=test_settings, calendar_state=calendar_state)
    app.dependency_overrides[get_scheduling_service] = broken_scheduling_service

    with TestClient(app, raise_server_exceptions=False) as client:
        # Act
        failed = client.post("/cancel-event", json={"args": {"eventId": "evt1"}})
        follow_up = client.get("/health")

    # Assert
    assert failed.status_code == 500
    assert failed.json() == {
        "error": "Internal server error",
        "message": "Something went wrong processing your request",
    }
    assert "exploded" not in failed.text
    assert follow_up.status_code == 200
    assert follow_up.json()["status"] == "healthy"
