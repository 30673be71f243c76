# voicecal/health/router.py
"""
Liveness and readiness.

``/health`` answers 200 whenever the process is listening, so a platform
health check never restarts the service because Google is unreachable;
calendar details are only reported in the body. ``/ready`` is the
calendar-readiness signal and returns 503 until the handle works.
"""
import datetime
import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from googleapiclient.errors import HttpError
from pydantic import BaseModel

from voicecal.agent.service import describe_provider_error
from voicecal.core.config import Settings
from voicecal.core.dependencies import get_calendar_state, get_settings
from voicecal.core.state import CalendarState

router = APIRouter(tags=["Status"])
logger = logging.getLogger(__name__)

ENDPOINTS = {
    "health": "/health",
    "ready": "/ready",
    "checkAvailability": "POST /check-availability",
    "createEvent": "POST /create-event",
    "updateEvent": "POST /update-event",
    "cancelEvent": "POST /cancel-event",
}


class CalendarHealth(BaseModel):
    connected: bool
    status: str  # operational | error | not_initialized
    error: Optional[str] = None


class HealthResponse(BaseModel):
    status: str = "healthy"
    timestamp: str
    uptime: float
    calendar: CalendarHealth


class ReadyResponse(BaseModel):
    ready: bool
    message: str


def summarize_probe_error(e: Exception) -> str:
    """Short caller-facing text; the request URL and response body stay in the logs."""
    if isinstance(e, HttpError):
        return f"Google API error {e.resp.status}: {e.reason}"
    return type(e).__name__


def probe_calendar(state: CalendarState) -> CalendarHealth:
    """Runs a one-item calendarList.list against the provider."""
    if not state.ready:
        return CalendarHealth(connected=False, status="not_initialized", error=state.init_error)
    try:
        state.calendar.list_calendars(max_results=1)
    except Exception as e:
        logger.warning(f"Calendar probe failed: {describe_provider_error(e)}")
        return CalendarHealth(connected=True, status="error", error=summarize_probe_error(e))
    return CalendarHealth(connected=True, status="operational")


@router.get("/")
def root(
    state: CalendarState = Depends(get_calendar_state),
    settings: Settings = Depends(get_settings),
):
    # Проверка при старте могла упасть при живом handle: тогда не "connected"
    if state.ready and not state.init_error:
        auth_status, status = "connected", "ready"
    elif state.ready:
        auth_status, status = state.init_error, "degraded"
    else:
        auth_status, status = state.init_error or "connecting...", "initializing"
    return {
        "service": settings.SERVICE_NAME,
        "status": status,
        "version": settings.SERVICE_VERSION,
        "endpoints": ENDPOINTS,
        "authStatus": auth_status,
    }


@router.get("/health", response_model=HealthResponse)
def health(state: CalendarState = Depends(get_calendar_state)):
    return HealthResponse(
        timestamp=datetime.datetime.now(datetime.timezone.utc).isoformat(),
        uptime=round(state.uptime, 3),
        calendar=probe_calendar(state),
    )


@router.get("/ready", response_model=ReadyResponse, responses={503: {"model": ReadyResponse}})
def ready(state: CalendarState = Depends(get_calendar_state)):
    calendar = probe_calendar(state)
    if calendar.status == "operational":
        return ReadyResponse(ready=True, message="Google Calendar is connected")

    message = calendar.error or "Calendar not initialized"
    body = ReadyResponse(ready=False, message=message)
    return JSONResponse(status_code=503, content=body.model_dump())
