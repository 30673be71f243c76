# voicecal/agent/router.py

from typing import Optional

from fastapi import APIRouter, Depends

from voicecal.core.dependencies import get_scheduling_service

from . import schemas
from .service import SchedulingAgentService

# Эндпоинты вызываются голосовым агентом как функции: всегда 200 и поле result
router = APIRouter(
    tags=["Voice Agent"],
)

AGENT_PATHS = ("/check-availability", "/create-event", "/update-event", "/cancel-event")


@router.post(
    "/check-availability",
    response_model=schemas.AgentResponse,
    summary="Check whether a time window is free"
)
def check_availability(
    payload: Optional[schemas.CheckAvailabilityRequest] = None,
    agent: SchedulingAgentService = Depends(get_scheduling_service)
):
    """Lists events in [startTime, endTime) on the given date and reports free/busy."""
    payload = payload or schemas.CheckAvailabilityRequest()
    reply = agent.check_availability(payload.args)
    return schemas.AgentResponse(result=reply.result)


@router.post(
    "/create-event",
    response_model=schemas.CreateEventResponse,
    response_model_exclude_none=True,
    summary="Create an appointment unless the slot is taken"
)
def create_event(
    payload: Optional[schemas.CreateEventRequest] = None,
    agent: SchedulingAgentService = Depends(get_scheduling_service)
):
    payload = payload or schemas.CreateEventRequest()
    reply = agent.create_event(payload.args)
    return schemas.CreateEventResponse(result=reply.result, eventId=reply.event_id, eventLink=reply.event_link)


@router.post(
    "/update-event",
    response_model=schemas.UpdateEventResponse,
    response_model_exclude_none=True,
    summary="Move or resize an existing appointment"
)
def update_event(
    payload: Optional[schemas.UpdateEventRequest] = None,
    agent: SchedulingAgentService = Depends(get_scheduling_service)
):
    payload = payload or schemas.UpdateEventRequest()
    reply = agent.update_event(payload.args)
    return schemas.UpdateEventResponse(result=reply.result, eventId=reply.event_id)


@router.post(
    "/cancel-event",
    response_model=schemas.AgentResponse,
    summary="Cancel an appointment"
)
def cancel_event(
    payload: Optional[schemas.CancelEventRequest] = None,
    agent: SchedulingAgentService = Depends(get_scheduling_service)
):
    payload = payload or schemas.CancelEventRequest()
    reply = agent.cancel_event(payload.args)
    return schemas.AgentResponse(result=reply.result)
