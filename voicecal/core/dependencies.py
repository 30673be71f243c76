# voicecal/core/dependencies.py
from fastapi import Depends, Request

from voicecal.agent.service import SchedulingAgentService
from voicecal.core.config import Settings
from voicecal.core.state import CalendarState


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_calendar_state(request: Request) -> CalendarState:
    # До завершения lifespan состояния ещё нет — отвечаем как "не готово"
    state = getattr(request.app.state, "calendar_state", None)
    if state is None:
        return CalendarState(init_error="Calendar not initialized")
    return state


# Собирает сервис агента для эндпоинта из общего состояния процесса
def get_scheduling_service(
    state: CalendarState = Depends(get_calendar_state),
    settings: Settings = Depends(get_settings),
) -> SchedulingAgentService:
    return SchedulingAgentService(
        calendar=state.calendar,
        timezone=state.timezone,
        default_description=settings.DEFAULT_EVENT_DESCRIPTION,
    )
