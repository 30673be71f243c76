# voicecal/agent/schemas.py
from typing import Optional

from pydantic import BaseModel, Field, field_validator

# Все поля args опциональны: отсутствие обязательного поля обрабатывает сервис
# и отвечает подсказкой для голосового агента, а не 422.


class _AgentArgs(BaseModel):
    @field_validator('*', mode='before')
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class CheckAvailabilityArgs(_AgentArgs):
    date: Optional[str] = Field(None, description="Date in YYYY-MM-DD format")
    startTime: Optional[str] = Field(None, description="Window start, HH:MM 24h local time")
    endTime: Optional[str] = Field(None, description="Window end, HH:MM 24h local time")


class CreateEventArgs(_AgentArgs):
    title: Optional[str] = Field(None, description="Appointment title")
    date: Optional[str] = Field(None, description="Date in YYYY-MM-DD format")
    startTime: Optional[str] = Field(None, description="Start, HH:MM 24h local time")
    duration: Optional[int] = Field(None, description="Length in minutes, defaults to 60")
    description: Optional[str] = Field(None, description="Optional event description")
    attendeeEmail: Optional[str] = Field(None, description="Optional attendee to invite")


class UpdateEventArgs(_AgentArgs):
    eventId: Optional[str] = Field(None, description="ID of the event to update")
    newDate: Optional[str] = Field(None, description="New date in YYYY-MM-DD format")
    newTime: Optional[str] = Field(None, description="New start, HH:MM 24h local time")
    newDuration: Optional[int] = Field(None, description="New length in minutes")


class CancelEventArgs(_AgentArgs):
    eventId: Optional[str] = Field(None, description="ID of the event to cancel")


# --- Конверты запросов в формате {"args": {...}} ---

class _AgentEnvelope(BaseModel):
    @field_validator('args', mode='before', check_fields=False)
    @classmethod
    def null_args(cls, v):
        return {} if v is None else v


class CheckAvailabilityRequest(_AgentEnvelope):
    args: CheckAvailabilityArgs = Field(default_factory=CheckAvailabilityArgs)


class CreateEventRequest(_AgentEnvelope):
    args: CreateEventArgs = Field(default_factory=CreateEventArgs)


class UpdateEventRequest(_AgentEnvelope):
    args: UpdateEventArgs = Field(default_factory=UpdateEventArgs)


class CancelEventRequest(_AgentEnvelope):
    args: CancelEventArgs = Field(default_factory=CancelEventArgs)


# --- Ответы ---

class AgentResponse(BaseModel):
    result: str = Field(..., description="Text spoken back to the caller")


class CreateEventResponse(AgentResponse):
    eventId: Optional[str] = Field(None, description="ID of the created Google Calendar event")
    eventLink: Optional[str] = Field(None, description="Link to the event in Google Calendar")


class UpdateEventResponse(AgentResponse):
    eventId: Optional[str] = Field(None, description="ID of the updated event")
