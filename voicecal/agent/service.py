# voicecal/agent/service.py
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo

from googleapiclient.errors import HttpError

from voicecal.calendar import scheduling
from voicecal.calendar.service import GoogleCalendarService

from .schemas import CancelEventArgs, CheckAvailabilityArgs, CreateEventArgs, UpdateEventArgs

logger = logging.getLogger(__name__)

# --- Фразы для голосового агента ---

NOT_READY = "The calendar service is still initializing. Please try again in a moment."

AVAILABILITY_MISSING_FIELDS = (
    "I need a date, start time, and end time to check availability. "
    "Could you please provide those details?"
)
AVAILABILITY_BAD_WINDOW = (
    "I couldn't understand that time window. Please give me the date and a start time "
    "that comes before the end time."
)
AVAILABILITY_FAILED = "I encountered an issue checking the calendar. Please try again."

CREATE_MISSING_FIELDS = (
    "To create an appointment, I need a title, date, and start time. "
    "What would you like to schedule?"
)
CREATE_BAD_DURATION = "The appointment length needs to be a positive number of minutes. How long should it be?"
CREATE_BAD_DATETIME = "I couldn't understand that date or time. Could you say it again?"
CREATE_CONFLICT = (
    "There's already an appointment scheduled at that time. "
    "Would you like me to find another available time slot?"
)
CREATE_FAILED = "I couldn't create the appointment. Please check the details and try again."

UPDATE_MISSING_FIELDS = (
    "To update an appointment, I need the event ID and at least one thing to change "
    "(date, time, or duration)."
)
UPDATE_BAD_VALUES = "I couldn't understand the new date, time, or duration. Could you say it again?"
UPDATE_FAILED = "I couldn't update the appointment. Please make sure you have the correct event ID."

CANCEL_MISSING_FIELDS = (
    "To cancel an appointment, I need the event ID. Which appointment would you like to cancel?"
)
CANCEL_SUCCESS = "I've successfully cancelled your appointment. Is there anything else I can help you with?"
CANCEL_FAILED = "I couldn't cancel the appointment. Please verify the appointment details."

DEFAULT_REMINDERS = {
    'useDefault': False,
    'overrides': [
        {'method': 'email', 'minutes': 24 * 60},
        {'method': 'popup', 'minutes': 30},
    ],
}


@dataclass
class AgentReply:
    """
    Outcome of one agent operation.

    ``result`` is spoken to the caller; ``error`` keeps the diagnostic detail
    of a provider failure and is only logged, never returned.
    """
    result: str
    event_id: Optional[str] = None
    event_link: Optional[str] = None
    error: Optional[str] = None


def describe_provider_error(e: Exception) -> str:
    if isinstance(e, HttpError):
        details = e.content.decode('utf-8', errors='replace') if e.content else str(e)
        status_code = e.resp.status if hasattr(e, 'resp') else 'unknown'
        return f"Google API error {status_code}: {details}"
    return f"{type(e).__name__}: {e}"


class SchedulingAgentService:
    """
    Translates voice-agent function calls into calendar operations.

    Each method validates the required arguments before touching the
    provider and converts every provider failure into a stable apology.
    """

    def __init__(self, calendar: Optional[GoogleCalendarService], timezone: Optional[ZoneInfo],
                 default_description: str = ''):
        self.calendar = calendar
        self.timezone = timezone
        self.default_description = default_description

    @property
    def ready(self) -> bool:
        return self.calendar is not None and self.timezone is not None

    @property
    def time_zone_name(self) -> str:
        return self.timezone.key if self.timezone else ''

    def _provider_failure(self, action: str, e: Exception, message: str) -> AgentReply:
        error = describe_provider_error(e)
        logger.error(f"Calendar error during '{action}': {error}", exc_info=True)
        return AgentReply(result=message, error=error)

    # --- Операции ---

    def check_availability(self, args: CheckAvailabilityArgs) -> AgentReply:
        if not (args.date and args.startTime and args.endTime):
            return AgentReply(result=AVAILABILITY_MISSING_FIELDS)
        if not self.ready:
            return AgentReply(result=NOT_READY)

        try:
            window_start, window_end = scheduling.availability_window(
                args.date, args.startTime, args.endTime, self.timezone
            )
        except ValueError as e:
            logger.info(f"Rejected availability window: {e}")
            return AgentReply(result=AVAILABILITY_BAD_WINDOW)

        logger.info(f"Checking availability for {args.date} from {args.startTime} to {args.endTime}")
        try:
            events = self.calendar.list_events(window_start, window_end, time_zone=self.time_zone_name)
        except Exception as e:
            return self._provider_failure("check_availability", e, AVAILABILITY_FAILED)

        if not events:
            return AgentReply(
                result=f"Great news! Your calendar is completely free on {args.date} "
                       f"between {args.startTime} and {args.endTime}."
            )

        plural = 's' if len(events) > 1 else ''
        summaries = scheduling.describe_events(events, self.timezone)
        return AgentReply(
            result=f"On {args.date}, you have {len(events)} appointment{plural}: {summaries}. "
                   f"Would you like to schedule around these times?"
        )

    def create_event(self, args: CreateEventArgs) -> AgentReply:
        if not (args.title and args.date and args.startTime):
            return AgentReply(result=CREATE_MISSING_FIELDS)
        duration = args.duration if args.duration is not None else scheduling.DEFAULT_DURATION_MINUTES
        if duration <= 0:
            return AgentReply(result=CREATE_BAD_DURATION)
        if not self.ready:
            return AgentReply(result=NOT_READY)

        try:
            start, end = scheduling.appointment_bounds(args.date, args.startTime, duration, self.timezone)
        except ValueError as e:
            logger.info(f"Rejected appointment time: {e}")
            return AgentReply(result=CREATE_BAD_DATETIME)

        logger.info(f"Creating event: {args.title} on {args.date} at {args.startTime} for {duration} minutes")
        try:
            # Проверка и вставка — два отдельных запроса, гонка между ними допускается
            conflicts = self.calendar.list_events(start, end, time_zone=self.time_zone_name)
            if conflicts:
                logger.info(f"Refusing to create '{args.title}': {len(conflicts)} conflicting event(s)")
                return AgentReply(result=CREATE_CONFLICT)

            event_body: Dict[str, Any] = {
                'summary': args.title,
                'description': args.description or self.default_description,
                **scheduling.event_time_body(start, end, self.time_zone_name),
                'reminders': DEFAULT_REMINDERS,
            }
            if args.attendeeEmail:
                event_body['attendees'] = [{'email': args.attendeeEmail}]

            created_event = self.calendar.insert_event(
                event_body,
                send_updates='all' if args.attendeeEmail else 'none',
            )
        except Exception as e:
            return self._provider_failure("create_event", e, CREATE_FAILED)

        sentences = [
            f"Perfect! I've scheduled \"{args.title}\" on {args.date} at "
            f"{scheduling.format_spoken_time(start)} for {duration} minutes."
        ]
        if args.attendeeEmail:
            sentences.append(f"An invitation has been sent to {args.attendeeEmail}.")
        sentences.append("You'll receive a reminder 30 minutes before.")

        return AgentReply(
            result=" ".join(sentences),
            event_id=created_event.get('id'),
            event_link=created_event.get('htmlLink'),
        )

    def update_event(self, args: UpdateEventArgs) -> AgentReply:
        if not args.eventId or (not args.newDate and not args.newTime and args.newDuration is None):
            return AgentReply(result=UPDATE_MISSING_FIELDS)
        if args.newDuration is not None and args.newDuration <= 0:
            return AgentReply(result=UPDATE_BAD_VALUES)
        if (args.newDate and not scheduling.is_valid_date(args.newDate)) or \
                (args.newTime and not scheduling.is_valid_time(args.newTime)):
            return AgentReply(result=UPDATE_BAD_VALUES)
        if not self.ready:
            return AgentReply(result=NOT_READY)

        logger.info(f"Updating event: {args.eventId}")
        try:
            existing_event = self.calendar.get_event(args.eventId)
            start, end = scheduling.reschedule(
                existing_event, self.timezone,
                new_date=args.newDate, new_time=args.newTime, new_duration=args.newDuration,
            )
            event_body = dict(existing_event)
            event_body.update(scheduling.event_time_body(start, end, self.time_zone_name))
            updated_event = self.calendar.update_event(args.eventId, event_body)
        except Exception as e:
            return self._provider_failure(f"update_event:{args.eventId}", e, UPDATE_FAILED)

        sentences = ["I've successfully updated your appointment."]
        if args.newDate:
            sentences.append(f"New date: {args.newDate}.")
        if args.newTime:
            sentences.append(f"New time: {args.newTime}.")
        if args.newDuration is not None:
            sentences.append(f"New duration: {args.newDuration} minutes.")

        return AgentReply(result=" ".join(sentences), event_id=updated_event.get('id') or args.eventId)

    def cancel_event(self, args: CancelEventArgs) -> AgentReply:
        if not args.eventId:
            return AgentReply(result=CANCEL_MISSING_FIELDS)
        if not self.ready:
            return AgentReply(result=NOT_READY)

        logger.info(f"Cancelling event: {args.eventId}")
        try:
            self.calendar.delete_event(args.eventId)
        except HttpError as e:
            # 410 Gone — событие уже удалено, считаем успехом
            if hasattr(e, 'resp') and e.resp.status == 410:
                logger.warning(f"Event {args.eventId} was already deleted (410 Gone). Returning success.")
                return AgentReply(result=CANCEL_SUCCESS)
            return self._provider_failure(f"cancel_event:{args.eventId}", e, CANCEL_FAILED)
        except Exception as e:
            return self._provider_failure(f"cancel_event:{args.eventId}", e, CANCEL_FAILED)

        return AgentReply(result=CANCEL_SUCCESS)
