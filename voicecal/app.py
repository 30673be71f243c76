# voicecal/app.py
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from voicecal.agent.router import router as agent_router
from voicecal.core.config import Settings, settings as default_settings
from voicecal.core.errors import register_error_handlers
from voicecal.core.state import CalendarState, init_calendar_state
from voicecal.health.router import router as health_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Builds the calendar handle once per process unless one was injected."""
    settings: Settings = app.state.settings
    logger.info(
        f"Starting {settings.SERVICE_NAME}: port={settings.PORT}, "
        f"hasServiceAccount={settings.has_service_account}, "
        f"calendarId={settings.GOOGLE_CALENDAR_ID}, timezone={settings.TIMEZONE}"
    )
    if getattr(app.state, "calendar_state", None) is None:
        # Сборка клиента и проверочный запрос блокирующие — выносим из event loop
        app.state.calendar_state = await asyncio.to_thread(init_calendar_state, settings)

    state: CalendarState = app.state.calendar_state
    if state.ready and not state.init_error:
        logger.info("Calendar handle ready")
    else:
        logger.warning(f"Serving without a verified calendar: {state.init_error}")

    yield

    logger.info("Shutting down")


def create_app(
    settings: Optional[Settings] = None,
    calendar_state: Optional[CalendarState] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    ``calendar_state`` lets tests inject a prepared handle; otherwise it is
    built from ``settings`` during lifespan startup.
    """
    settings = settings or default_settings

    app = FastAPI(
        title="Voice Agent Calendar Bridge",
        description="Handles voice agent function calls via Google Calendar.",
        version=settings.SERVICE_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.calendar_state = calendar_state

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    logger.info("Including routers...")
    app.include_router(health_router)
    app.include_router(agent_router)

    return app
