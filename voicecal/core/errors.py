# voicecal/core/errors.py
"""
Exception handlers shared by all routers.

- 404 (and 405 on a known path) → ``{"error": "Not found", "path": ..., "availableEndpoints": [...]}``
- malformed agent payload → 200 with a guidance ``result``
- anything unhandled → 500 ``{"error": "Internal server error", ...}``
"""
import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exception_handlers import http_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from voicecal.agent.router import AGENT_PATHS

logger = logging.getLogger(__name__)

AVAILABLE_ENDPOINTS = ["/", "/health", "/ready", *AGENT_PATHS]

INVALID_PAYLOAD = (
    "I couldn't understand some of the appointment details. "
    "Could you repeat the date, time, and length?"
)


async def _handle_http_exception(request: Request, exc: StarletteHTTPException):
    # неверный метод на известном пути отвечает так же, как неизвестный путь
    if exc.status_code in (404, 405):
        return JSONResponse(
            status_code=404,
            content={
                "error": "Not found",
                "path": request.url.path,
                "availableEndpoints": AVAILABLE_ENDPOINTS,
            },
        )
    return await http_exception_handler(request, exc)


async def _handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info(f"Invalid payload on {request.url.path}: {exc.errors()}")
    if request.url.path in AGENT_PATHS:
        return JSONResponse(status_code=200, content={"result": INVALID_PAYLOAD})
    return JSONResponse(status_code=422, content={"detail": jsonable_encoder(exc.errors())})


class CatchAllErrorMiddleware(BaseHTTPMiddleware):
    """Turns any unhandled exception into a JSON 500; the process keeps serving."""

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception:
            logger.error(
                f"Unhandled exception on {request.method} {request.url.path}",
                exc_info=True,
            )
            return JSONResponse(
                status_code=500,
                content={
                    "error": "Internal server error",
                    "message": "Something went wrong processing your request",
                },
            )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, _handle_http_exception)
    app.add_exception_handler(RequestValidationError, _handle_validation_error)
    app.add_middleware(CatchAllErrorMiddleware)
