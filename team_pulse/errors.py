"""
Error taxonomy and HTTP error mapping for the Team Pulse service.

Services raise the domain errors defined here; the handlers registered by
``register_error_handlers`` turn every failure into the
``{"error": {"code", "message", "details"?}}`` envelope.
"""

import logging
from http import HTTPStatus
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "An unexpected error occurred"


class TeamPulseError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationFailed(TeamPulseError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_ERROR"


class TeamMemberNotFound(TeamPulseError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "TEAM_MEMBER_NOT_FOUND"

    def __init__(self, team_member_id: int) -> None:
        super().__init__(f"Team member with ID {team_member_id} does not exist")
        self.team_member_id = team_member_id


class GoalNotFound(TeamPulseError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "GOAL_NOT_FOUND"

    def __init__(self, goal_id: int) -> None:
        super().__init__(f"Goal with ID {goal_id} does not exist")
        self.goal_id = goal_id


def error_body(code: str, message: str, details: Any = None) -> dict[str, Any]:
    """Build the error envelope."""
    error: dict[str, Any] = {"code": code, "message": message}
    if details is not None:
        error["details"] = details
    return {"error": error}


def _render(request: Request, exc: TeamPulseError) -> JSONResponse:
    logger.warning(
        "%s %s failed: %s (%s)", request.method, request.url.path, exc.code, exc
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.code, exc.message, exc.details),
    )


def register_error_handlers(app: FastAPI) -> None:
    """Install the exception handlers that produce the error envelope."""

    @app.exception_handler(TeamPulseError)
    async def team_pulse_error_handler(
        request: Request, exc: TeamPulseError
    ) -> JSONResponse:
        return _render(request, exc)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = jsonable_encoder(exc.errors())
        return _render(
            request, ValidationFailed("Invalid request data", {"errors": errors})
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        # Routing failures (unknown path, wrong method) raised by Starlette
        code = HTTPStatus(exc.status_code).name
        logger.warning(
            "%s %s failed: %s", request.method, request.url.path, exc.status_code
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(code, str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        # Full detail stays in the server log
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body(TeamPulseError.code, INTERNAL_ERROR_MESSAGE),
        )
