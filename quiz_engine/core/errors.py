"""Attempt engine error taxonomy and their HTTP mapping."""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from quiz_engine.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)


class QuizEngineError(Exception):
    """Base class for failures raised by the attempt engine."""

    error_code = "quiz_engine_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(QuizEngineError):
    """Quiz or attempt is absent, or not owned by the caller.

    The two cases share one error so callers cannot probe for existence.
    """

    error_code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class InvalidArgumentError(QuizEngineError):
    """Malformed request input or a structurally invalid quiz."""

    error_code = "invalid_argument"
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidStateError(QuizEngineError):
    """Operation is not allowed in the attempt's current status."""

    error_code = "invalid_state"
    status_code = status.HTTP_409_CONFLICT


async def quiz_engine_error_handler(request: Request, exc: QuizEngineError) -> JSONResponse:
    logger.debug("%s %s → %s: %s", request.method, request.url.path, exc.error_code, exc.message)
    body = ErrorResponse(error_code=exc.error_code, message=exc.message, details=exc.details)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


def register_exception_handlers(app: FastAPI) -> None:
    """Map engine errors onto the standard error envelope."""
    app.add_exception_handler(QuizEngineError, quiz_engine_error_handler)  # type: ignore[arg-type]
