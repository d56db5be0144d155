from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from team_board.domain.errors import TaskBoardError

logger = logging.getLogger("board.errors")

_FIELD_LABELS = {"title": "Title", "id": "Task ID"}


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    if first.get("type") == "json_invalid":
        return "Invalid JSON body"

    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "header")]
    field = loc[-1] if loc else None
    if first.get("type") == "missing":
        return f"{_FIELD_LABELS.get(field, field)} is required" if field else "Request body is required"

    msg = str(first.get("msg", "Invalid request")).removeprefix("Value error, ")
    return f"{field}: {msg}" if field and field.lower() not in msg.lower() else msg


def _log_failure(request: Request, exc: BaseException, cause: BaseException) -> None:
    logger.error(
        "request.failed",
        exc_info=cause,
        extra={
            "category": "errors",
            "event": "request.failed",
            "error_type": type(exc).__name__,
            "path": request.url.path,
            "request_id": getattr(request.state, "request_id", None),
        },
    )


async def unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort 500; the cause goes to the log, never to the caller."""
    _log_failure(request, exc, exc)
    return error_response(500, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(TaskBoardError)
    async def _board_error(request: Request, exc: TaskBoardError):
        if exc.status_code >= 500:
            _log_failure(request, exc, exc.__cause__ or exc)
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        return error_response(400, describe_validation_error(exc))

    app.add_exception_handler(SQLAlchemyError, unexpected_error)
    app.add_exception_handler(Exception, unexpected_error)
