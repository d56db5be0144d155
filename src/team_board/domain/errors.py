from __future__ import annotations


class TaskBoardError(Exception):
    """Base for errors that map onto an HTTP status with a caller-safe message."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(TaskBoardError):
    status_code = 400
    default_message = "Invalid request"


class Unauthorized(TaskBoardError):
    status_code = 401
    default_message = "Unauthorized - Invalid API key"


class NotFound(TaskBoardError):
    status_code = 404
    default_message = "Task not found"


class Conflict(TaskBoardError):
    status_code = 409
    default_message = "Task already exists"


class StorageUnavailable(TaskBoardError):
    status_code = 500
    default_message = "Storage unavailable"
