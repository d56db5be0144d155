from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from enum import Enum
from datetime import datetime, timezone
from typing import Any, Optional
import uuid

class TaskStatus(str, Enum):
    todo = "todo"
    in_progress = "in_progress"
    completed = "completed"

    def next(self) -> "TaskStatus":
        """Next state on the board: todo -> in_progress -> completed -> todo."""
        return _STATUS_CYCLE[self]

_STATUS_CYCLE = {
    TaskStatus.todo: TaskStatus.in_progress,
    TaskStatus.in_progress: TaskStatus.completed,
    TaskStatus.completed: TaskStatus.todo,
}

class TaskPriority(str, Enum):
    low = "low"
    normal = "normal"
    high = "high"
    urgent = "urgent"


RESERVED_TASK_IDS = frozenset({"stats"})


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # naive values are taken to be UTC already
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class TaskCreate(BaseModel):
    id: Optional[str] = Field(default=None, min_length=1, max_length=255)
    title: str = Field(max_length=500)
    description: Optional[str] = None
    priority: TaskPriority = TaskPriority.normal
    due_date: Optional[datetime] = None
    assigned_to: Optional[str] = Field(default=None, max_length=255)
    status: TaskStatus = TaskStatus.todo
    pushed_by: Optional[str] = Field(default=None, max_length=255)

    @field_validator("title")
    @classmethod
    def _strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title is required")
        return v

    @field_validator("id")
    @classmethod
    def _routable_id(cls, v: Optional[str]) -> Optional[str]:
        # /api/tasks/stats and /api/tasks/{id} share one path segment
        if v is not None and (v in RESERVED_TASK_IDS or "/" in v):
            raise ValueError(f"'{v}' cannot be used as a task id")
        return v

    @field_validator("description", "assigned_to", "pushed_by", mode="before")
    @classmethod
    def _blank(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("due_date")
    @classmethod
    def _utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v)


class TaskPatch(BaseModel):
    """
    Partial update. Only the fields a caller actually sent are applied;
    anything else in the payload is ignored.
    """
    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = Field(default=None, min_length=1, max_length=500)
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None
    assigned_to: Optional[str] = Field(default=None, max_length=255)
    status: Optional[TaskStatus] = None
    pushed_by: Optional[str] = Field(default=None, min_length=1, max_length=255)

    @field_validator("title", "priority", "status", "pushed_by")
    @classmethod
    def _not_null(cls, v: Any, info: ValidationInfo) -> Any:
        if v is None:
            raise ValueError(f"{info.field_name} may not be null")
        if isinstance(v, str) and not v.strip():
            raise ValueError(f"{info.field_name} may not be empty")
        return v.strip() if info.field_name == "title" else v

    @field_validator("description", "assigned_to", mode="before")
    @classmethod
    def _blank(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("due_date")
    @classmethod
    def _utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v)

    def changes(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in self.model_fields_set}


class Task(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    priority: TaskPriority = TaskPriority.normal
    due_date: Optional[datetime] = None
    assigned_to: Optional[str] = None
    status: TaskStatus = TaskStatus.todo
    created_at: datetime
    updated_at: datetime
    pushed_by: str


class TaskStats(BaseModel):
    total: int = 0
    todo: int = 0
    in_progress: int = 0
    completed: int = 0
    overdue: int = 0


def new_task_id() -> str:
    return f"task_{uuid.uuid4().hex}"
