from typing import List, Optional

import pydantic
from fastapi import APIRouter, Depends, Query, Request
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel

from team_board.app.security import require_api_key
from team_board.domain.errors import NotFound, ValidationError
from team_board.domain.task_models import Task, TaskCreate, TaskPatch, TaskStats, TaskStatus
from team_board.services.task_service import TaskService

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


class TaskListResponse(BaseModel):
    success: bool = True
    tasks: List[Task]
    count: int


class TaskResponse(BaseModel):
    success: bool = True
    task: Task


class TaskCreatedResponse(TaskResponse):
    message: str = "Task pushed to team board"


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class StatsResponse(BaseModel):
    success: bool = True
    stats: TaskStats


def get_service(request: Request) -> TaskService:
    return request.app.state.task_service


def _status_filter(raw: Optional[str]) -> Optional[TaskStatus]:
    if not raw:
        return None
    try:
        return TaskStatus(raw)
    except ValueError:
        allowed = ", ".join(s.value for s in TaskStatus)
        raise ValidationError(f"Invalid status filter '{raw}' (expected one of: {allowed})") from None


def _require_id(task_id: Optional[str]) -> str:
    if not task_id or not task_id.strip():
        raise ValidationError("Task ID required")
    return task_id


@router.get("", response_model=TaskListResponse)
async def list_tasks(
    status: Optional[str] = Query(default=None),
    svc: TaskService = Depends(get_service),
):
    tasks = await svc.list_tasks(_status_filter(status))
    return TaskListResponse(tasks=tasks, count=len(tasks))


@router.get("/stats", response_model=StatsResponse)
async def task_stats(svc: TaskService = Depends(get_service)):
    return StatsResponse(stats=await svc.get_stats())


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(task_id: str, svc: TaskService = Depends(get_service)):
    return TaskResponse(task=await svc.require_task(task_id))


async def _read_create_payload(request: Request) -> TaskCreate:
    try:
        body = await request.json()
    except ValueError:
        raise ValidationError("Invalid JSON body") from None
    try:
        return TaskCreate.model_validate(body)
    except pydantic.ValidationError as exc:
        raise RequestValidationError(exc.errors()) from None


# The body is read by hand so the key is checked before anything is parsed.
@router.post("", response_model=TaskCreatedResponse, dependencies=[Depends(require_api_key)])
async def create_task(request: Request, svc: TaskService = Depends(get_service)):
    payload = await _read_create_payload(request)
    return TaskCreatedResponse(task=await svc.create_task(payload))


# No API key here: any team member may move a task along the board.
@router.put("", response_model=TaskResponse)
async def update_task(
    patch: TaskPatch,
    task_id: Optional[str] = Query(default=None, alias="id"),
    svc: TaskService = Depends(get_service),
):
    return TaskResponse(task=await svc.update_task(_require_id(task_id), patch))


@router.post("/{task_id}/advance", response_model=TaskResponse)
async def advance_task(task_id: str, svc: TaskService = Depends(get_service)):
    return TaskResponse(task=await svc.advance_status(task_id))


@router.delete("", response_model=MessageResponse, dependencies=[Depends(require_api_key)])
async def delete_task(
    task_id: Optional[str] = Query(default=None, alias="id"),
    svc: TaskService = Depends(get_service),
):
    if not await svc.delete_task(_require_id(task_id)):
        raise NotFound()
    return MessageResponse(message="Task deleted")
