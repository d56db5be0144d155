import logging
from typing import List, Optional
from team_board.config import Settings
from team_board.domain.errors import NotFound
from team_board.domain.task_models import Task, TaskCreate, TaskPatch, TaskStats, TaskStatus, new_task_id

logger = logging.getLogger("board.tasks")

class TaskService:
    def __init__(self, repo, default_pushed_by: str = Settings.default_pushed_by):
        self.repo = repo
        self.default_pushed_by = default_pushed_by

    async def create_task(self, data: TaskCreate) -> Task:
        data = data.model_copy(
            update={
                "id": data.id or new_task_id(),
                "pushed_by": data.pushed_by or self.default_pushed_by,
            }
        )
        saved = await self.repo.create(data)
        logger.info(
            "task.create",
            extra={
                "category": "tasks",
                "event": "task.create",
                "task_id": saved.id,
                "title": saved.title,
                "pushed_by": saved.pushed_by,
            },
        )
        return saved

    async def get_task(self, task_id: str) -> Optional[Task]:
        return await self.repo.get(task_id)

    async def require_task(self, task_id: str) -> Task:
        task = await self.repo.get(task_id)
        if task is None:
            raise NotFound()
        return task

    async def list_tasks(self, status: Optional[TaskStatus] = None) -> List[Task]:
        return await self.repo.list(status)

    async def update_task(self, task_id: str, patch: TaskPatch) -> Task:
        task = await self.repo.update(task_id, patch)
        logger.info(
            "task.update",
            extra={
                "category": "tasks",
                "event": "task.update",
                "task_id": task_id,
                "fields": sorted(patch.changes()),
            },
        )
        return task

    async def advance_status(self, task_id: str) -> Task:
        current = await self.require_task(task_id)
        target = current.status.next()
        task = await self.repo.update(task_id, TaskPatch(status=target))
        logger.info(
            "task.advance",
            extra={
                "category": "tasks",
                "event": "task.advance",
                "task_id": task_id,
                "from": current.status.value,
                "to": target.value,
            },
        )
        return task

    async def delete_task(self, task_id: str) -> bool:
        deleted = await self.repo.delete(task_id)
        logger.info(
            "task.delete",
            extra={"category": "tasks", "event": "task.delete", "task_id": task_id, "deleted": deleted},
        )
        return deleted

    async def get_stats(self) -> TaskStats:
        return await self.repo.stats()
