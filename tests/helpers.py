from __future__ import annotations

from team_board.domain.task_models import TaskCreate

MANAGER_KEY = "manager-secret"
TEAM_KEY = "team-secret"


def new_task(task_id: str, title: str = "Count the walk-in", **fields) -> TaskCreate:
    """TaskCreate as the service hands it to the repo: id and pushed_by resolved."""
    fields.setdefault("pushed_by", "tests")
    return TaskCreate(id=task_id, title=title, **fields)
