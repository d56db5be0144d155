from __future__ import annotations

from pathlib import Path

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport

from team_board.app.main import create_app
from team_board.config import Settings
from team_board.infra.db.database import Database, make_sqlite_url
from team_board.infra.db.task_repo_sql import SQLTaskRepo
from team_board.services.task_service import TaskService

from helpers import MANAGER_KEY, TEAM_KEY


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """Settings pointing every path at the per-test tmp dir."""
    return Settings(
        db_path=str(tmp_path / "board.db"),
        api_secret_key=MANAGER_KEY,
        team_api_key=TEAM_KEY,
        log_dir=str(tmp_path / "logs"),
    )


@pytest_asyncio.fixture()
async def db(settings: Settings):
    database = Database(make_sqlite_url(settings.db_path))
    await database.create_schema()
    yield database
    await database.close()


@pytest.fixture()
def repo(db: Database) -> SQLTaskRepo:
    return SQLTaskRepo(db)


@pytest.fixture()
def service(repo: SQLTaskRepo, settings: Settings) -> TaskService:
    return TaskService(repo, default_pushed_by=settings.default_pushed_by)


@pytest.fixture()
def app(settings: Settings, db: Database):
    # ASGITransport skips lifespan events; the db fixture already built the schema
    return create_app(settings, db=db)


@pytest_asyncio.fixture()
async def client(app):
    async with httpx.AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
