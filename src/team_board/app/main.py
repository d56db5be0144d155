import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from team_board.app.errors import register_exception_handlers
from team_board.app.middleware.access_log import AccessLogMiddleware
from team_board.app.routes import tasks
from team_board.config import Settings
from team_board.infra.db.database import Database, make_sqlite_url
from team_board.infra.db.task_repo_sql import SQLTaskRepo
from team_board.observability.logging import setup_logging
from team_board.services.task_service import TaskService

logger = logging.getLogger("board.system")


def make_database(settings: Settings) -> Database:
    url = settings.database_url or make_sqlite_url(settings.db_path)
    return Database(url, pool_size=settings.db_pool_size)


def create_app(settings: Optional[Settings] = None, db: Optional[Database] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    setup_logging(settings)
    logger.info("system.start", extra={"category": "system", "event": "system.start"})

    app = FastAPI(title="Team Board")
    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "x-api-key"],
    )
    register_exception_handlers(app)

    # --- database wiring ---
    db = db or make_database(settings)
    app.state.settings = settings
    app.state.db = db
    app.state.task_service = TaskService(SQLTaskRepo(db), default_pushed_by=settings.default_pushed_by)

    # Routers
    app.include_router(tasks.router)

    @app.on_event("startup")
    async def _startup():
        await db.create_schema()
        logger.info(
            "db.ready",
            extra={"category": "system", "event": "db.ready", "driver": db.engine.url.drivername},
        )

    @app.on_event("shutdown")
    async def _shutdown():
        await db.close()
        logger.info("system.stop", extra={"category": "system", "event": "system.stop"})

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app
