from __future__ import annotations
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
import logging
from typing import AsyncIterator, Optional, List

from sqlalchemy import CheckConstraint, DateTime, Index, String, Text, case, delete, func, select
from sqlalchemy.exc import DBAPIError, IntegrityError, InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Mapped, mapped_column

from team_board.domain.errors import Conflict, NotFound, StorageUnavailable
from team_board.domain.task_models import (
    Task, TaskCreate, TaskPatch, TaskPriority, TaskStats, TaskStatus, as_utc,
)
from team_board.infra.db.database import Base, Database

logger = logging.getLogger("board.db")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _enum_check(column: str, enum) -> str:
    values = ", ".join(f"'{member.value}'" for member in enum)
    return f"{column} IN ({values})"


class TaskRow(Base):
    __tablename__ = "team_tasks"
    __table_args__ = (
        CheckConstraint(_enum_check("priority", TaskPriority), name="check_priority"),
        CheckConstraint(_enum_check("status", TaskStatus), name="check_status"),
        Index("idx_team_tasks_status", "status"),
        Index("idx_team_tasks_due_date", "due_date"),
        Index("idx_team_tasks_created_at", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    priority: Mapped[str] = mapped_column(String(20), nullable=False, default=TaskPriority.normal.value)
    due_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    assigned_to: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default=TaskStatus.todo.value)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )
    pushed_by: Mapped[str] = mapped_column(String(255), nullable=False)

    def to_domain(self) -> Task:
        return Task(
            id=self.id,
            title=self.title,
            description=self.description,
            priority=TaskPriority(self.priority),
            due_date=as_utc(self.due_date),
            assigned_to=self.assigned_to,
            status=TaskStatus(self.status),
            created_at=as_utc(self.created_at),
            updated_at=as_utc(self.updated_at),
            pushed_by=self.pushed_by,
        )


def _db_value(name: str, value):
    if name in ("priority", "status") and value is not None:
        return value.value
    return value


def _is_connection_failure(exc: DBAPIError) -> bool:
    return isinstance(exc, (OperationalError, InterfaceError)) or exc.connection_invalidated


class SQLTaskRepo:
    """
    Task store over the `team_tasks` table.

    Every method runs in its own session and transaction; nothing is kept
    between calls except the injected Database.
    """

    def __init__(self, db: Database):
        self.db = db

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        try:
            async with self.db.sessionmaker() as session:
                yield session
        except IntegrityError:
            raise
        except DBAPIError as exc:
            if not _is_connection_failure(exc):
                raise
            await self._unavailable(exc, exc.orig)
        except (OSError, PoolTimeoutError) as exc:
            # driver-level connect failures (refused, unreachable, timed out)
            # and pool checkout timeouts never reach the DBAPI wrapper
            await self._unavailable(exc, exc)

    async def _unavailable(self, exc: BaseException, cause: object) -> None:
        logger.error(
            "db.unavailable",
            extra={
                "category": "db",
                "event": "db.unavailable",
                "error_type": type(cause).__name__,
                "error": str(cause),
            },
        )
        await self.db.reset()
        raise StorageUnavailable() from exc

    async def create(self, task: TaskCreate) -> Task:
        """Insert a new row; `task.id` and `task.pushed_by` must already be set."""
        now = _utcnow()
        row = TaskRow(
            id=task.id,
            title=task.title,
            description=task.description,
            priority=task.priority.value,
            due_date=task.due_date,
            assigned_to=task.assigned_to,
            status=task.status.value,
            created_at=now,
            updated_at=now,
            pushed_by=task.pushed_by,
        )
        try:
            async with self._session() as session:
                session.add(row)
                await session.commit()
        except IntegrityError as exc:
            raise Conflict(f"Task with id '{task.id}' already exists") from exc
        return row.to_domain()

    async def get(self, task_id: str) -> Optional[Task]:
        async with self._session() as session:
            row = await session.get(TaskRow, task_id)
            return row.to_domain() if row else None

    async def list(self, status: Optional[TaskStatus] = None) -> List[Task]:
        stmt = select(TaskRow)
        if status is not None:
            stmt = stmt.where(TaskRow.status == status.value)
        stmt = stmt.order_by(TaskRow.created_at.desc())
        async with self._session() as session:
            res = await session.execute(stmt)
            rows = res.scalars().all()
            return [r.to_domain() for r in rows]

    async def update(self, task_id: str, patch: TaskPatch) -> Task:
        changes = patch.changes()
        async with self._session() as session:
            row = await session.get(TaskRow, task_id)
            if row is None:
                raise NotFound()
            if not changes:
                return row.to_domain()

            for name, value in changes.items():
                setattr(row, name, _db_value(name, value))
            # strictly after the previous stamp even on a coarse clock
            previous = as_utc(row.updated_at)
            row.updated_at = max(_utcnow(), previous + timedelta(microseconds=1))
            await session.commit()
            return row.to_domain()

    async def delete(self, task_id: str) -> bool:
        async with self._session() as session:
            res = await session.execute(delete(TaskRow).where(TaskRow.id == task_id))
            await session.commit()
            return (res.rowcount or 0) > 0

    async def stats(self) -> TaskStats:
        def _count(condition):
            return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)

        stmt = select(
            func.count(TaskRow.id).label("total"),
            _count(TaskRow.status == TaskStatus.todo.value).label("todo"),
            _count(TaskRow.status == TaskStatus.in_progress.value).label("in_progress"),
            _count(TaskRow.status == TaskStatus.completed.value).label("completed"),
            _count(
                (TaskRow.due_date < _utcnow())
                & (TaskRow.status != TaskStatus.completed.value)
            ).label("overdue"),
        )
        async with self._session() as session:
            row = (await session.execute(stmt)).one()
            return TaskStats(**{k: int(v or 0) for k, v in row._mapping.items()})
