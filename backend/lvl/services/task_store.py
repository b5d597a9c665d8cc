"""
Read access to users and their tasks for prompt context.

Only the prompt-safe user columns are selected; credential columns never
leave the database.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Protocol, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from lvl.core.errors import InvalidIdentifier
from lvl.models.task import Task
from lvl.models.user import User
from lvl.schemas.context import TaskRecord, UserContext, UserPreferences

logger = logging.getLogger(__name__)

UserId = Union[int, str]

# Columns the organizer may read. password_hash and the verification/reset
# tokens are deliberately absent.
SAFE_USER_COLUMNS = (
    User.id,
    User.name,
    User.email,
    User.level,
    User.xp,
    User.total_tasks_completed,
    User.timezone,
    User.daily_goal_xp,
)


def parse_user_id(value: UserId) -> int:
    """
    Validate a user id and return it as the store's integer key.

    Accepts positive ints and strings of ASCII digits.

    Raises:
        InvalidIdentifier: for anything else (bools, blanks, signs, UUIDs...)
    """
    if isinstance(value, bool):
        raise InvalidIdentifier(value)
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, str) and value.isascii() and value.isdigit():
        parsed = int(value)
    else:
        raise InvalidIdentifier(value)
    if parsed <= 0:
        raise InvalidIdentifier(value)
    return parsed


class TaskStore(Protocol):
    """Read interface the context builder depends on."""

    async def get_user(self, user_id: UserId) -> Optional[UserContext]:
        ...

    async def get_tasks_by_owner(self, user_id: UserId) -> List[TaskRecord]:
        ...


class SqlTaskStore:
    """
    TaskStore backed by the SQLAlchemy models.

    Each read opens its own session, so get_user and get_tasks_by_owner
    can be awaited concurrently.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get_user(self, user_id: UserId) -> Optional[UserContext]:
        uid = parse_user_id(user_id)
        async with self._session_factory() as session:
            result = await session.execute(select(*SAFE_USER_COLUMNS).where(User.id == uid))
            row = result.mappings().one_or_none()

        if row is None:
            return None

        return UserContext(
            id=str(row["id"]),
            name=row["name"],
            email=row["email"],
            level=row["level"],
            xp=row["xp"],
            total_tasks_completed=row["total_tasks_completed"],
            preferences=UserPreferences(
                timezone=row["timezone"],
                daily_goal_xp=row["daily_goal_xp"],
            ),
        )

    async def get_tasks_by_owner(self, user_id: UserId) -> List[TaskRecord]:
        uid = parse_user_id(user_id)
        async with self._session_factory() as session:
            result = await session.execute(
                select(Task)
                .where(Task.user_id == uid)
                .order_by(Task.created_at.desc(), Task.id.desc())
            )
            tasks = result.scalars().all()

        return [_to_record(task) for task in tasks]


def _to_record(task: Task) -> TaskRecord:
    return TaskRecord(
        id=str(task.id),
        title=task.title,
        description=task.description,
        priority=task.priority,
        status=task.status,
        task_time=task.task_time,
        due_date=task.due_date,
        completed_at=task.completed_at,
        points=task.points,
        tags=list(task.tags or []),
        created_at=task.created_at,
        updated_at=task.updated_at,
    )


__all__ = ["SAFE_USER_COLUMNS", "SqlTaskStore", "TaskStore", "UserId", "parse_user_id"]
