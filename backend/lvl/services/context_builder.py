"""
Context Builder - assembles the RetrievedContext handed to the prompt formatter.

Reads the user and their tasks concurrently, orders tasks newest-created
first, and derives overdue flags against one snapshot instant.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from lvl.core.errors import UserNotFound
from lvl.models.task import TaskStatus
from lvl.schemas.context import RetrievedContext, TaskContext, TaskRecord
from lvl.services.task_store import TaskStore, UserId, parse_user_id

logger = logging.getLogger(__name__)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC (SQLite drops tzinfo on read)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_task_overdue(due_date: Optional[datetime], status: TaskStatus, now: datetime) -> bool:
    """A task is overdue iff it has a due date strictly before now and is not completed."""
    if due_date is None or status == TaskStatus.COMPLETED:
        return False
    return as_utc(due_date) < as_utc(now)


def build_task_context(record: TaskRecord, now: datetime) -> TaskContext:
    return TaskContext(
        **record.model_dump(),
        is_overdue=is_task_overdue(record.due_date, record.status, now),
    )


def order_newest_first(records: Iterable[TaskRecord]) -> List[TaskRecord]:
    # sorted() is stable, so the store's tie-break order survives
    return sorted(records, key=lambda r: as_utc(r.created_at), reverse=True)


async def retrieve_complete_context(
    store: TaskStore,
    user_id: UserId,
    now: Optional[datetime] = None,
) -> RetrievedContext:
    """
    Build the full prompt context for one user.

    Args:
        store: Task/user read accessor
        user_id: Authenticated principal id
        now: Snapshot instant for overdue detection (defaults to current UTC time)

    Returns:
        RetrievedContext whose stats are folded from its own task list

    Raises:
        InvalidIdentifier: user_id is not a valid store id
        UserNotFound: no user record exists
    """
    uid = parse_user_id(user_id)
    snapshot = now or datetime.now(timezone.utc)

    user_read = asyncio.ensure_future(store.get_user(uid))
    tasks_read = asyncio.ensure_future(store.get_tasks_by_owner(uid))
    try:
        user, records = await asyncio.gather(user_read, tasks_read)
    except BaseException:
        # Either read failing aborts the build and cancels the other read
        for read in (user_read, tasks_read):
            read.cancel()
        await asyncio.gather(user_read, tasks_read, return_exceptions=True)
        raise

    if user is None:
        raise UserNotFound(uid)

    tasks = [build_task_context(record, snapshot) for record in order_newest_first(records)]
    context = RetrievedContext(user=user, tasks=tasks)

    logger.info(
        "Retrieved context for user_id=%s: %d tasks (%d overdue)",
        uid,
        context.stats.total,
        context.stats.overdue,
    )
    return context


__all__ = [
    "as_utc",
    "build_task_context",
    "is_task_overdue",
    "order_newest_first",
    "retrieve_complete_context",
]
