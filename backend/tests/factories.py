"""
Builders and fakes shared across the test suite.
"""
from collections import deque
from datetime import datetime, timedelta, timezone
from typing import Any, List, Optional

from lvl.agent.llm_factory import get_backend_config
from lvl.agent.providers import AIProvider
from lvl.core.llm_config import LLMSettings
from lvl.models.task import TaskPriority, TaskStatus
from lvl.schemas.context import TaskContext, TaskRecord, UserContext, UserPreferences

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def make_user(**overrides) -> UserContext:
    data = dict(
        id="1",
        name="Ada Lovelace",
        email="ada@example.com",
        level=3,
        xp=240,
        total_tasks_completed=12,
        preferences=UserPreferences(timezone="Europe/London", daily_goal_xp=150),
    )
    data.update(overrides)
    return UserContext(**data)


def make_record(
    task_id: str,
    status: TaskStatus = TaskStatus.PENDING,
    created_at: Optional[datetime] = None,
    **overrides,
) -> TaskRecord:
    created_at = created_at or NOW - timedelta(days=1)
    data = dict(
        id=task_id,
        title=f"Task {task_id}",
        priority=TaskPriority.MEDIUM,
        status=status,
        points=10,
        tags=[],
        created_at=created_at,
        updated_at=created_at,
    )
    data.update(overrides)
    return TaskRecord(**data)


def make_task(
    task_id: str,
    status: TaskStatus = TaskStatus.PENDING,
    created_at: Optional[datetime] = None,
    is_overdue: bool = False,
    **overrides,
) -> TaskContext:
    record = make_record(task_id, status, created_at, **overrides)
    return TaskContext(**record.model_dump(), is_overdue=is_overdue)


class FakeStore:
    """In-memory TaskStore."""

    def __init__(self, user: Optional[UserContext] = None, records: Optional[List[TaskRecord]] = None):
        self.user = user
        self.records = list(records or [])
        self.calls: List[str] = []
        self.task_error: Optional[Exception] = None

    async def get_user(self, user_id):
        self.calls.append("get_user")
        if self.user is None or self.user.id != str(user_id):
            return None
        return self.user

    async def get_tasks_by_owner(self, user_id):
        self.calls.append("get_tasks_by_owner")
        if self.task_error is not None:
            raise self.task_error
        return list(self.records)


class FakeBackend:
    """
    Scripted ModelBackend.

    Each call consumes the next item in `responses` (falling back to
    `default` once empty). Exceptions are raised, async callables are
    awaited, anything else is returned as the raw content.
    """

    def __init__(self, provider: AIProvider, settings: LLMSettings):
        config = get_backend_config(provider, settings)
        if not config.api_key:
            raise ValueError(f"{provider.value} provider requires {config.env_var} environment variable")
        self.provider = provider
        self.responses: deque = deque()
        self.default: Any = "Here is your plan."
        self.calls: List[dict] = []
        self.closed = False

    def script(self, *items: Any) -> None:
        self.responses.extend(items)

    async def complete(self, system_prompt, user_message, *, temperature=None, max_tokens=None):
        self.calls.append(
            {
                "system_prompt": system_prompt,
                "user_message": user_message,
                "temperature": temperature,
                "max_tokens": max_tokens,
            }
        )
        item = self.responses.popleft() if self.responses else self.default
        if isinstance(item, BaseException):
            raise item
        if callable(item):
            return await item()
        return item

    async def aclose(self):
        self.closed = True
