"""
Prompt-safe snapshots of a user and their tasks.

These are built fresh for every organizer request and never persisted.
"""
from datetime import datetime
from typing import List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, computed_field

from lvl.models.task import TaskPriority, TaskStatus


class UserPreferences(BaseModel):
    model_config = ConfigDict(frozen=True)

    timezone: str = "UTC"
    daily_goal_xp: int = Field(default=100, ge=0)


class UserContext(BaseModel):
    """Profile summary of a principal. Holds no credentials or tokens."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    email: str
    level: int = Field(default=1, ge=1)
    xp: int = Field(default=0, ge=0)
    total_tasks_completed: int = Field(default=0, ge=0)
    preferences: UserPreferences = Field(default_factory=UserPreferences)


class TaskRecord(BaseModel):
    """A task as read from the store."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: Optional[str] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.PENDING
    task_time: Optional[datetime] = None
    due_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    points: int = Field(default=10, ge=0)
    tags: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class TaskContext(TaskRecord):
    """A task plus the overdue flag derived at read time."""

    is_overdue: bool = False


class ContextStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: int
    pending: int
    in_progress: int
    completed: int
    overdue: int

    @classmethod
    def from_tasks(cls, tasks: Sequence[TaskContext]) -> "ContextStats":
        """Fold over the task list; cancelled tasks count toward total only."""
        counts = {status: 0 for status in TaskStatus}
        overdue = 0
        for task in tasks:
            counts[task.status] += 1
            if task.is_overdue:
                overdue += 1
        return cls(
            total=len(tasks),
            pending=counts[TaskStatus.PENDING],
            in_progress=counts[TaskStatus.IN_PROGRESS],
            completed=counts[TaskStatus.COMPLETED],
            overdue=overdue,
        )


class RetrievedContext(BaseModel):
    """User, tasks (newest created first) and stats derived from those tasks."""

    model_config = ConfigDict(frozen=True)

    user: UserContext
    tasks: List[TaskContext] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def stats(self) -> ContextStats:
        return ContextStats.from_tasks(self.tasks)
