# Database models
from lvl.models.user import User
from lvl.models.task import Task, TaskPriority, TaskStatus

__all__ = ["User", "Task", "TaskPriority", "TaskStatus"]
