# Request-scoped data shapes
from .context import (
    ContextStats,
    RetrievedContext,
    TaskContext,
    TaskRecord,
    UserContext,
    UserPreferences,
)

__all__ = [
    "ContextStats",
    "RetrievedContext",
    "TaskContext",
    "TaskRecord",
    "UserContext",
    "UserPreferences",
]
