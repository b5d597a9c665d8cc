# Services module
from .context_builder import retrieve_complete_context
from .prompt_utils import format_context_for_prompt
from .task_store import SqlTaskStore, TaskStore

__all__ = [
    "retrieve_complete_context",
    "format_context_for_prompt",
    "SqlTaskStore",
    "TaskStore",
]
