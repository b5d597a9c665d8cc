"""
Utilities for rendering a RetrievedContext into the plain-text block
embedded in organizer system prompts.
"""
from typing import List, Sequence

from lvl.models.task import TaskStatus
from lvl.schemas.context import RetrievedContext, TaskContext
from lvl.services.context_builder import as_utc

COMPLETED_TASK_LIMIT = 10
OVERDUE_MARKER = " ⚠️ OVERDUE"

# (status, header label, truncation limit or None)
TASK_GROUPS = (
    (TaskStatus.PENDING, "PENDING TASKS", None),
    (TaskStatus.IN_PROGRESS, "IN PROGRESS TASKS", None),
    (TaskStatus.COMPLETED, "COMPLETED TASKS", COMPLETED_TASK_LIMIT),
)


def format_task(task: TaskContext, index: int) -> str:
    """Render one task entry, 1-based index within its group."""
    lines = [f"{index}. [{task.priority.value.upper()}] {task.title}"]

    if task.description:
        lines.append(f"   Description: {task.description}")

    if task.due_date:
        due = f"   Due: {as_utc(task.due_date).date().isoformat()}"
        if task.is_overdue:
            due += OVERDUE_MARKER
        lines.append(due)

    if task.tags:
        lines.append(f"   Tags: {', '.join(task.tags)}")

    lines.append(f"   Points: {task.points} XP")
    return "\n".join(lines) + "\n"


def _format_group(label: str, tasks: Sequence[TaskContext], limit: int | None) -> str:
    shown = tasks if limit is None else tasks[:limit]
    parts: List[str] = [f"## {label} ({len(tasks)})\n"]
    parts.extend(format_task(task, idx) for idx, task in enumerate(shown, start=1))
    hidden = len(tasks) - len(shown)
    if hidden > 0:
        parts.append(f"... and {hidden} more completed tasks\n")
    parts.append("\n")
    return "".join(parts)


def format_context_for_prompt(context: RetrievedContext) -> str:
    """
    Serialize a context into profile, statistics and task listing sections.

    Deterministic: the same context always renders to the same string.
    Cancelled tasks are counted in the statistics but not listed.
    """
    user, tasks, stats = context.user, context.tasks, context.stats

    prompt = "# USER PROFILE\n"
    prompt += f"Name: {user.name}\n"
    prompt += f"Level: {user.level} | XP: {user.xp}\n"
    prompt += f"Completed Tasks: {user.total_tasks_completed}\n"
    prompt += f"Daily Goal: {user.preferences.daily_goal_xp} XP\n"
    prompt += f"Timezone: {user.preferences.timezone}\n\n"

    prompt += "# TASK STATISTICS\n"
    prompt += f"Total Tasks: {stats.total}\n"
    prompt += f"Pending: {stats.pending} | In Progress: {stats.in_progress}\n"
    prompt += f"Completed: {stats.completed} | Overdue: {stats.overdue}\n\n"

    prompt += "# TASK LIST\n"

    if not tasks:
        return prompt + "No tasks found.\n"

    for status, label, limit in TASK_GROUPS:
        group = [task for task in tasks if task.status == status]
        if group:
            prompt += _format_group(label, group, limit)

    return prompt
