import re
from datetime import datetime, timedelta, timezone

from lvl.models.task import TaskPriority, TaskStatus
from lvl.schemas.context import RetrievedContext
from lvl.services.prompt_utils import format_context_for_prompt, format_task

from factories import NOW, make_task, make_user

ITEM_LINE = re.compile(r"^\d+\. \[", re.MULTILINE)


def context_with(*tasks):
    return RetrievedContext(user=make_user(), tasks=list(tasks))


def test_profile_and_statistics_sections():
    context = context_with(
        make_task("1", TaskStatus.PENDING, is_overdue=True),
        make_task("2", TaskStatus.IN_PROGRESS),
        make_task("3", TaskStatus.COMPLETED),
        make_task("4", TaskStatus.CANCELLED),
    )

    text = format_context_for_prompt(context)

    assert text.startswith(
        "# USER PROFILE\n"
        "Name: Ada Lovelace\n"
        "Level: 3 | XP: 240\n"
        "Completed Tasks: 12\n"
        "Daily Goal: 150 XP\n"
        "Timezone: Europe/London\n\n"
        "# TASK STATISTICS\n"
        "Total Tasks: 4\n"
        "Pending: 1 | In Progress: 1\n"
        "Completed: 1 | Overdue: 1\n\n"
        "# TASK LIST\n"
    )


def test_empty_task_list_renders_no_tasks_line():
    text = format_context_for_prompt(context_with())

    assert text.endswith("# TASK LIST\nNo tasks found.\n")
    assert "##" not in text


def test_groups_in_status_order_keeping_newest_first():
    a = make_task("A", TaskStatus.PENDING, created_at=NOW - timedelta(hours=1), title="Write report")
    b = make_task("B", TaskStatus.IN_PROGRESS, created_at=NOW - timedelta(hours=2), title="Refactor parser")
    c = make_task("C", TaskStatus.PENDING, created_at=NOW - timedelta(hours=3), title="Book dentist")

    text = format_context_for_prompt(context_with(a, b, c))

    pending_at = text.index("## PENDING TASKS (2)")
    in_progress_at = text.index("## IN PROGRESS TASKS (1)")
    assert pending_at < text.index("1. [MEDIUM] Write report") < text.index("2. [MEDIUM] Book dentist") < in_progress_at
    assert text.index("1. [MEDIUM] Refactor parser") > in_progress_at
    assert "## COMPLETED TASKS" not in text


def test_completed_group_truncated_to_ten():
    tasks = [
        make_task(str(i), TaskStatus.COMPLETED, created_at=NOW - timedelta(minutes=i))
        for i in range(15)
    ]

    text = format_context_for_prompt(context_with(*tasks))

    assert "## COMPLETED TASKS (15)" in text
    assert len(ITEM_LINE.findall(text)) == 10
    assert "10. [MEDIUM] Task 9\n" in text
    assert "Task 10\n" not in text
    assert "... and 5 more completed tasks\n" in text


def test_pending_group_never_truncated():
    tasks = [make_task(str(i), TaskStatus.PENDING) for i in range(14)]

    text = format_context_for_prompt(context_with(*tasks))

    assert len(ITEM_LINE.findall(text)) == 14
    assert "more" not in text


def test_cancelled_tasks_counted_but_not_listed():
    text = format_context_for_prompt(
        context_with(
            make_task("1", TaskStatus.CANCELLED, title="Abandoned idea"),
            make_task("2", TaskStatus.PENDING, title="Real work"),
        )
    )

    assert "Total Tasks: 2" in text
    assert "Abandoned idea" not in text
    assert "1. [MEDIUM] Real work" in text


def test_format_task_full_entry():
    task = make_task(
        "7",
        TaskStatus.PENDING,
        title="Ship release",
        description="Tag and publish v2",
        priority=TaskPriority.URGENT,
        due_date=datetime(2026, 10, 1, 9, 30, tzinfo=timezone.utc),
        tags=["work", "release"],
        points=25,
        is_overdue=True,
    )

    assert format_task(task, 3) == (
        "3. [URGENT] Ship release\n"
        "   Description: Tag and publish v2\n"
        "   Due: 2026-10-01 ⚠️ OVERDUE\n"
        "   Tags: work, release\n"
        "   Points: 25 XP\n"
    )


def test_format_task_minimal_entry_only_has_points():
    task = make_task("8", title="Stretch", priority=TaskPriority.LOW, description="", points=5)

    assert format_task(task, 1) == "1. [LOW] Stretch\n   Points: 5 XP\n"


def test_due_date_rendered_as_utc_date_without_marker():
    eastern = timezone(timedelta(hours=-5))
    task = make_task("9", due_date=datetime(2026, 11, 1, 21, 0, tzinfo=eastern))

    assert "   Due: 2026-11-02\n" in format_task(task, 1)


def test_formatter_is_deterministic():
    context = context_with(
        make_task("1", TaskStatus.PENDING, tags=["a", "b"], description="x"),
        make_task("2", TaskStatus.COMPLETED),
        make_task("3", TaskStatus.IN_PROGRESS, due_date=NOW, is_overdue=True),
    )

    assert format_context_for_prompt(context) == format_context_for_prompt(context)
