from datetime import datetime, timedelta, timezone

import pytest

from lvl.core.errors import InvalidIdentifier
from lvl.models.task import Task, TaskPriority, TaskStatus
from lvl.models.user import User
from lvl.services.context_builder import retrieve_complete_context
from lvl.services.task_store import SAFE_USER_COLUMNS, parse_user_id

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
async def test_user(db_session):
    """Create a user with credentials that must never be read back."""
    user = User(
        name="Grace Hopper",
        email="grace@example.com",
        password_hash="$2b$12$secret-hash",
        email_verification_token="verify-token",
        password_reset_token="reset-token",
        level=5,
        xp=1200,
        total_tasks_completed=48,
        timezone="America/New_York",
        daily_goal_xp=200,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def other_user(db_session):
    user = User(name="Someone Else", email="else@example.com")
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


async def add_task(db_session, user, title, created_at, **fields):
    task = Task(user_id=user.id, title=title, created_at=created_at, updated_at=created_at, **fields)
    db_session.add(task)
    await db_session.commit()
    return task


class TestParseUserId:
    def test_accepts_positive_ints_and_digit_strings(self):
        assert parse_user_id(7) == 7
        assert parse_user_id("42") == 42

    @pytest.mark.parametrize("value", ["", " 1", "1a", "-1", "0", "²", None, 1.0, False])
    def test_rejects_everything_else(self, value):
        with pytest.raises(InvalidIdentifier):
            parse_user_id(value)


def test_safe_columns_exclude_credentials():
    names = {column.key for column in SAFE_USER_COLUMNS}

    assert "password_hash" not in names
    assert "email_verification_token" not in names
    assert "password_reset_token" not in names


@pytest.mark.asyncio
async def test_get_user_returns_profile_without_credentials(sql_store, test_user):
    user = await sql_store.get_user(str(test_user.id))

    assert user.id == str(test_user.id)
    assert user.name == "Grace Hopper"
    assert (user.level, user.xp, user.total_tasks_completed) == (5, 1200, 48)
    assert user.preferences.timezone == "America/New_York"
    assert user.preferences.daily_goal_xp == 200
    dumped = str(user.model_dump())
    assert "secret-hash" not in dumped
    assert "verify-token" not in dumped
    assert "reset-token" not in dumped


@pytest.mark.asyncio
async def test_get_user_unknown_id_returns_none(sql_store, test_user):
    assert await sql_store.get_user(test_user.id + 100) is None


@pytest.mark.asyncio
async def test_get_tasks_by_owner_newest_first_and_scoped(db_session, sql_store, test_user, other_user):
    await add_task(db_session, test_user, "Oldest", NOW - timedelta(days=3))
    await add_task(db_session, test_user, "Newest", NOW - timedelta(hours=1), tags=["home"])
    await add_task(db_session, test_user, "Middle", NOW - timedelta(days=1))
    await add_task(db_session, other_user, "Not mine", NOW)

    records = await sql_store.get_tasks_by_owner(test_user.id)

    assert [r.title for r in records] == ["Newest", "Middle", "Oldest"]
    assert records[0].tags == ["home"]
    assert records[1].tags == []
    assert records[0].priority == TaskPriority.MEDIUM
    assert records[0].status == TaskStatus.PENDING
    assert records[0].points == 10


@pytest.mark.asyncio
async def test_get_tasks_rejects_malformed_id(sql_store):
    with pytest.raises(InvalidIdentifier):
        await sql_store.get_tasks_by_owner("not-an-id")


@pytest.mark.asyncio
async def test_complete_context_from_database(db_session, sql_store, test_user):
    await add_task(
        db_session,
        test_user,
        "File taxes",
        NOW - timedelta(days=10),
        priority=TaskPriority.URGENT,
        due_date=NOW - timedelta(days=2),
    )
    await add_task(
        db_session,
        test_user,
        "Renew passport",
        NOW - timedelta(days=5),
        status=TaskStatus.COMPLETED,
        due_date=NOW - timedelta(days=4),
        completed_at=NOW - timedelta(days=4),
    )
    await add_task(db_session, test_user, "Plan trip", NOW - timedelta(days=1), status=TaskStatus.IN_PROGRESS)

    context = await retrieve_complete_context(sql_store, str(test_user.id), now=NOW)

    assert [t.title for t in context.tasks] == ["Plan trip", "Renew passport", "File taxes"]
    assert [t.is_overdue for t in context.tasks] == [False, False, True]
    assert context.stats.model_dump() == {
        "total": 3,
        "pending": 1,
        "in_progress": 1,
        "completed": 1,
        "overdue": 1,
    }
