"""Shared test fixtures and configuration.

Points the app at SQLite and clears provider keys BEFORE any lvl imports,
so nothing in the suite can reach a real database or model API.
"""

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
for _key in ("DEEPSEEK_API_KEY", "OPENROUTER_API_KEY"):
    os.environ.pop(_key, None)

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from tenacity import wait_none

from lvl.agent.dispatcher import ModelDispatcher
from lvl.agent.llm_factory import BackendRegistry
from lvl.agent.organizer_agent import OrganizerAgent
from lvl.agent.providers import AIProvider
from lvl.core.database import Base
from lvl.core.llm_config import LLMSettings
from lvl.services.task_store import SqlTaskStore

from factories import FakeBackend, FakeStore, make_user


def build_llm_settings(**overrides) -> LLMSettings:
    values = dict(
        deepseek_api_key="sk-test-deepseek",
        openrouter_api_key=None,
        timeout_seconds=1.0,
        max_retries=2,
    )
    values.update(overrides)
    return LLMSettings(_env_file=None, **values)


@pytest.fixture
def llm_settings():
    return build_llm_settings()


@pytest.fixture
def registry(llm_settings):
    return BackendRegistry(llm_settings, backend_cls=FakeBackend)


@pytest.fixture
def deepseek(registry) -> FakeBackend:
    """The scripted backend serving default (DeepSeek) calls."""
    return registry.get(AIProvider.DEEPSEEK)


@pytest.fixture
def dispatcher(registry, llm_settings):
    return ModelDispatcher(registry, llm_settings, retry_wait=wait_none())


@pytest.fixture
def fake_store():
    return FakeStore(user=make_user())


@pytest.fixture
def agent(fake_store, dispatcher):
    return OrganizerAgent(store=fake_store, dispatcher=dispatcher)


@pytest.fixture
async def engine(tmp_path):
    """File-backed SQLite so concurrent reads get separate connections."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'lvl_test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def sql_store(session_factory):
    return SqlTaskStore(session_factory)


@pytest.fixture
async def client(agent):
    from lvl.api.deps import get_organizer_agent
    from lvl.main import app

    app.dependency_overrides[get_organizer_agent] = lambda: agent
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
