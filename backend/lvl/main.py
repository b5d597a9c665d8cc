import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

# Load environment variables before settings are read
load_dotenv()

from lvl.agent.dispatcher import ModelDispatcher  # noqa: E402
from lvl.agent.llm_factory import BackendRegistry  # noqa: E402
from lvl.agent.organizer_agent import OrganizerAgent  # noqa: E402
from lvl.agent.providers import available_providers  # noqa: E402
from lvl.api import organizer  # noqa: E402
from lvl.core.config import settings  # noqa: E402
from lvl.core.database import AsyncSessionLocal, engine  # noqa: E402
from lvl.core.llm_config import get_llm_settings  # noqa: E402
from lvl.services.task_store import SqlTaskStore  # noqa: E402

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler"""
    # Startup
    configure_logging(settings.log_level)
    llm_settings = get_llm_settings()
    backends = BackendRegistry(llm_settings)
    app.state.organizer_agent = OrganizerAgent(
        store=SqlTaskStore(AsyncSessionLocal),
        dispatcher=ModelDispatcher(backends, llm_settings),
    )
    logger.info("Starting %s on port %s...", settings.project_name, os.getenv("PORT", "8000"))
    logger.info("AI providers configured: %s", available_providers(llm_settings))
    yield
    # Shutdown
    logger.info("Shutting down %s...", settings.project_name)
    await backends.aclose()
    await engine.dispose()


app = FastAPI(
    title="LVL.AI - Organizer API",
    description="Context-grounded task organization assistant for a gamified task manager",
    version="0.1.0",
    debug=settings.debug,
    lifespan=lifespan,
)

allowed_origins = list(dict.fromkeys([settings.frontend_url, *settings.allowed_origins]))

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(organizer.router)


class HealthResponse(BaseModel):
    status: str
    providers: dict[str, bool]


# Endpoints
@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Check API health and which model backends have credentials"""
    return HealthResponse(status="ok", providers=available_providers())
