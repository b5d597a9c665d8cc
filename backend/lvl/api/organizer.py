"""
Organizer agent endpoints: context-grounded chat and task insights.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Dict, Optional, TypeVar

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field, field_validator

from lvl.agent.organizer_agent import OrganizerAgent
from lvl.agent.providers import AIProvider, available_providers
from lvl.api.deps import get_current_user_id, get_organizer_agent
from lvl.core.config import settings
from lvl.core.errors import (
    DispatchFailure,
    InvalidIdentifier,
    NoProviderConfigured,
    UserNotFound,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix=f"{settings.api_prefix}/organizer", tags=["organizer"])

T = TypeVar("T")

FEATURES = [
    "chat",
    "organization-suggestions",
    "daily-plan",
    "productivity-analysis",
    "motivation",
    "provider-test",
    "goal-suggestions",
    "task-analysis",
    "task-motivation",
]


# Request/Response models
class ChatRequest(BaseModel):
    """Chat turn from the organizer panel."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(..., min_length=1, max_length=1000)
    temperature: Optional[float] = Field(None, ge=0.0, le=2.0)
    max_tokens: Optional[int] = Field(None, alias="maxTokens", gt=0, le=8000)
    provider: Optional[AIProvider] = None

    @field_validator("message", mode="before")
    @classmethod
    def _strip_message(cls, value):
        return value.strip() if isinstance(value, str) else value


class GoalRequest(BaseModel):
    goal: str = Field(..., min_length=1, max_length=1000)
    temperature: Optional[float] = Field(None, ge=0.0, le=2.0)


class TaskAnalysisRequest(BaseModel):
    description: str = Field(..., min_length=1, max_length=1000)
    temperature: Optional[float] = Field(None, ge=0.0, le=2.0)


class TaskMotivationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    task_type: str = Field(..., alias="taskType", min_length=1, max_length=200)
    temperature: Optional[float] = Field(None, ge=0.0, le=2.0)


class ChatResponse(BaseModel):
    response: str
    metadata: Dict[str, Any]


class InsightResponse(BaseModel):
    result: str
    metadata: Dict[str, Any] = {}


def _metadata(user_id: str, **extra: Any) -> Dict[str, Any]:
    return {"userId": user_id, "timestamp": datetime.now(timezone.utc).isoformat(), **extra}


async def _run(call: Awaitable[T], failure_message: str) -> T:
    """Await an organizer call, mapping its errors onto HTTP responses."""
    try:
        return await call
    except InvalidIdentifier as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UserNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except NoProviderConfigured as e:
        logger.error("AI provider not configured: %s", e)
        raise HTTPException(
            status_code=500,
            detail={"message": "AI provider not configured", "error": str(e)},
        )
    except DispatchFailure as e:
        logger.error("%s: %s", failure_message, e)
        raise HTTPException(
            status_code=502,
            detail={"message": failure_message, "error": str(e)},
        )


@router.post("/chat", response_model=ChatResponse)
async def chat(
    payload: ChatRequest,
    user_id: str = Depends(get_current_user_id),
    agent: OrganizerAgent = Depends(get_organizer_agent),
):
    """Chat with the organizer agent. Model failures come back as an apology, not an error."""
    response = await _run(
        agent.chat_with_organizer(
            user_id,
            payload.message,
            temperature=payload.temperature,
            max_tokens=payload.max_tokens,
            provider=payload.provider,
        ),
        "Failed to get response from organizer",
    )
    return ChatResponse(response=response, metadata=_metadata(user_id))


@router.get("/suggestions", response_model=InsightResponse)
async def organization_suggestions(
    provider: Optional[AIProvider] = Query(None),
    user_id: str = Depends(get_current_user_id),
    agent: OrganizerAgent = Depends(get_organizer_agent),
):
    """Get task organization suggestions."""
    result = await _run(
        agent.get_organization_suggestions(user_id, provider=provider),
        "Failed to get organization suggestions",
    )
    return InsightResponse(result=result, metadata=_metadata(user_id, type="organization_suggestions"))


@router.get("/daily-plan", response_model=InsightResponse)
async def daily_plan(
    provider: Optional[AIProvider] = Query(None),
    user_id: str = Depends(get_current_user_id),
    agent: OrganizerAgent = Depends(get_organizer_agent),
):
    """Get an ordered plan for today."""
    result = await _run(agent.get_daily_task_plan(user_id, provider=provider), "Failed to get daily plan")
    today = datetime.now(timezone.utc).date().isoformat()
    return InsightResponse(result=result, metadata=_metadata(user_id, type="daily_plan", date=today))


@router.get("/productivity-analysis", response_model=InsightResponse)
async def productivity_analysis(
    provider: Optional[AIProvider] = Query(None),
    user_id: str = Depends(get_current_user_id),
    agent: OrganizerAgent = Depends(get_organizer_agent),
):
    """Analyze productivity patterns."""
    result = await _run(agent.analyze_productivity(user_id, provider=provider), "Failed to analyze productivity")
    return InsightResponse(result=result, metadata=_metadata(user_id, type="productivity_analysis"))


@router.get("/motivation", response_model=InsightResponse)
async def motivation(
    provider: Optional[AIProvider] = Query(None),
    user_id: str = Depends(get_current_user_id),
    agent: OrganizerAgent = Depends(get_organizer_agent),
):
    """Get a motivational message."""
    result = await _run(agent.get_motivation(user_id, provider=provider), "Failed to get motivation")
    return InsightResponse(result=result, metadata=_metadata(user_id, type="motivation"))


@router.get("/context")
async def context(
    user_id: str = Depends(get_current_user_id),
    agent: OrganizerAgent = Depends(get_organizer_agent),
):
    """Return the retrieved context and its prompt rendering (debugging aid)."""
    retrieved, formatted = await _run(agent.get_context(user_id), "Failed to get context")
    return {"context": retrieved.model_dump(mode="json"), "formattedContext": formatted}


@router.get("/test-provider")
async def test_provider(
    provider: Optional[AIProvider] = Query(None),
    user_id: str = Depends(get_current_user_id),
    agent: OrganizerAgent = Depends(get_organizer_agent),
):
    """Probe AI provider connectivity."""
    result = await _run(agent.test_ai_provider(provider), "Failed to test AI provider")
    return result.model_dump(mode="json")


@router.post("/goal-suggestions", response_model=InsightResponse)
async def goal_suggestions(
    payload: GoalRequest,
    user_id: str = Depends(get_current_user_id),
    agent: OrganizerAgent = Depends(get_organizer_agent),
):
    """Break a goal into actionable tasks."""
    result = await _run(
        agent.generate_task_suggestions_for_goal(payload.goal, temperature=payload.temperature),
        "Failed to generate task suggestions",
    )
    return InsightResponse(result=result, metadata=_metadata(user_id, type="goal_suggestions"))


@router.post("/analyze-task", response_model=InsightResponse)
async def analyze_task(
    payload: TaskAnalysisRequest,
    user_id: str = Depends(get_current_user_id),
    agent: OrganizerAgent = Depends(get_organizer_agent),
):
    """Assess a single task's complexity, effort and priority."""
    result = await _run(
        agent.analyze_specific_task(payload.description, temperature=payload.temperature),
        "Failed to analyze task",
    )
    return InsightResponse(result=result, metadata=_metadata(user_id, type="task_analysis"))


@router.post("/task-motivation", response_model=InsightResponse)
async def task_motivation(
    payload: TaskMotivationRequest,
    user_id: str = Depends(get_current_user_id),
    agent: OrganizerAgent = Depends(get_organizer_agent),
):
    """Short encouragement for a kind of task."""
    result = await _run(
        agent.generate_motivational_message_for_task_type(payload.task_type, temperature=payload.temperature),
        "Failed to generate motivational message",
    )
    return InsightResponse(result=result, metadata=_metadata(user_id, type="task_motivation"))


@router.get("/health")
async def organizer_health():
    """Public health check: which backends have credentials configured."""
    return {
        "status": "healthy",
        "service": "organizer-agent",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "providers": available_providers(),
        "features": FEATURES,
    }
