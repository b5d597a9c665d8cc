"""
Organizer Agent - context-grounded task organization assistant.

Every operation rebuilds the user's context, renders it into a fixed
system prompt and dispatches one user turn:

- chat: free-text conversation; failures become a fixed apology
- suggestions / daily plan / productivity analysis / motivation:
  fixed user turns; failures propagate to the caller
- provider test: a trivial probe reporting connected/error
"""

from __future__ import annotations

import logging
from typing import Literal, Optional, Tuple

from pydantic import BaseModel

from lvl.agent.dispatcher import PROPAGATE, FailurePolicy, ModelDispatcher
from lvl.agent.providers import AIProvider, resolve_provider
from lvl.core.errors import DispatchFailure
from lvl.schemas.context import RetrievedContext
from lvl.services.context_builder import retrieve_complete_context
from lvl.services.prompt_utils import format_context_for_prompt
from lvl.services.task_store import TaskStore, UserId

logger = logging.getLogger(__name__)

ORGANIZER_SYSTEM_PROMPT = """You are an intelligent task organization assistant for LVL.AI, a gamified task management platform.

You have access to the user's complete profile and task data. Use this information to provide personalized, actionable advice on task organization, prioritization, and productivity.

CAPABILITIES:
- Analyze task lists and identify patterns
- Suggest task prioritization strategies
- Recommend task breakdown for complex items
- Identify overdue tasks and suggest recovery plans
- Provide time management insights
- Suggest task groupings by tags/categories
- Motivate users based on their progress

GUIDELINES:
- Be specific and reference actual tasks when relevant
- Consider the user's level, XP, and goals
- Acknowledge overdue tasks with empathy
- Suggest realistic, achievable action plans
- Use the gamification elements (XP, levels) for motivation
- Keep responses concise but informative

CONTEXT:
{context}"""

ORGANIZATION_SUGGESTIONS_PROMPT = """Analyze my current tasks and provide specific suggestions on how I should organize and prioritize them. Consider:
1. What tasks should I focus on today?
2. Are there any overdue tasks that need immediate attention?
3. How should I group or sequence my tasks?
4. Any tasks that could be broken down into smaller steps?"""

DAILY_PLAN_PROMPT = (
    "Create a daily task plan for me. Based on my current tasks, XP goals, and priorities, "
    "suggest which tasks I should focus on today and in what order."
)

PRODUCTIVITY_ANALYSIS_PROMPT = (
    "Analyze my task completion patterns and productivity. What insights can you provide "
    "about my task management habits? What areas could I improve?"
)

MOTIVATION_PROMPT = (
    "Based on my current progress and tasks, give me some motivation and encouragement to stay productive!"
)

GOAL_TASKS_SYSTEM_PROMPT = """You are a task management assistant for LVL.AI. Help users break down their goals into actionable, specific tasks.

Guidelines:
- Provide clear, achievable task suggestions
- Break down complex goals into smaller steps
- Include time estimates when appropriate
- Suggest task categories (work, personal, health, etc.)
- Format output as a numbered list
- Be encouraging and practical"""

TASK_ANALYSIS_SYSTEM_PROMPT = """You are a productivity expert analyzing tasks for LVL.AI users. Analyze the given task and provide insights.

Provide:
- Task complexity assessment
- Estimated time to complete
- Required resources or dependencies
- Potential challenges
- Success tips
- Suggested priority level"""

MOTIVATIONAL_COACH_SYSTEM_PROMPT = """You are a motivational coach for LVL.AI. Generate encouraging, personalized messages to help users stay motivated with their tasks.

Guidelines:
- Be positive and encouraging
- Reference the specific task type
- Keep messages concise (1-2 sentences)
- Use a friendly, supportive tone
- Avoid generic phrases"""

PROBE_SYSTEM_PROMPT = "You are a helpful assistant."
PROBE_MESSAGES = {
    AIProvider.DEEPSEEK: "Say 'Hello from DeepSeek!' if you can hear me.",
    AIProvider.OPENROUTER: "Say 'Hello from OpenRouter!' if you can hear me.",
}

SUGGESTIONS_TEMPERATURE = 0.6
DAILY_PLAN_TEMPERATURE = 0.6
PRODUCTIVITY_TEMPERATURE = 0.7
MOTIVATION_TEMPERATURE = 0.8


class ProviderTestResult(BaseModel):
    """Outcome of a provider connectivity probe."""

    provider: AIProvider
    status: Literal["connected", "error"]
    response: Optional[str] = None


def build_system_prompt(context: RetrievedContext) -> str:
    return ORGANIZER_SYSTEM_PROMPT.format(context=format_context_for_prompt(context))


class OrganizerAgent:
    """
    Facade over context retrieval, prompt formatting and model dispatch.

    Holds no per-user state; safe to share across concurrent requests.
    """

    def __init__(self, store: TaskStore, dispatcher: ModelDispatcher):
        self.store = store
        self.dispatcher = dispatcher

    async def get_context(self, user_id: UserId) -> Tuple[RetrievedContext, str]:
        """Return the user's context and its rendered prompt text."""
        context = await retrieve_complete_context(self.store, user_id)
        return context, format_context_for_prompt(context)

    async def _ask_with_context(
        self,
        user_id: UserId,
        user_message: str,
        *,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        provider: Optional[AIProvider] = None,
        on_failure: FailurePolicy = PROPAGATE,
    ) -> str:
        logger.info("Retrieving context for user: %s", user_id)
        context = await retrieve_complete_context(self.store, user_id)
        return await self.dispatcher.ask_model(
            build_system_prompt(context),
            user_message,
            temperature=temperature,
            max_tokens=max_tokens,
            provider=provider,
            on_failure=on_failure,
        )

    async def chat_with_organizer(
        self,
        user_id: UserId,
        message: str,
        *,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        provider: Optional[AIProvider] = None,
    ) -> str:
        """
        Chat with the organizer using the user's context.

        Dispatch failures resolve to a fixed apology instead of raising;
        context failures (bad id, unknown user) and missing provider
        configuration still raise.
        """
        return await self._ask_with_context(
            user_id,
            message,
            temperature=temperature,
            max_tokens=max_tokens,
            provider=provider,
            on_failure=FailurePolicy.fallback(),
        )

    async def get_organization_suggestions(self, user_id: UserId, provider: Optional[AIProvider] = None) -> str:
        return await self._ask_with_context(
            user_id, ORGANIZATION_SUGGESTIONS_PROMPT, temperature=SUGGESTIONS_TEMPERATURE, provider=provider
        )

    async def get_daily_task_plan(self, user_id: UserId, provider: Optional[AIProvider] = None) -> str:
        return await self._ask_with_context(
            user_id, DAILY_PLAN_PROMPT, temperature=DAILY_PLAN_TEMPERATURE, provider=provider
        )

    async def analyze_productivity(self, user_id: UserId, provider: Optional[AIProvider] = None) -> str:
        return await self._ask_with_context(
            user_id, PRODUCTIVITY_ANALYSIS_PROMPT, temperature=PRODUCTIVITY_TEMPERATURE, provider=provider
        )

    async def get_motivation(self, user_id: UserId, provider: Optional[AIProvider] = None) -> str:
        return await self._ask_with_context(
            user_id, MOTIVATION_PROMPT, temperature=MOTIVATION_TEMPERATURE, provider=provider
        )

    # Context-free helpers; conversational, so they fall back like chat

    async def generate_task_suggestions_for_goal(self, goal: str, temperature: Optional[float] = None) -> str:
        return await self.dispatcher.ask_model(
            GOAL_TASKS_SYSTEM_PROMPT, goal, temperature=temperature, on_failure=FailurePolicy.fallback()
        )

    async def analyze_specific_task(self, task_description: str, temperature: Optional[float] = None) -> str:
        return await self.dispatcher.ask_model(
            TASK_ANALYSIS_SYSTEM_PROMPT, task_description, temperature=temperature, on_failure=FailurePolicy.fallback()
        )

    async def generate_motivational_message_for_task_type(
        self, task_type: str, temperature: Optional[float] = None
    ) -> str:
        return await self.dispatcher.ask_model(
            MOTIVATIONAL_COACH_SYSTEM_PROMPT,
            f"Generate a motivational message for someone working on: {task_type}",
            temperature=temperature,
            on_failure=FailurePolicy.fallback(),
        )

    async def test_ai_provider(self, provider: Optional[AIProvider] = None) -> ProviderTestResult:
        """
        Probe a backend with a trivial prompt.

        Raises:
            NoProviderConfigured: no override given and no credentials set
        """
        selected = resolve_provider(provider, self.dispatcher.settings)
        try:
            response = await self.dispatcher.ask_model(
                PROBE_SYSTEM_PROMPT, PROBE_MESSAGES[selected], provider=selected
            )
        except DispatchFailure as e:
            logger.error("Error testing AI provider %s: %s", selected.value, e)
            return ProviderTestResult(provider=selected, status="error", response=str(e))
        return ProviderTestResult(provider=selected, status="connected", response=response)


__all__ = [
    "OrganizerAgent",
    "ProviderTestResult",
    "build_system_prompt",
]
