"""Agent package: provider selection, model dispatch and the organizer facade."""

from lvl.agent.dispatcher import FailurePolicy, ModelDispatcher  # noqa: F401
from lvl.agent.organizer_agent import OrganizerAgent  # noqa: F401
from lvl.agent.providers import AIProvider, get_preferred_ai_provider  # noqa: F401
