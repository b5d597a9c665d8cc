"""
Shared FastAPI dependencies.
"""
from fastapi import HTTPException, Request

from lvl.agent.organizer_agent import OrganizerAgent
from lvl.core.config import settings


def get_current_user_id(request: Request) -> str:
    """
    Return the authenticated principal id forwarded by the auth layer.

    The id is passed through opaquely; format validation happens at the
    store boundary.
    """
    user_id = request.headers.get(settings.user_id_header, "").strip()
    if not user_id:
        raise HTTPException(status_code=401, detail="User not authenticated")
    return user_id


def get_organizer_agent(request: Request) -> OrganizerAgent:
    """Return the process-wide OrganizerAgent built in the app lifespan."""
    agent = getattr(request.app.state, "organizer_agent", None)
    if agent is None:
        raise HTTPException(status_code=503, detail="Organizer agent not initialized")
    return agent
