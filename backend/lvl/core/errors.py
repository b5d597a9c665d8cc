"""
Error taxonomy for context retrieval and model dispatch.
"""
from typing import Optional


class OrganizerError(Exception):
    """Base class for organizer agent failures."""


class InvalidIdentifier(OrganizerError):
    """Raised when a user id is not a well-formed store identifier."""

    def __init__(self, value: object):
        super().__init__(f"Invalid user ID format: {value!r}")
        self.value = value


class UserNotFound(OrganizerError):
    """Raised when no user record exists for a well-formed id."""

    def __init__(self, user_id: object):
        super().__init__(f"User not found: {user_id}")
        self.user_id = user_id


class NoProviderConfigured(OrganizerError):
    """Raised when neither model backend has usable credentials."""

    def __init__(self, message: str = "No AI provider configured. Please set either DEEPSEEK_API_KEY or OPENROUTER_API_KEY"):
        super().__init__(message)


class InvalidRequest(OrganizerError):
    """Raised when a dispatch is attempted with an empty prompt."""


class DispatchFailure(OrganizerError):
    """Raised when a backend is unreachable, times out, or returns unusable content."""

    def __init__(self, message: str, provider: Optional[str] = None):
        super().__init__(message)
        self.provider = provider


__all__ = [
    "OrganizerError",
    "InvalidIdentifier",
    "UserNotFound",
    "NoProviderConfigured",
    "InvalidRequest",
    "DispatchFailure",
]
