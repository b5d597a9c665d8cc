"""Provider selection for the organizer agent's model backends."""

from enum import Enum
from typing import Dict, Optional

from lvl.core.errors import NoProviderConfigured
from lvl.core.llm_config import LLMSettings, get_llm_settings


class AIProvider(str, Enum):
    """Interchangeable chat-completion backends."""

    DEEPSEEK = "deepseek"  # direct vendor API
    OPENROUTER = "openrouter"  # same model routed through the OpenRouter gateway


def provider_credentials(settings: LLMSettings) -> Dict[AIProvider, Optional[str]]:
    return {
        AIProvider.DEEPSEEK: settings.deepseek_api_key,
        AIProvider.OPENROUTER: settings.openrouter_api_key,
    }


def available_providers(settings: Optional[LLMSettings] = None) -> Dict[str, bool]:
    """Credential presence per provider, for health reporting."""
    settings = settings or get_llm_settings()
    return {provider.value: bool(key) for provider, key in provider_credentials(settings).items()}


def get_preferred_ai_provider(settings: Optional[LLMSettings] = None) -> AIProvider:
    """
    Pick the backend to use when the caller did not force one.

    DeepSeek wins whenever its key is set; OpenRouter is the fallback.

    Raises:
        NoProviderConfigured: neither key is set
    """
    settings = settings or get_llm_settings()
    if settings.deepseek_api_key:
        return AIProvider.DEEPSEEK
    if settings.openrouter_api_key:
        return AIProvider.OPENROUTER
    raise NoProviderConfigured()


def resolve_provider(
    override: Optional[AIProvider] = None,
    settings: Optional[LLMSettings] = None,
) -> AIProvider:
    """
    Honor an explicit override, otherwise fall back to precedence.

    The override is not checked against configured credentials here; a
    provider without a key fails when the call is dispatched.
    """
    if override is not None:
        return AIProvider(override)
    return get_preferred_ai_provider(settings)


__all__ = [
    "AIProvider",
    "available_providers",
    "get_preferred_ai_provider",
    "provider_credentials",
    "resolve_provider",
]
