"""LLM backend factory - one chat-completion backend per provider"""

import logging
import ssl
import threading
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

import httpx
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from lvl.agent.providers import AIProvider
from lvl.core.llm_config import LLMSettings, get_ca_bundle_path

logger = logging.getLogger(__name__)


class ModelBackend(Protocol):
    """A text-completion service taking a system + user message pair."""

    provider: AIProvider

    async def complete(
        self,
        system_prompt: str,
        user_message: str,
        *,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> Any:
        """Return the first choice's message content, unnormalized."""
        ...

    async def aclose(self) -> None:
        ...


@dataclass(frozen=True)
class BackendConfig:
    provider: AIProvider
    model: str
    base_url: str
    api_key: Optional[str]
    env_var: str


def get_backend_config(provider: AIProvider, settings: LLMSettings) -> BackendConfig:
    """Endpoint, model and credential for a provider."""
    if provider == AIProvider.DEEPSEEK:
        return BackendConfig(
            provider=provider,
            model=settings.deepseek_model,
            base_url=settings.deepseek_base_url,
            api_key=settings.deepseek_api_key,
            env_var="DEEPSEEK_API_KEY",
        )
    elif provider == AIProvider.OPENROUTER:
        return BackendConfig(
            provider=provider,
            model=settings.openrouter_model,
            base_url=settings.openrouter_base_url,
            api_key=settings.openrouter_api_key,
            env_var="OPENROUTER_API_KEY",
        )
    else:
        raise ValueError(
            f"Unknown AI provider: {provider}. "
            f"Supported providers: {', '.join(p.value for p in AIProvider)}"
        )


class ChatModelBackend:
    """
    OpenAI-compatible chat backend built on LangChain's ChatOpenAI.

    The default-configured chat model is created once and reused; a call
    that overrides temperature or max_tokens gets a separately configured
    instance sharing the same HTTP connection pool. Retries are left to
    the dispatcher, so the SDK's own retry loop is disabled.

    Raises:
        ValueError: the provider's API key is not configured
    """

    def __init__(self, provider: AIProvider, settings: LLMSettings):
        config = get_backend_config(provider, settings)
        if not config.api_key:
            raise ValueError(f"{provider.value} provider requires {config.env_var} environment variable")

        self.provider = provider
        self.config = config
        self.settings = settings
        # LangChain expects httpx.AsyncClient for http_async_client; honor the CA bundle
        self._http_client = httpx.AsyncClient(
            verify=ssl.create_default_context(cafile=get_ca_bundle_path()), trust_env=True
        )
        self._default_model: Optional[ChatOpenAI] = None
        self._lock = threading.Lock()

    def _build_chat_model(self, temperature: float, max_tokens: int) -> ChatOpenAI:
        return ChatOpenAI(
            model=self.config.model,
            base_url=self.config.base_url,
            api_key=self.config.api_key,
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=self.settings.timeout_seconds,
            max_retries=0,
            http_async_client=self._http_client,
        )

    def chat_model(
        self,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> ChatOpenAI:
        """Return the shared default model, or a fresh one for overridden parameters."""
        temperature = self.settings.temperature if temperature is None else temperature
        max_tokens = self.settings.max_tokens if max_tokens is None else max_tokens

        if temperature != self.settings.temperature or max_tokens != self.settings.max_tokens:
            return self._build_chat_model(temperature, max_tokens)

        with self._lock:
            if self._default_model is None:
                logger.info(
                    "Creating ChatOpenAI for provider=%s model=%s base_url=%s",
                    self.provider.value,
                    self.config.model,
                    self.config.base_url,
                )
                self._default_model = self._build_chat_model(temperature, max_tokens)
            return self._default_model

    async def complete(
        self,
        system_prompt: str,
        user_message: str,
        *,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> Any:
        llm = self.chat_model(temperature=temperature, max_tokens=max_tokens)
        response = await llm.ainvoke(
            [SystemMessage(content=system_prompt), HumanMessage(content=user_message)]
        )
        return response.content

    async def aclose(self) -> None:
        await self._http_client.aclose()


class BackendRegistry:
    """
    Process-wide owner of backend instances.

    Created once by the application lifespan; each provider's backend is
    constructed on first use behind a lock and reused afterwards.
    """

    def __init__(self, settings: LLMSettings, backend_cls: type = ChatModelBackend):
        self.settings = settings
        self._backend_cls = backend_cls
        self._backends: Dict[AIProvider, ModelBackend] = {}
        self._lock = threading.Lock()

    def get(self, provider: AIProvider) -> ModelBackend:
        with self._lock:
            backend = self._backends.get(provider)
            if backend is None:
                backend = self._backend_cls(provider, self.settings)
                self._backends[provider] = backend
            return backend

    async def aclose(self) -> None:
        with self._lock:
            backends = list(self._backends.values())
            self._backends.clear()
        for backend in backends:
            try:
                await backend.aclose()
            except Exception as e:  # noqa: BLE001
                logger.warning("Error closing %s backend: %s", backend.provider.value, e)


__all__ = [
    "BackendConfig",
    "BackendRegistry",
    "ChatModelBackend",
    "ModelBackend",
    "get_backend_config",
]
