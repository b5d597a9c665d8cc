"""Dispatcher that sends a system + user prompt pair to the selected model backend."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx
import openai
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from lvl.agent.llm_factory import BackendRegistry
from lvl.agent.providers import AIProvider, resolve_provider
from lvl.core.errors import DispatchFailure, InvalidRequest
from lvl.core.llm_config import LLMSettings

logger = logging.getLogger(__name__)

CHAT_FALLBACK_MESSAGE = (
    "I'm sorry, I'm having trouble processing your request right now. "
    "Please try again later or contact support if the issue persists."
)

# Failures worth another attempt. Application-level errors (bad request,
# auth, content filtering) are not retried.
TRANSIENT_ERRORS = (
    asyncio.TimeoutError,
    httpx.TransportError,
    openai.APIConnectionError,
    openai.RateLimitError,
    openai.InternalServerError,
)


@dataclass(frozen=True)
class FailurePolicy:
    """What ask_model does when dispatch fails: re-raise, or return fixed text."""

    fallback_text: Optional[str] = None

    @classmethod
    def fallback(cls, text: str = CHAT_FALLBACK_MESSAGE) -> "FailurePolicy":
        return cls(fallback_text=text)

    @property
    def propagates(self) -> bool:
        return self.fallback_text is None


PROPAGATE = FailurePolicy()


def normalize_response(raw: Any, provider: AIProvider) -> str:
    """Return trimmed text, or raise DispatchFailure for empty/non-string content."""
    if not isinstance(raw, str):
        raise DispatchFailure(
            f"Invalid response from {provider.value}: expected text, got {type(raw).__name__}",
            provider=provider.value,
        )
    text = raw.strip()
    if not text:
        raise DispatchFailure(f"No response from {provider.value} AI model", provider=provider.value)
    return text


class ModelDispatcher:
    """
    Run one prompt against a backend with a timeout and bounded retries.

    Attempts are strictly sequential. Each attempt is bounded by
    LLM_TIMEOUT_SECONDS; transient failures are retried up to
    LLM_MAX_RETRIES more times before the call is reported as a
    DispatchFailure.
    """

    def __init__(
        self,
        backends: BackendRegistry,
        settings: Optional[LLMSettings] = None,
        retry_wait: Optional[wait_base] = None,
    ):
        self.backends = backends
        self.settings = settings or backends.settings
        self.retry_wait = retry_wait or wait_exponential(multiplier=0.5, min=0.5, max=4)

    async def ask_model(
        self,
        system_prompt: str,
        user_message: str,
        *,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        provider: Optional[AIProvider] = None,
        on_failure: FailurePolicy = PROPAGATE,
    ) -> str:
        """
        Send the prompt pair and return the model's trimmed reply.

        Args:
            system_prompt: Instructions plus formatted context
            user_message: The user turn
            temperature: Sampling temperature (defaults to LLM_TEMPERATURE)
            max_tokens: Response length cap (defaults to LLM_MAX_TOKENS)
            provider: Force a backend, bypassing precedence
            on_failure: PROPAGATE, or FailurePolicy.fallback(text)

        Raises:
            InvalidRequest: either prompt is empty
            NoProviderConfigured: no override and no credentials
            DispatchFailure: the call failed and on_failure propagates
        """
        if not system_prompt or not system_prompt.strip() or not user_message or not user_message.strip():
            raise InvalidRequest("Both system_prompt and user_message are required")

        selected = resolve_provider(provider, self.settings)
        logger.info("Using AI provider: %s", selected.value)

        try:
            response = await self._dispatch(selected, system_prompt, user_message, temperature, max_tokens)
        except DispatchFailure:
            if on_failure.propagates:
                raise
            logger.exception("Dispatch to %s failed; returning fallback message", selected.value)
            return on_failure.fallback_text

        logger.info("Response received successfully from %s", selected.value)
        return response

    async def _dispatch(
        self,
        provider: AIProvider,
        system_prompt: str,
        user_message: str,
        temperature: Optional[float],
        max_tokens: Optional[int],
    ) -> str:
        try:
            backend = self.backends.get(provider)
        except ValueError as exc:
            raise DispatchFailure(str(exc), provider=provider.value) from exc

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.settings.max_retries + 1),
            wait=self.retry_wait,
            retry=retry_if_exception_type(TRANSIENT_ERRORS),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    raw = await asyncio.wait_for(
                        backend.complete(
                            system_prompt,
                            user_message,
                            temperature=temperature,
                            max_tokens=max_tokens,
                        ),
                        timeout=self.settings.timeout_seconds,
                    )
        except asyncio.TimeoutError as exc:
            logger.error("%s request timed out after %ss", provider.value, self.settings.timeout_seconds)
            raise DispatchFailure(
                f"{provider.value} request timed out after {self.settings.timeout_seconds}s",
                provider=provider.value,
            ) from exc
        except Exception as exc:
            logger.error("Error calling %s: %s", provider.value, exc)
            raise DispatchFailure(f"{provider.value} request failed: {exc}", provider=provider.value) from exc

        return normalize_response(raw, provider)


__all__ = [
    "CHAT_FALLBACK_MESSAGE",
    "FailurePolicy",
    "ModelDispatcher",
    "PROPAGATE",
    "TRANSIENT_ERRORS",
    "normalize_response",
]
