"""LLM Configuration for the organizer agent's model backends"""

import os
from pathlib import Path
from typing import Optional

import certifi
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Ensure HTTP clients (httpx/openai/langchain) have a CA bundle available.
# Prefer a repo-level combined bundle (for corporate roots like Zscaler); fall back to certifi.
_repo_root = Path(__file__).resolve().parents[2]
_combined_ca = _repo_root / "certs" / "combined.pem"
if _combined_ca.exists():
    os.environ.setdefault("SSL_CERT_FILE", str(_combined_ca))
else:
    os.environ.setdefault("SSL_CERT_FILE", certifi.where())


def get_ca_bundle_path() -> str:
    """Return the CA bundle path in use for HTTP clients."""
    return os.environ.get("SSL_CERT_FILE", certifi.where())


class LLMSettings(BaseSettings):
    """
    Model backend configuration.

    Two interchangeable backends expose the same chat-completion API:
    DeepSeek directly, and DeepSeek routed through OpenRouter. Which one
    serves a call is decided per call (see lvl.agent.providers); this class
    only holds credentials and generation defaults.

    Environment Variables:
    ---------------------
    DEEPSEEK_API_KEY: DeepSeek platform key (preferred backend)
    OPENROUTER_API_KEY: OpenRouter key (fallback backend)
    DEEPSEEK_BASE_URL / OPENROUTER_BASE_URL: endpoint overrides
    DEEPSEEK_MODEL / OPENROUTER_MODEL: model identifiers
    LLM_TEMPERATURE: Sampling temperature (default: 0.7)
    LLM_MAX_TOKENS: Maximum tokens to generate (default: 1000)
    LLM_TIMEOUT_SECONDS: Per-attempt request timeout (default: 30)
    LLM_MAX_RETRIES: Extra attempts on transient failures (default: 2)

    Example .env:
    -------------
    DEEPSEEK_API_KEY=sk-...
    OPENROUTER_API_KEY=sk-or-...
    LLM_TEMPERATURE=0.7
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    deepseek_api_key: Optional[str] = Field(default=None, alias="DEEPSEEK_API_KEY")
    openrouter_api_key: Optional[str] = Field(default=None, alias="OPENROUTER_API_KEY")

    deepseek_base_url: str = Field(default="https://api.deepseek.com", alias="DEEPSEEK_BASE_URL")
    openrouter_base_url: str = Field(default="https://openrouter.ai/api/v1", alias="OPENROUTER_BASE_URL")

    deepseek_model: str = Field(default="deepseek-chat", alias="DEEPSEEK_MODEL")
    openrouter_model: str = Field(default="deepseek/deepseek-chat", alias="OPENROUTER_MODEL")

    # Generation parameters
    temperature: float = Field(default=0.7, ge=0.0, le=2.0, alias="LLM_TEMPERATURE")
    max_tokens: int = Field(default=1000, gt=0, alias="LLM_MAX_TOKENS")

    # Transport limits
    timeout_seconds: float = Field(default=30.0, gt=0, alias="LLM_TIMEOUT_SECONDS")
    max_retries: int = Field(default=2, ge=0, le=5, alias="LLM_MAX_RETRIES")

    @field_validator("deepseek_api_key", "openrouter_api_key", mode="before")
    @classmethod
    def _blank_key_is_missing(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


def get_llm_settings() -> LLMSettings:
    """
    Get current LLM settings from environment.

    Returns:
        Fresh LLMSettings instance (reads .env and the process environment)
    """
    return LLMSettings()
