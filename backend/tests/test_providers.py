import pytest

from lvl.agent.providers import (
    AIProvider,
    available_providers,
    get_preferred_ai_provider,
    resolve_provider,
)
from lvl.core.errors import NoProviderConfigured
from lvl.core.llm_config import LLMSettings


def settings_with(deepseek=None, openrouter=None) -> LLMSettings:
    return LLMSettings(_env_file=None, deepseek_api_key=deepseek, openrouter_api_key=openrouter)


def test_direct_backend_preferred_when_both_keys_present():
    assert get_preferred_ai_provider(settings_with("sk-ds", "sk-or")) == AIProvider.DEEPSEEK


def test_gateway_used_when_only_its_key_present():
    assert get_preferred_ai_provider(settings_with(openrouter="sk-or")) == AIProvider.OPENROUTER


def test_no_keys_raises():
    with pytest.raises(NoProviderConfigured):
        get_preferred_ai_provider(settings_with())


def test_blank_key_counts_as_missing():
    assert get_preferred_ai_provider(settings_with(deepseek="   ", openrouter="sk-or")) == AIProvider.OPENROUTER


def test_keys_read_from_environment(monkeypatch):
    monkeypatch.setenv("OPENROUTER_API_KEY", "sk-or-env")

    settings = LLMSettings(_env_file=None)

    assert settings.openrouter_api_key == "sk-or-env"
    assert get_preferred_ai_provider(settings) == AIProvider.OPENROUTER


def test_override_bypasses_precedence_without_checking_credentials():
    settings = settings_with(deepseek="sk-ds")

    assert resolve_provider(AIProvider.OPENROUTER, settings) == AIProvider.OPENROUTER
    assert resolve_provider("openrouter", settings_with()) == AIProvider.OPENROUTER


def test_resolve_without_override_uses_precedence():
    assert resolve_provider(None, settings_with(deepseek="sk-ds")) == AIProvider.DEEPSEEK


def test_available_providers_reports_presence():
    assert available_providers(settings_with(openrouter="sk-or")) == {
        "deepseek": False,
        "openrouter": True,
    }


def test_generation_defaults():
    settings = settings_with()

    assert settings.temperature == 0.7
    assert settings.max_tokens == 1000
    assert settings.max_retries == 2
    assert settings.deepseek_base_url == "https://api.deepseek.com"
    assert settings.openrouter_base_url == "https://openrouter.ai/api/v1"
