"""
Tests for the provider registry.
Abstract base class + registry pattern; config comes from the app config sections.
"""

import pytest
from providers.registry import ProviderRegistry, ProviderType, _resolve_env_vars


# ---------------------------------------------------------------------------
# Minimal concrete providers for testing
# ---------------------------------------------------------------------------

class _FakeProvider:
    def __init__(self, config=None):
        self._config = config or {}
    def is_available(self):
        return self._config.get("available", True)
    def get_info(self):
        return {"name": self._config.get("name", "fake"), "status": "active", "available": True}


class _Settings:
    """Stand-in for config.loader.Config with just section()."""

    def __init__(self, sections=None):
        self.sections = sections or {}

    def section(self, key):
        return dict(self.sections.get(key, {}))


# ---------------------------------------------------------------------------
# Fixture: isolated registry (don't pollute the global singleton for tests)
# ---------------------------------------------------------------------------

@pytest.fixture
def reg():
    """A fresh ProviderRegistry with empty config sections."""
    return ProviderRegistry(settings=_Settings())


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------

def test_register_and_get_provider(reg):
    reg.register(ProviderType.LLM, "fake", _FakeProvider)
    assert isinstance(reg.get_provider(ProviderType.LLM, "fake"), _FakeProvider)


def test_register_with_config(reg):
    reg.register(ProviderType.TTS, "fake-tts", _FakeProvider, config={"name": "My Voice"})
    assert reg.get_provider(ProviderType.TTS, "fake-tts")._config["name"] == "My Voice"


def test_get_unknown_provider_raises(reg):
    with pytest.raises(ValueError, match="Unknown"):
        reg.get_provider(ProviderType.LLM, "does_not_exist")


# ---------------------------------------------------------------------------
# Defaults and config sections
# ---------------------------------------------------------------------------

def test_default_from_config_section():
    reg = ProviderRegistry(settings=_Settings({"speech": {"default_provider": "second"}}))
    reg.register(ProviderType.TTS, "first", _FakeProvider, config={"name": "one"})
    reg.register(ProviderType.TTS, "second", _FakeProvider, config={"name": "two"})
    assert reg.get_provider(ProviderType.TTS)._config["name"] == "two"


def test_default_falls_back_to_first_registered():
    reg = ProviderRegistry(settings=_Settings({"chat": {"default_provider": "missing"}}))
    reg.register(ProviderType.LLM, "first", _FakeProvider, config={"name": "one"})
    reg.register(ProviderType.LLM, "second", _FakeProvider)
    assert reg.get_provider(ProviderType.LLM)._config["name"] == "one"


def test_get_default_no_providers_raises(reg):
    with pytest.raises(ValueError, match="No stt providers registered"):
        reg.get_provider(ProviderType.STT)


def test_section_config_overrides_static():
    settings = _Settings({"stt": {"providers": {"whisper": {"model": "base", "device": "cuda"}}}})
    reg = ProviderRegistry(settings=settings)
    reg.register(ProviderType.STT, "whisper", _FakeProvider, config={"model": "tiny", "name": "W"})
    config = reg.get_provider(ProviderType.STT, "whisper")._config
    assert config == {"model": "base", "device": "cuda", "name": "W"}


# ---------------------------------------------------------------------------
# Env-var resolution
# ---------------------------------------------------------------------------

def test_env_var_resolution(monkeypatch, reg):
    monkeypatch.setenv("HF_TOKEN", "hf_secret")
    reg.register(ProviderType.LLM, "env-test", _FakeProvider, config={"api_token": "${HF_TOKEN}"})
    assert reg.get_provider(ProviderType.LLM, "env-test")._config["api_token"] == "hf_secret"


def test_unresolved_env_var_keeps_placeholder(monkeypatch):
    monkeypatch.delenv("NONEXISTENT_VAR", raising=False)
    assert _resolve_env_vars({"key": "${NONEXISTENT_VAR}"}) == {"key": "${NONEXISTENT_VAR}"}


def test_env_vars_resolved_in_nested_values(monkeypatch):
    monkeypatch.setenv("VOICE", "zira")
    resolved = _resolve_env_vars({"a": {"b": ["x-${VOICE}", 3]}, "n": 1.5})
    assert resolved == {"a": {"b": ["x-zira", 3]}, "n": 1.5}


# ---------------------------------------------------------------------------
# Global registry
# ---------------------------------------------------------------------------

def test_concrete_providers_registered():
    """Importing providers.llm/tts/stt auto-registers the concrete providers."""
    import providers.llm  # noqa: F401
    import providers.stt  # noqa: F401
    import providers.tts  # noqa: F401

    from providers.llm.huggingface_provider import HuggingFaceProvider
    from providers.registry import registry as r
    from providers.stt.whisper_provider import WhisperProvider
    from providers.tts.system_provider import SystemTTSProvider

    assert isinstance(r.get_provider(ProviderType.LLM, "huggingface"), HuggingFaceProvider)
    assert isinstance(r.get_provider(ProviderType.STT, "whisper"), WhisperProvider)
    assert isinstance(r.get_provider(ProviderType.TTS, "system"), SystemTTSProvider)


def test_default_providers_from_app_config(monkeypatch):
    import providers.llm  # noqa: F401
    import providers.stt  # noqa: F401
    from providers.registry import get_llm_provider, get_stt_provider

    monkeypatch.setenv("HF_TOKEN", "hf_test")
    llm = get_llm_provider()
    assert llm.default_model == "mistralai/Mistral-7B-Instruct-v0.1"
    assert llm.api_token == "hf_test"
    assert get_stt_provider().model_size == "tiny"
