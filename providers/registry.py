"""
Provider registry: one module-level instance shared by every caller.

Usage:
    from providers.registry import registry, ProviderType

    # Register a provider
    registry.register(ProviderType.LLM, 'huggingface', HuggingFaceProvider)

    # Get a provider instance
    llm = registry.get_provider(ProviderType.LLM)            # default
    stt = registry.get_provider(ProviderType.STT, 'whisper')  # specific

Provider config comes from the matching section of config/default.yaml:

    chat:    -> ProviderType.LLM
    stt:     -> ProviderType.STT
    speech:  -> ProviderType.TTS

each with a ``default_provider`` key and a ``providers.<id>`` mapping.
"""

from __future__ import annotations

import logging
import os
import re
from enum import Enum
from typing import Any, Dict, Optional, Type

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)\}")


class ProviderType(Enum):
    LLM = "llm"
    TTS = "tts"
    STT = "stt"


# ProviderType → top-level section in config/default.yaml
_CONFIG_SECTIONS = {
    ProviderType.LLM: "chat",
    ProviderType.STT: "stt",
    ProviderType.TTS: "speech",
}


class ProviderRegistry:
    """Registry for all provider types (LLM, TTS, STT).

    Providers are registered with a unique string ID per type.
    get_provider() returns an instantiated provider with config merged from
    the app config section and any explicit config passed at register() time.
    """

    def __init__(self, settings: Optional[Any] = None) -> None:
        self._providers: Dict[ProviderType, Dict[str, Type]] = {
            ProviderType.LLM: {},
            ProviderType.TTS: {},
            ProviderType.STT: {},
        }
        # Static config passed at register() time
        self._static_configs: Dict[str, Dict] = {}
        # Config accessor (config.loader.Config); resolved lazily when None
        self._settings = settings

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(
        self,
        provider_type: ProviderType,
        provider_id: str,
        provider_class: Type,
        config: Optional[Dict] = None,
    ) -> None:
        """Register a provider implementation.

        Args:
            provider_type: LLM, TTS, or STT.
            provider_id:   Unique string key (e.g. 'huggingface', 'whisper').
            provider_class: Class (not instance) implementing the base type.
            config:         Optional static config dict merged with app config.
        """
        self._providers[provider_type][provider_id] = provider_class
        if config:
            self._static_configs[provider_id] = config
        logger.debug("Registered %s provider: %s", provider_type.value, provider_id)

    # ------------------------------------------------------------------
    # Retrieval
    # ------------------------------------------------------------------

    def get_provider(
        self,
        provider_type: ProviderType,
        provider_id: Optional[str] = None,
    ) -> Any:
        """Return an instantiated provider.

        If provider_id is None, the default is read from the config section
        (<section>.default_provider) or falls back to the first registered
        provider for that type.

        Raises:
            ValueError: if the provider_id is not registered.
        """
        if provider_id is None:
            provider_id = self._get_default_id(provider_type)

        if provider_id not in self._providers[provider_type]:
            available = list(self._providers[provider_type].keys())
            raise ValueError(
                f"Unknown {provider_type.value} provider: '{provider_id}'. "
                f"Available: {available}"
            )

        provider_class = self._providers[provider_type][provider_id]
        return provider_class(self._build_config(provider_type, provider_id))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _get_settings(self):
        if self._settings is None:
            from config.loader import config
            self._settings = config
        return self._settings

    def _section(self, provider_type: ProviderType) -> Dict:
        return self._get_settings().section(_CONFIG_SECTIONS[provider_type])

    def _get_default_id(self, provider_type: ProviderType) -> str:
        default = self._section(provider_type).get("default_provider")
        if default and default in self._providers[provider_type]:
            return default

        registered = list(self._providers[provider_type].keys())
        if registered:
            return registered[0]

        raise ValueError(
            f"No {provider_type.value} providers registered. "
            "Call registry.register() first."
        )

    def _build_config(self, provider_type: ProviderType, provider_id: str) -> Dict:
        """Merge static + app config for a provider ID."""
        config = dict(self._static_configs.get(provider_id, {}))
        config.update(self._section(provider_type).get("providers", {}).get(provider_id, {}))
        return _resolve_env_vars(config)


def _resolve_env_vars(config: Dict) -> Dict:
    """Recursively resolve ${ENV_VAR} placeholders in string config values."""

    def _resolve(value: Any) -> Any:
        if isinstance(value, str):
            return _PLACEHOLDER.sub(lambda m: os.environ.get(m.group(1), m.group(0)), value)
        if isinstance(value, dict):
            return {k: _resolve(v) for k, v in value.items()}
        if isinstance(value, list):
            return [_resolve(v) for v in value]
        return value

    return _resolve(config)


# ---------------------------------------------------------------------------
# Module-level singleton + convenience aliases
# ---------------------------------------------------------------------------

registry = ProviderRegistry()


def get_llm_provider(provider_id: Optional[str] = None) -> Any:
    """Convenience: get an LLM provider instance."""
    return registry.get_provider(ProviderType.LLM, provider_id)


def get_tts_provider(provider_id: Optional[str] = None) -> Any:
    """Convenience: get a TTS provider instance."""
    return registry.get_provider(ProviderType.TTS, provider_id)


def get_stt_provider(provider_id: Optional[str] = None) -> Any:
    """Convenience: get an STT provider instance."""
    return registry.get_provider(ProviderType.STT, provider_id)


__all__ = [
    "ProviderType",
    "ProviderRegistry",
    "registry",
    "get_llm_provider",
    "get_tts_provider",
    "get_stt_provider",
]
