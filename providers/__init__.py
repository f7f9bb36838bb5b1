"""
Provider package — abstract base class + registry pattern.

Sub-packages:
  providers.llm      — LLMProvider base class + Hugging Face text generation
  providers.tts      — TTSProvider base class + host speech synthesizer
  providers.stt      — STTProvider base class + local Whisper
  providers.registry — ProviderRegistry and the shared registry instance
"""

from providers.base import (
    BaseProvider,
    ProviderError,
    ProviderUnavailableError,
)
from providers.registry import (
    ProviderRegistry,
    ProviderType,
    registry,
    get_llm_provider,
    get_tts_provider,
    get_stt_provider,
)

__all__ = [
    # Base classes
    "BaseProvider",
    "ProviderError",
    "ProviderUnavailableError",
    # Registry
    "ProviderRegistry",
    "ProviderType",
    "registry",
    "get_llm_provider",
    "get_tts_provider",
    "get_stt_provider",
]
