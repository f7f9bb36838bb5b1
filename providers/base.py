"""
Provider abstract base classes.

The LLM (text generation), STT (speech recognition) and TTS (speech
synthesis) capabilities share this interface contract so the proxy route,
health probes and the assistant console can pick them from the registry.

A provider whose library or credentials are missing raises
ProviderUnavailableError from the call that needed them; is_available()
answers the same question without raising.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict


class BaseProvider(ABC):
    """Common base for all provider types."""

    # Registry id, used as the provider name in errors
    provider_id = "base"

    def __init__(self, config: Dict[str, Any] = None):
        self._config = config or {}

    @abstractmethod
    def is_available(self) -> bool:
        """Return True if the provider can handle requests right now."""

    @abstractmethod
    def get_info(self) -> Dict[str, Any]:
        """Return metadata dict with at minimum 'name' and 'status' keys."""

    def unavailable(self, reason: str) -> "ProviderUnavailableError":
        return ProviderUnavailableError(self.provider_id, reason)


class ProviderError(Exception):
    """Base exception for all provider errors."""

    def __init__(self, provider_name: str, message: str):
        self.provider_name = provider_name
        self.message = message
        super().__init__(f"[{provider_name}] {message}")


class ProviderUnavailableError(ProviderError):
    """Missing dependency or credential; retrying will not help."""


__all__ = [
    "BaseProvider",
    "ProviderError",
    "ProviderUnavailableError",
]
