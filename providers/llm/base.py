"""
LLM provider abstract base class.

Providers here are plain text-completion backends: one instruction-style
prompt in, generated text out. The /api/chat route owns prompt formatting.
"""

from abc import abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from providers.base import BaseProvider, ProviderError


@dataclass
class LLMResponse:
    content: str
    model: str
    provider: str
    usage: Dict[str, int] = field(default_factory=dict)
    latency_ms: float = 0.0
    finish_reason: str = "stop"
    raw_response: Any = None


class LLMProvider(BaseProvider):
    """Abstract base class for text-generation providers."""

    @abstractmethod
    def generate(
        self,
        prompt: str,
        model: Optional[str] = None,
        **kwargs,
    ) -> LLMResponse:
        """Generate a complete (non-streaming) completion for *prompt*."""

    def list_models(self) -> List[str]:
        return self._config.get("models", [self.get_default_model()])

    def get_default_model(self) -> str:
        return self._config.get("default_model", "default")

    def get_info(self) -> Dict[str, Any]:
        return {
            "name": self._config.get("name", self.__class__.__name__),
            "models": self.list_models(),
            "available": self.is_available(),
            "status": "active" if self.is_available() else "inactive",
        }


class LLMError(ProviderError):
    """LLM-specific provider error."""


__all__ = ["LLMProvider", "LLMResponse", "LLMError"]
