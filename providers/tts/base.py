"""
TTS provider abstract base class.

A TTS provider here is a *host speech synthesizer*: it plays utterances on the
local audio output rather than returning audio bytes. At most one utterance
plays at a time; cancel() stops the current one and drops anything queued.
"""

from abc import abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from providers.base import BaseProvider, ProviderError


@dataclass
class TTSVoice:
    id: str
    name: str
    language: str = "en"


class TTSProvider(BaseProvider):
    """Abstract base class for host speech synthesizers."""

    @abstractmethod
    def list_voices_detailed(self) -> List[TTSVoice]:
        """Return the voices installed on the host."""

    @abstractmethod
    def speak(
        self,
        text: str,
        voice_id: Optional[str] = None,
        rate: float = 1.0,
        pitch: float = 1.0,
        volume: float = 1.0,
    ) -> None:
        """Start speaking *text* without blocking the caller."""

    @abstractmethod
    def cancel(self) -> None:
        """Stop the current utterance and discard pending ones."""

    def on_voices_changed(self, callback: Callable[[], None]) -> None:
        """Register *callback* for voice-list changes.

        Hosts whose voice list is ready immediately just invoke it once.
        """
        callback()

    def validate_text(self, text: str) -> None:
        if text is None:
            raise ValueError("Text cannot be None")
        if not isinstance(text, str):
            raise ValueError(f"Text must be str, got {type(text).__name__}")
        if not text.strip():
            raise ValueError("Text cannot be empty or whitespace-only")

    def get_info(self) -> Dict[str, Any]:
        return {
            "name": self._config.get("name", self.__class__.__name__),
            "status": "active" if self.is_available() else "inactive",
            "available": self.is_available(),
        }


class TTSError(ProviderError):
    """TTS-specific provider error."""


__all__ = ["TTSProvider", "TTSVoice", "TTSError"]
