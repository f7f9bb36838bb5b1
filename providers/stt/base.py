"""
STT provider abstract base class.

An STT provider loads a speech-recognition model once and hands back a
*transcriber*: a callable taking an audio file reference and returning a
TranscriptionResult. Loading reports progress as (completed, total) pairs.
"""

from abc import abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from providers.base import BaseProvider, ProviderError

ProgressCallback = Callable[[float, float], None]


@dataclass
class TranscriptionResult:
    text: str
    confidence: float = 0.0
    language: str = "en"
    duration_ms: float = 0.0
    provider: str = ""
    segments: Optional[List[Dict]] = field(default=None)


Transcriber = Callable[[str], TranscriptionResult]


class STTProvider(BaseProvider):
    """Abstract base class for local speech-recognition providers."""

    @abstractmethod
    def load(self, progress_callback: Optional[ProgressCallback] = None) -> Transcriber:
        """Load the model (blocking) and return the transcriber capability."""

    @abstractmethod
    def transcribe(self, audio_path: str, language: Optional[str] = None) -> TranscriptionResult:
        """Transcribe the audio file at *audio_path*."""


class STTError(ProviderError):
    """STT-specific provider error."""


__all__ = ["STTProvider", "TranscriptionResult", "Transcriber", "ProgressCallback", "STTError"]
