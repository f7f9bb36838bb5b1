"""STT provider package.

Importing this package registers all STT providers with the registry.
"""

from providers.stt.base import STTProvider, TranscriptionResult, Transcriber, STTError

# Import concrete providers so their registry.register() calls fire
from providers.stt import whisper_provider  # noqa: F401

__all__ = ["STTProvider", "TranscriptionResult", "Transcriber", "STTError"]
