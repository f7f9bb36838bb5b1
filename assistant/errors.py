"""
Assistant error taxonomy.

Every error's str() is the bare message shown to the user; ``kind`` names the
taxonomy entry recorded on a Turn.
"""

from typing import Optional

# Kind recorded for opaque failures raised by the speech-recognition model
TRANSCRIPTION_FAILURE = "TranscriptionFailure"


class AssistantError(Exception):
    """Base exception for assistant lifecycle errors."""

    kind = "AssistantError"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ModelLoadError(AssistantError):
    """The speech-recognition model could not be loaded. Terminal."""

    kind = "ModelLoadFailure"


class PermissionDeniedError(AssistantError):
    """The host refused microphone access."""

    kind = "PermissionDenied"


class ModelNotLoadedError(AssistantError):
    """Transcription requested before the model became ready."""

    kind = "ModelNotLoaded"


class EmptyInputError(AssistantError):
    """Transcript is empty after trimming."""

    kind = "EmptyInput"


class RateLimitedError(AssistantError):
    """A response request arrived inside the minimum interval."""

    kind = "RateLimited"


class RemoteError(AssistantError):
    """The completion endpoint failed or could not be reached."""

    kind = "RemoteError"

    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message)


class RecordingStateError(AssistantError):
    """start()/stop() called out of order."""

    kind = "RecordingState"


__all__ = [
    "TRANSCRIPTION_FAILURE",
    "AssistantError",
    "ModelLoadError",
    "PermissionDeniedError",
    "ModelNotLoadedError",
    "EmptyInputError",
    "RateLimitedError",
    "RemoteError",
    "RecordingStateError",
]
