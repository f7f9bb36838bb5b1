"""
Host capability contracts injected into the assistant.

The lifecycle core never touches a microphone, a socket or a speaker
directly; it talks to these interfaces so tests can hand it fakes.
Speech output uses providers.tts.base.TTSProvider.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable, Protocol, Sequence

ChunkCallback = Callable[[bytes], None]


class CaptureTrack(Protocol):
    """One live input track; stop() releases it (idempotent)."""

    def stop(self) -> None:
        ...


class CaptureStream(Protocol):
    """An opened capture device."""

    mime_type: str

    def start(self, on_chunk: ChunkCallback) -> None:
        """Begin delivering audio chunks to *on_chunk* on the event loop."""

    async def stop(self) -> None:
        """Stop capturing; returns once no further chunks will be delivered."""

    def get_tracks(self) -> Sequence[CaptureTrack]:
        ...


class AudioCapture(Protocol):
    """Microphone access. open() raises when the host denies access."""

    async def open(self) -> CaptureStream:
        ...


@dataclass
class HttpResponse:
    status: int
    text: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def json(self) -> Any:
        return json.loads(self.text)


class HttpClient(Protocol):
    async def post_json(self, url: str, payload: dict) -> HttpResponse:
        """POST *payload* as JSON; raises on transport failure."""


__all__ = [
    "ChunkCallback",
    "CaptureTrack",
    "CaptureStream",
    "AudioCapture",
    "HttpResponse",
    "HttpClient",
]
