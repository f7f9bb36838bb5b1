"""
Recording controller: microphone permission, capture sessions, device release.

    idle → requesting_permission → idle         (probe, granted or denied)
    idle → recording → idle                     (start / stop)

stop() assembles the session's chunks into one AudioUnit, awaits the
finalize callback with it, and only then releases the device tracks. On
platforms whose audio pipeline tears down asynchronously the release is
deferred a little further.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Iterable, List, Optional, Sequence

from assistant.capabilities import AudioCapture, CaptureStream, CaptureTrack
from assistant.errors import PermissionDeniedError, RecordingStateError

logger = logging.getLogger(__name__)

# Gap between stopping consecutive tracks of one stream
TRACK_STOP_STAGGER = 0.1


class RecorderState(Enum):
    IDLE = "idle"
    REQUESTING_PERMISSION = "requesting_permission"
    RECORDING = "recording"


@dataclass(frozen=True)
class AudioUnit:
    """A finalized recording: all chunks concatenated, tagged with a MIME type."""

    data: bytes
    mime_type: str
    chunk_count: int


@dataclass
class RecordingSession:
    stream: CaptureStream
    chunks: List[bytes] = field(default_factory=list)

    def append(self, chunk: bytes) -> None:
        self.chunks.append(chunk)

    def finalize(self) -> AudioUnit:
        return AudioUnit(
            data=b"".join(self.chunks),
            mime_type=self.stream.mime_type,
            chunk_count=len(self.chunks),
        )


FinalizeCallback = Callable[[AudioUnit], Awaitable[None]]


def release_delay_for_platform(
    platforms: Iterable[str],
    delay: float,
    platform: Optional[str] = None,
) -> float:
    """Return *delay* when the running platform needs deferred track release, else 0."""
    platform = platform or sys.platform
    return delay if any(platform.startswith(p) for p in platforms) else 0.0


class RecordingController:
    """Owns the active RecordingSession and its capture stream."""

    def __init__(self, capture: AudioCapture, release_delay: float = 0.0) -> None:
        self._capture = capture
        self.release_delay = release_delay
        self.state = RecorderState.IDLE
        self._session: Optional[RecordingSession] = None
        self._on_finalize: Optional[FinalizeCallback] = None
        self._pending: List[_PendingStop] = []

    @property
    def is_recording(self) -> bool:
        return self.state is RecorderState.RECORDING

    @property
    def session(self) -> Optional[RecordingSession]:
        return self._session

    async def request_permission(self) -> bool:
        """Probe microphone access; the probe device is released immediately."""
        if self.state is not RecorderState.IDLE:
            raise RecordingStateError("Cannot request permission while recording")

        self.state = RecorderState.REQUESTING_PERMISSION
        try:
            stream = await self._capture.open()
        except Exception as exc:
            logger.warning("Microphone permission denied: %s", exc)
            return False
        finally:
            self.state = RecorderState.IDLE

        _stop_tracks(stream.get_tracks())
        return True

    async def start(self, on_finalize: FinalizeCallback) -> None:
        if self._session is not None:
            raise RecordingStateError("A recording session is already active")

        try:
            stream = await self._capture.open()
        except Exception as exc:
            logger.error("Recording error: %s", exc)
            raise PermissionDeniedError(f"Microphone unavailable: {exc}") from exc

        session = RecordingSession(stream=stream)
        self._session = session
        self._on_finalize = on_finalize
        stream.start(session.append)
        self.state = RecorderState.RECORDING
        logger.debug("Recording started (%s)", stream.mime_type)

    async def stop(self) -> AudioUnit:
        session = self._session
        if session is None or self.state is not RecorderState.RECORDING:
            raise RecordingStateError("No active recording session")

        on_finalize = self._on_finalize
        self._session = None
        self._on_finalize = None
        try:
            await session.stream.stop()
            audio = session.finalize()
            self.state = RecorderState.IDLE
            logger.debug("Recording stopped: %d chunks, %d bytes", audio.chunk_count, len(audio.data))
            if on_finalize is not None:
                await on_finalize(audio)
        finally:
            # A stream that failed to stop still gets its tracks released
            self.state = RecorderState.IDLE
            self._release_stream(session.stream)
        return audio

    @property
    def pending_release(self) -> int:
        """Number of tracks whose release is still scheduled."""
        return len(self._pending)

    def release(self) -> None:
        """Stop every track still held, including deferred ones (teardown)."""
        pending, self._pending = self._pending, []
        for entry in pending:
            if entry.handle is not None:
                entry.handle.cancel()
            _stop_tracks([entry.track])
        session, self._session = self._session, None
        self._on_finalize = None
        self.state = RecorderState.IDLE
        if session is not None:
            _stop_tracks(session.stream.get_tracks())

    def _release_stream(self, stream: CaptureStream) -> None:
        tracks = list(stream.get_tracks())
        if self.release_delay <= 0 and tracks:
            _stop_tracks(tracks[:1])
            tracks = tracks[1:]
            delay = TRACK_STOP_STAGGER
        else:
            delay = self.release_delay

        if tracks:
            loop = asyncio.get_running_loop()
            for index, track in enumerate(tracks):
                self._schedule_stop(loop, delay + index * TRACK_STOP_STAGGER, track)

    def _schedule_stop(self, loop: asyncio.AbstractEventLoop, delay: float, track: CaptureTrack) -> None:
        entry = _PendingStop(track)
        entry.handle = loop.call_later(delay, self._run_pending, entry)
        self._pending.append(entry)

    def _run_pending(self, entry: "_PendingStop") -> None:
        if entry in self._pending:
            self._pending.remove(entry)
        _stop_tracks([entry.track])


@dataclass(eq=False)
class _PendingStop:
    track: CaptureTrack
    handle: Optional[asyncio.TimerHandle] = None


def _stop_tracks(tracks: Sequence[CaptureTrack]) -> None:
    for track in tracks:
        try:
            track.stop()
        except Exception as exc:
            logger.warning("Failed to stop capture track: %s", exc)


__all__ = [
    "AudioUnit",
    "RecorderState",
    "RecordingController",
    "RecordingSession",
    "release_delay_for_platform",
]
