"""
Microphone capture backed by sounddevice.

open() creates a RawInputStream (16-bit signed PCM); a device error there
is how the host signals that the microphone is unavailable. Chunks arrive
on PortAudio's thread and are handed to the event loop.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

from assistant.capabilities import ChunkCallback

logger = logging.getLogger(__name__)


class SoundDeviceTrack:
    """The single input track of a RawInputStream; stop() closes the stream."""

    def __init__(self, stream) -> None:
        self._stream = stream
        self._stopped = False

    def stop(self) -> None:
        if self._stopped:
            return
        self._stopped = True
        self._stream.close()


class SoundDeviceStream:
    def __init__(self, stream, sample_rate: int, channels: int, loop: asyncio.AbstractEventLoop) -> None:
        self._stream = stream
        self._loop = loop
        self._on_chunk: Optional[ChunkCallback] = None
        self._tracks: List[SoundDeviceTrack] = [SoundDeviceTrack(stream)]
        self.mime_type = f"audio/L16;rate={sample_rate};channels={channels}"

    def _callback(self, indata, frames, time_info, status) -> None:
        if status:
            logger.debug("Input stream status: %s", status)
        on_chunk = self._on_chunk
        if on_chunk is not None:
            self._loop.call_soon_threadsafe(on_chunk, bytes(indata))

    def start(self, on_chunk: ChunkCallback) -> None:
        self._on_chunk = on_chunk
        self._stream.start()

    async def stop(self) -> None:
        await asyncio.to_thread(self._stream.stop)
        # Let chunks queued by the last callbacks reach the session
        await asyncio.sleep(0)
        self._on_chunk = None

    def get_tracks(self) -> List[SoundDeviceTrack]:
        return list(self._tracks)


class SoundDeviceCapture:
    def __init__(self, sample_rate: int = 16000, channels: int = 1, device=None) -> None:
        self.sample_rate = sample_rate
        self.channels = channels
        self.device = device

    async def open(self) -> SoundDeviceStream:
        import sounddevice as sd

        loop = asyncio.get_running_loop()
        holder: dict = {}

        def callback(indata, frames, time_info, status) -> None:
            holder["stream"]._callback(indata, frames, time_info, status)

        raw = await asyncio.to_thread(
            sd.RawInputStream,
            samplerate=self.sample_rate,
            channels=self.channels,
            dtype="int16",
            device=self.device,
            callback=callback,
        )
        stream = SoundDeviceStream(raw, self.sample_rate, self.channels, loop)
        holder["stream"] = stream
        logger.debug("Opened input device %s at %d Hz", self.device or "(default)", self.sample_rate)
        return stream


__all__ = ["SoundDeviceCapture", "SoundDeviceStream", "SoundDeviceTrack"]
