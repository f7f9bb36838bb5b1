"""
Transcription adapter: AudioUnit → temporary audio file → transcriber → text.

Raw PCM captures (audio/L16;rate=...;channels=...) are wrapped in a WAV
container; every other MIME type is written out unchanged. Model errors
propagate to the caller untouched.
"""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
import wave
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from assistant.errors import ModelNotLoadedError
from assistant.recording import AudioUnit
from providers.stt.base import Transcriber

logger = logging.getLogger(__name__)

_SUFFIXES = {
    "audio/wav": ".wav",
    "audio/x-wav": ".wav",
    "audio/wave": ".wav",
    "audio/webm": ".webm",
    "audio/ogg": ".ogg",
    "audio/mpeg": ".mp3",
    "audio/mp4": ".m4a",
    "audio/flac": ".flac",
}


def _parse_mime(mime_type: str):
    """Split 'audio/L16;rate=16000;channels=1' into ('audio/l16', {'rate': '16000', ...})."""
    base, *params = [part.strip() for part in (mime_type or "").split(";")]
    options: Dict[str, str] = {}
    for param in params:
        key, _, value = param.partition("=")
        if key:
            options[key.strip().lower()] = value.strip()
    return base.lower(), options


@contextmanager
def audio_reference(audio: AudioUnit) -> Iterator[str]:
    """Write *audio* to a temporary file and yield its path; the file is removed afterwards."""
    base, options = _parse_mime(audio.mime_type)
    suffix = ".wav" if base == "audio/l16" else _SUFFIXES.get(base, ".bin")

    with tempfile.NamedTemporaryFile(suffix=suffix, delete=False) as f:
        path = f.name
        if base != "audio/l16":
            f.write(audio.data)

    try:
        if base == "audio/l16":
            with wave.open(path, "wb") as wav:
                wav.setnchannels(int(options.get("channels", 1)))
                wav.setsampwidth(2)
                wav.setframerate(int(options.get("rate", 16000)))
                wav.writeframes(audio.data)
        yield path
    finally:
        try:
            os.unlink(path)
        except OSError:
            pass


async def transcribe(audio: AudioUnit, transcriber: Optional[Transcriber]) -> str:
    """Return the recognized text for *audio*."""
    if transcriber is None:
        raise ModelNotLoadedError("Voice model not loaded")

    with audio_reference(audio) as path:
        result = await asyncio.to_thread(transcriber, path)

    text = result["text"] if isinstance(result, dict) else result.text
    logger.info("Transcribed %d bytes of %s: %r", len(audio.data), audio.mime_type, text)
    return text


__all__ = ["audio_reference", "transcribe"]
