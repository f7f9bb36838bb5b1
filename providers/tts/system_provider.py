"""
Host speech synthesizer (pyttsx3: SAPI5 on Windows, NSSpeechSynthesizer on
macOS, eSpeak on Linux).

All utterances are spoken by a single worker thread so the engine's run loop
is never entered twice; speak() only enqueues.
"""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from providers.tts.base import TTSError, TTSProvider, TTSVoice
from providers.registry import ProviderType, registry

logger = logging.getLogger(__name__)


@dataclass
class _Utterance:
    text: str
    voice_id: Optional[str]
    rate: float
    volume: float


def _voice_language(voice) -> str:
    """Return the first language tag of a pyttsx3 voice as text.

    eSpeak reports languages as bytes prefixed with a priority byte
    (b'\\x05en-us'); other drivers use plain strings.
    """
    languages = getattr(voice, "languages", None) or []
    if not languages:
        return ""
    lang = languages[0]
    if isinstance(lang, bytes):
        lang = lang.decode("utf-8", errors="ignore")
    return "".join(ch for ch in str(lang) if ch.isprintable()).strip()


class SystemTTSProvider(TTSProvider):
    """Speaks through the operating system's voices via pyttsx3."""

    provider_id = "system"

    def __init__(self, config: Dict[str, Any] = None) -> None:
        super().__init__(config)
        self._engine = None
        self._base_rate: Optional[int] = None
        self._queue: "queue.Queue[Optional[_Utterance]]" = queue.Queue()
        self._worker: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        self._speaking = threading.Event()

    def _get_engine(self):
        with self._lock:
            if self._engine is None:
                try:
                    import pyttsx3  # type: ignore
                except ImportError:
                    raise self.unavailable("pyttsx3 not installed: pip install pyttsx3")
                try:
                    self._engine = pyttsx3.init()
                except Exception as exc:
                    raise TTSError(self.provider_id, f"Speech engine failed to start: {exc}") from exc
                self._base_rate = self._engine.getProperty("rate")
            if self._worker is None:
                self._worker = threading.Thread(
                    target=self._speak_loop, name="tts-system", daemon=True
                )
                self._worker.start()
            return self._engine

    def _speak_loop(self) -> None:
        while True:
            utterance = self._queue.get()
            if utterance is None:
                break
            engine = self._engine
            try:
                if utterance.voice_id:
                    engine.setProperty("voice", utterance.voice_id)
                if self._base_rate:
                    engine.setProperty("rate", int(self._base_rate * utterance.rate))
                engine.setProperty("volume", utterance.volume)
                self._speaking.set()
                engine.say(utterance.text)
                engine.runAndWait()
            except Exception as exc:
                logger.error("Speech playback failed: %s", exc)
            finally:
                self._speaking.clear()

    def list_voices_detailed(self) -> List[TTSVoice]:
        engine = self._get_engine()
        return [
            TTSVoice(id=v.id, name=v.name or v.id, language=_voice_language(v))
            for v in engine.getProperty("voices") or []
        ]

    def speak(
        self,
        text: str,
        voice_id: Optional[str] = None,
        rate: float = 1.0,
        pitch: float = 1.0,
        volume: float = 1.0,
    ) -> None:
        self.validate_text(text)
        self._get_engine()
        # pyttsx3 has no portable pitch property
        self._queue.put(_Utterance(text=text, voice_id=voice_id, rate=rate, volume=volume))

    def cancel(self) -> None:
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                break
        if self._engine is not None and self._speaking.is_set():
            self._engine.stop()

    def shutdown(self) -> None:
        """Stop playback and end the worker thread."""
        self.cancel()
        if self._worker is not None:
            self._queue.put(None)
            self._worker.join(timeout=1.0)
            self._worker = None

    def is_available(self) -> bool:
        try:
            import pyttsx3  # type: ignore  # noqa: F401
            return True
        except ImportError:
            return False

    def get_info(self) -> Dict[str, Any]:
        info = super().get_info()
        info["name"] = self._config.get("name", "System Voice")
        return info


# Auto-register when this module is imported
registry.register(ProviderType.TTS, "system", SystemTTSProvider)
