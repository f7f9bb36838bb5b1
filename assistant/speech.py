"""
Speech output: speak a reply through the host synthesizer.

Each speak() cancels whatever is playing first, so at most one utterance is
audible. Playback is fire-and-forget; the caller never waits for it.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from providers.tts.base import TTSProvider, TTSVoice
from services.reply_cleaner import strip_delimiters

logger = logging.getLogger(__name__)


def _normalize_lang(tag: str) -> str:
    return (tag or "").replace("_", "-").lower()


def select_voice(
    voices: List[TTSVoice],
    preferred_name: str = "Microsoft Zira",
    preferred_language: str = "en-US",
) -> Optional[TTSVoice]:
    """First voice whose name contains *preferred_name* or whose language contains
    *preferred_language*; None means use the host default."""
    wanted_lang = _normalize_lang(preferred_language)
    for voice in voices:
        if preferred_name and preferred_name in (voice.name or ""):
            return voice
        if wanted_lang and wanted_lang in _normalize_lang(voice.language):
            return voice
    return None


class SpeechOutput:
    def __init__(
        self,
        synthesizer: Optional[TTSProvider],
        preferred_name: str = "Microsoft Zira",
        preferred_language: str = "en-US",
        rate: float = 1.0,
        pitch: float = 1.0,
        volume: float = 1.0,
    ) -> None:
        self._synth = synthesizer
        self.preferred_name = preferred_name
        self.preferred_language = preferred_language
        self.rate = rate
        self.pitch = pitch
        self.volume = volume
        if synthesizer is not None:
            try:
                synthesizer.on_voices_changed(self._log_voices)
            except Exception as exc:
                logger.warning("Could not watch voice list: %s", exc)

    @property
    def supported(self) -> bool:
        return self._synth is not None

    def _log_voices(self) -> None:
        voices = self._synth.list_voices_detailed()
        logger.debug("Available voices: %s", [v.name for v in voices])

    def speak(self, text: str) -> None:
        if self._synth is None:
            logger.warning("Speech synthesis not supported")
            return

        self._synth.cancel()

        clean_text = strip_delimiters(text)
        if not clean_text:
            return

        voice = select_voice(
            self._synth.list_voices_detailed(),
            self.preferred_name,
            self.preferred_language,
        )
        self._synth.speak(
            clean_text,
            voice_id=voice.id if voice else None,
            rate=self.rate,
            pitch=self.pitch,
            volume=self.volume,
        )

    def cancel(self) -> None:
        if self._synth is not None:
            self._synth.cancel()


__all__ = ["SpeechOutput", "select_voice"]
