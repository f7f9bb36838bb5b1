"""
Local Whisper STT provider (faster-whisper).

The CTranslate2 model is fetched from the Hugging Face Hub on first load;
download progress is reported file by file through a tqdm subclass.
"""

from __future__ import annotations

import logging
import os
import time
from typing import Any, Dict, Optional

from tqdm import tqdm

from providers.stt.base import (
    ProgressCallback,
    STTError,
    STTProvider,
    Transcriber,
    TranscriptionResult,
)
from providers.registry import ProviderType, registry

logger = logging.getLogger(__name__)


def make_progress_tqdm(callback: ProgressCallback):
    """Return a tqdm class that forwards (n, total) to *callback* on every update.

    snapshot_download drives it as the "Fetching N files" bar, so n and total
    count files, not bytes.
    """

    class _ProgressTqdm(tqdm):
        def update(self, n=1):
            displayed = super().update(n)
            try:
                callback(float(self.n), float(self.total or 0))
            except Exception as exc:
                logger.debug("Progress callback failed: %s", exc)
            return displayed

    return _ProgressTqdm


class WhisperProvider(STTProvider):
    """Local Whisper model for transcription via faster-whisper."""

    provider_id = "whisper"

    def __init__(self, config: Dict[str, Any] = None) -> None:
        super().__init__(config)
        self.model_size = self._config.get("model", "tiny")
        self.device = self._config.get("device", "cpu")
        self.compute_type = self._config.get("compute_type", "int8")
        self.language = self._config.get("language", "en")
        self._model = None

    @property
    def repo_id(self) -> str:
        if "/" in self.model_size:
            return self.model_size
        return f"Systran/faster-whisper-{self.model_size}"

    def _download(self, progress_callback: Optional[ProgressCallback]) -> str:
        if os.path.isdir(self.model_size):
            return self.model_size

        from huggingface_hub import snapshot_download

        kwargs = {}
        if progress_callback is not None:
            kwargs["tqdm_class"] = make_progress_tqdm(progress_callback)
        return snapshot_download(self.repo_id, **kwargs)

    def load(self, progress_callback: Optional[ProgressCallback] = None) -> Transcriber:
        if self._model is None:
            try:
                from faster_whisper import WhisperModel  # type: ignore
            except ImportError:
                raise self.unavailable("faster-whisper not installed: pip install faster-whisper")
            try:
                model_path = self._download(progress_callback)
                self._model = WhisperModel(
                    model_path, device=self.device, compute_type=self.compute_type
                )
            except Exception as exc:
                raise STTError("whisper", f"Failed to load model: {exc}") from exc
            logger.info("Whisper model loaded: %s on %s", self.model_size, self.device)

        if progress_callback is not None:
            progress_callback(1.0, 1.0)
        return self.transcribe

    def transcribe(self, audio_path: str, language: Optional[str] = None) -> TranscriptionResult:
        if self._model is None:
            raise STTError("whisper", "Model not loaded")

        start = time.time()
        segments, info = self._model.transcribe(audio_path, language=language or self.language)
        text = " ".join(seg.text.strip() for seg in segments).strip()

        return TranscriptionResult(
            text=text,
            confidence=0.9,
            language=info.language,
            duration_ms=(time.time() - start) * 1000,
            provider="whisper",
        )

    def is_available(self) -> bool:
        try:
            from faster_whisper import WhisperModel  # type: ignore  # noqa: F401
            return True
        except ImportError:
            return False

    def get_info(self) -> Dict[str, Any]:
        return {
            "name": self._config.get("name", "Whisper Local"),
            "status": "active" if self.is_available() else "inactive",
            "model": self.model_size,
            "device": self.device,
            "loaded": self._model is not None,
            "available": self.is_available(),
        }


# Auto-register when this module is imported
registry.register(ProviderType.STT, "whisper", WhisperProvider)
