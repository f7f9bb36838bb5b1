"""
Speech-recognition model loader.

Loads the model exactly once in a worker thread, forwards download progress
to subscribed observers on the event loop, and settles into READY (with a
transcriber) or ERROR. There is no automatic retry after ERROR.

Usage:
    loader = ModelLoader(stt_provider.load, model_id="tiny")
    unsubscribe = loader.subscribe(lambda pct: print(f"{pct}%"))
    state = await loader.load()
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Callable, List, Optional

from assistant.errors import ModelLoadError
from providers.stt.base import ProgressCallback, Transcriber

logger = logging.getLogger(__name__)

LoadFunction = Callable[[ProgressCallback], Transcriber]
ProgressObserver = Callable[[int], None]


class ModelState(Enum):
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class ModelLoader:
    """Owns ModelState: LOADING → READY | ERROR, never backwards."""

    def __init__(self, load_fn: LoadFunction, model_id: str = "") -> None:
        self._load_fn = load_fn
        self.model_id = model_id
        self.state = ModelState.LOADING
        self.progress = 0
        self.transcriber: Optional[Transcriber] = None
        self.error: Optional[ModelLoadError] = None
        self._observers: List[ProgressObserver] = []
        self._alive = True
        self._task: Optional[asyncio.Task] = None

    # ── Observers ──────────────────────────────────────────────────────────────

    def subscribe(self, observer: ProgressObserver) -> Callable[[], None]:
        """Register a progress observer; returns a function that removes it."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def dispose(self) -> None:
        """Detach every observer; later progress and completion are discarded."""
        self._alive = False
        self._observers.clear()

    @property
    def alive(self) -> bool:
        return self._alive

    # ── Loading ────────────────────────────────────────────────────────────────

    async def load(self) -> ModelState:
        """Load the model once; later calls wait for / return the same outcome."""
        if self.state is not ModelState.LOADING:
            return self.state
        if self._task is None:
            self._task = asyncio.ensure_future(self._load())
        return await self._task

    async def _load(self) -> ModelState:
        loop = asyncio.get_running_loop()

        def on_progress(loaded: float, total: float) -> None:
            # Called from the loader thread
            loop.call_soon_threadsafe(self._report_progress, loaded, total)

        logger.info("Loading speech model %s", self.model_id or "(default)")
        try:
            transcriber = await asyncio.to_thread(self._load_fn, on_progress)
        except Exception as exc:
            logger.error("Failed to load model %s: %s", self.model_id, exc)
            if self._alive:
                self.error = ModelLoadError(str(exc))
                self.state = ModelState.ERROR
            return self.state

        if not self._alive:
            logger.debug("Model load finished after dispose; result discarded")
            return self.state

        self.transcriber = transcriber
        self.state = ModelState.READY
        logger.info("Speech model %s ready", self.model_id or "(default)")
        return self.state

    def _report_progress(self, loaded: float, total: float) -> None:
        if not self._alive or self.state is not ModelState.LOADING or total <= 0:
            return
        percent = max(0, min(100, round(loaded / total * 100)))
        if percent <= self.progress:
            return
        self.progress = percent
        for observer in list(self._observers):
            try:
                observer(percent)
            except Exception:
                logger.exception("Progress observer failed")


__all__ = ["ModelLoader", "ModelState", "LoadFunction"]
