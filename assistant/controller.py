"""
Lifecycle controller — the assistant's orchestrator.

    model_loading ─► model_ready ─► permission_pending ─► recording_active
          │              ▲                                      │
          ▼              └──────────── processing ◄─────────────┘
     model_error

A Turn is created when a recording finalizes and carries transcript, reply
and the first failure. Stage failures never escape: they become the Turn's
error plus an "Error: ..." placeholder reply. Front-ends subscribe() and
render the ControllerSnapshot they receive after every change.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from assistant.errors import (
    TRANSCRIPTION_FAILURE,
    AssistantError,
    PermissionDeniedError,
)
from assistant.model_loader import ModelLoader, ModelState
from assistant.recording import AudioUnit, RecordingController
from assistant.response_client import ResponseClient
from assistant.speech import SpeechOutput
from assistant.transcription import transcribe

logger = logging.getLogger(__name__)


class LifecycleState(Enum):
    MODEL_LOADING = "model_loading"
    MODEL_READY = "model_ready"
    MODEL_ERROR = "model_error"
    PERMISSION_PENDING = "permission_pending"
    RECORDING_ACTIVE = "recording_active"
    PROCESSING = "processing"


class PermissionState(Enum):
    UNKNOWN = "unknown"
    GRANTED = "granted"
    DENIED = "denied"


@dataclass(frozen=True)
class ErrorInfo:
    kind: str
    message: str

    @classmethod
    def from_exception(cls, exc: BaseException, default_kind: str) -> "ErrorInfo":
        if isinstance(exc, AssistantError):
            return cls(kind=exc.kind, message=exc.message)
        return cls(kind=default_kind, message=str(exc) or exc.__class__.__name__)


@dataclass
class Turn:
    transcript: Optional[str] = None
    reply: Optional[str] = None
    error: Optional[ErrorInfo] = None


@dataclass(frozen=True)
class ControllerSnapshot:
    state: LifecycleState
    model_progress: int
    permission: PermissionState
    turn: Optional[Turn]
    last_error: Optional[str]

    @property
    def recording(self) -> bool:
        return self.state is LifecycleState.RECORDING_ACTIVE

    @property
    def processing(self) -> bool:
        return self.state is LifecycleState.PROCESSING

    @property
    def permission_denied(self) -> bool:
        return self.permission is PermissionState.DENIED

    @property
    def can_retry(self) -> bool:
        return bool(
            self.turn is not None
            and self.turn.transcript
            and self.turn.error is not None
            and self.state is LifecycleState.MODEL_READY
        )


Listener = Callable[[ControllerSnapshot], None]


class LifecycleController:
    """Drives permission → record → stop → transcribe → respond → speak."""

    def __init__(
        self,
        model_loader: ModelLoader,
        recorder: RecordingController,
        response_client: ResponseClient,
        speech: SpeechOutput,
    ) -> None:
        self._loader = model_loader
        self._recorder = recorder
        self._responses = response_client
        self._speech = speech

        self.state = LifecycleState.MODEL_LOADING
        self.permission = PermissionState.UNKNOWN
        self.turn: Optional[Turn] = None
        self.last_error: Optional[str] = None

        self._listeners: List[Listener] = []
        self._alive = True
        self._unsubscribe_progress = model_loader.subscribe(self._on_model_progress)

    # ── Observation ────────────────────────────────────────────────────────────

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def snapshot(self) -> ControllerSnapshot:
        return ControllerSnapshot(
            state=self.state,
            model_progress=self._loader.progress,
            permission=self.permission,
            turn=dataclasses.replace(self.turn) if self.turn is not None else None,
            last_error=self.last_error,
        )

    def _emit(self) -> None:
        if not self._alive:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Controller listener failed")

    def _set_state(self, state: LifecycleState) -> None:
        if not self._alive:
            return
        if state is not self.state:
            logger.debug("State %s -> %s", self.state.value, state.value)
            self.state = state
        self._emit()

    def _on_model_progress(self, percent: int) -> None:
        self._emit()

    # ── Lifecycle ──────────────────────────────────────────────────────────────

    async def start(self) -> LifecycleState:
        """Wait for the speech model; ends in model_ready or model_error."""
        model_state = await self._loader.load()
        if not self._alive:
            return self.state
        if model_state is ModelState.READY:
            self._set_state(LifecycleState.MODEL_READY)
        else:
            self._set_state(LifecycleState.MODEL_ERROR)
        return self.state

    def close(self) -> None:
        """Teardown: stop observing the loader and release the microphone."""
        self._alive = False
        self._unsubscribe_progress()
        self._loader.dispose()
        self._recorder.release()
        self._listeners.clear()

    # ── Permission ─────────────────────────────────────────────────────────────

    async def request_permission(self) -> bool:
        if self.state not in (LifecycleState.MODEL_READY, LifecycleState.MODEL_LOADING):
            logger.debug("Permission request ignored in state %s", self.state.value)
            return self.permission is PermissionState.GRANTED
        return await self._probe_permission()

    async def _probe_permission(self) -> bool:
        granted = await self._recorder.request_permission()
        if not self._alive:
            return granted
        self.permission = PermissionState.GRANTED if granted else PermissionState.DENIED
        self._emit()
        return granted

    # ── Recording cycle ────────────────────────────────────────────────────────

    async def toggle_recording(self) -> None:
        if self.state is LifecycleState.RECORDING_ACTIVE:
            await self._stop_recording()
            return

        if self.state is not LifecycleState.MODEL_READY:
            logger.debug("toggle_recording ignored in state %s", self.state.value)
            return

        self._set_state(LifecycleState.PERMISSION_PENDING)
        if self.permission is not PermissionState.GRANTED:
            if not await self._probe_permission():
                self._set_state(LifecycleState.MODEL_READY)
                return

        try:
            await self._recorder.start(self._handle_recording_stop)
        except PermissionDeniedError:
            self.permission = PermissionState.DENIED
            self._set_state(LifecycleState.MODEL_READY)
            return
        except AssistantError as exc:
            logger.error("Could not start recording: %s", exc)
            self._set_state(LifecycleState.MODEL_READY)
            return

        self._set_state(LifecycleState.RECORDING_ACTIVE)

    async def _stop_recording(self) -> None:
        self._set_state(LifecycleState.PROCESSING)
        try:
            await self._recorder.stop()
        except Exception as exc:
            logger.error("Failed to stop recording: %s", exc)
            self._recorder.release()
        finally:
            self._set_state(LifecycleState.MODEL_READY)

    async def _handle_recording_stop(self, audio: AudioUnit) -> None:
        """Finalize callback: runs the Turn for one recording."""
        if not self._alive:
            return
        self.turn = Turn()
        self.last_error = None
        self._emit()

        try:
            text = await transcribe(audio, self._loader.transcriber)
        except Exception as exc:
            logger.error("Transcription failed: %s", exc)
            if self._alive:
                error = ErrorInfo.from_exception(exc, TRANSCRIPTION_FAILURE)
                self.turn.error = error
                self.turn.reply = f"Error: {error.message}"
                self._emit()
            return

        if not self._alive:
            return
        self.turn.transcript = text
        self._emit()

        await self._respond_and_speak(text)

    async def _respond_and_speak(self, text: str) -> None:
        try:
            reply = await self._responses.respond(text)
        except Exception as exc:
            logger.error("AI response error: %s", exc)
            if self._alive:
                error = ErrorInfo.from_exception(exc, "RemoteError")
                self.turn.error = error
                self.last_error = error.message
                if self.turn.reply is None:
                    self.turn.reply = f"Error: {error.message}"
                self._emit()
            return

        if not self._alive:
            return
        self.turn.reply = reply
        self._emit()

        try:
            self._speech.speak(reply)
        except Exception as exc:
            logger.error("Speech output failed: %s", exc)

    # ── Recovery ───────────────────────────────────────────────────────────────

    async def handle_retry(self) -> None:
        """Ask for a reply to the existing transcript again, without re-recording."""
        if self.turn is None or not self.turn.transcript:
            return
        if self.state is not LifecycleState.MODEL_READY:
            logger.debug("Retry ignored in state %s", self.state.value)
            return

        self.turn.error = None
        self.last_error = None
        self._set_state(LifecycleState.PROCESSING)
        try:
            await self._respond_and_speak(self.turn.transcript)
        finally:
            self._set_state(LifecycleState.MODEL_READY)

    def replay(self) -> None:
        """Speak the current reply again."""
        if self.turn is None or not self.turn.reply:
            return
        try:
            self._speech.speak(self.turn.reply)
        except Exception as exc:
            logger.error("Speech output failed: %s", exc)


__all__ = [
    "ControllerSnapshot",
    "ErrorInfo",
    "LifecycleController",
    "LifecycleState",
    "PermissionState",
    "Turn",
]
