"""
Console front-end for the voice assistant.

Wires the real capabilities (sounddevice microphone, faster-whisper model,
requests client, pyttsx3 voice) into a LifecycleController and renders its
snapshots as text lines.

    Enter  start / stop recording
    r      retry the last reply
    s      speak the reply again
    p      ask for microphone access again
    q      quit

Usage:
    voice-assistant            # after pip install -e .[voice]
    python -m assistant.console
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from assistant.controller import ControllerSnapshot, LifecycleController, LifecycleState
from assistant.devices import SoundDeviceCapture
from assistant.http_client import RequestsHttpClient
from assistant.model_loader import ModelLoader
from assistant.recording import RecordingController, release_delay_for_platform
from assistant.response_client import RateLimitGate, ResponseClient
from assistant.speech import SpeechOutput

logger = logging.getLogger(__name__)

_STATUS = {
    LifecycleState.MODEL_LOADING: "Loading voice model",
    LifecycleState.MODEL_READY: "Ready. Press Enter to talk",
    LifecycleState.MODEL_ERROR: "Voice model failed to load",
    LifecycleState.PERMISSION_PENDING: "Waiting for microphone",
    LifecycleState.RECORDING_ACTIVE: "Listening... press Enter to stop",
    LifecycleState.PROCESSING: "Processing...",
}


def render(snapshot: ControllerSnapshot) -> str:
    """One status block for *snapshot*."""
    status = _STATUS[snapshot.state]
    if snapshot.state is LifecycleState.MODEL_LOADING:
        status = f"{status} ({snapshot.model_progress}%)"

    lines = [f"[{status}]"]
    if snapshot.permission_denied:
        lines.append("Microphone access denied. Press p to ask again.")
    turn = snapshot.turn
    if turn is not None:
        if turn.transcript:
            lines.append(f"You: {turn.transcript}")
        if turn.reply:
            lines.append(f"AI: {turn.reply}")
    if snapshot.last_error:
        lines.append(f"Error: {snapshot.last_error}")
    if snapshot.can_retry:
        lines.append("Press r to retry.")
    return "\n".join(lines)


def build_controller(settings=None) -> LifecycleController:
    """Assemble a LifecycleController from configuration and the provider registry."""
    if settings is None:
        from config.loader import config as settings

    from providers.registry import get_stt_provider, get_tts_provider

    stt = get_stt_provider()
    loader = ModelLoader(stt.load, model_id=getattr(stt, "model_size", ""))

    recorder = RecordingController(
        SoundDeviceCapture(
            sample_rate=settings.get("recording.sample_rate", 16000),
            channels=settings.get("recording.channels", 1),
        ),
        release_delay=release_delay_for_platform(
            settings.get("recording.deferred_release_platforms", []) or [],
            settings.get("recording.deferred_release_delay", 1.0),
        ),
    )

    responses = ResponseClient(
        RequestsHttpClient(timeout=settings.get("assistant.request_timeout", 60)),
        settings.get("assistant.endpoint"),
        gate=RateLimitGate(settings.get("assistant.min_request_interval_ms", 2000)),
    )

    synthesizer = get_tts_provider()
    if not synthesizer.is_available():
        logger.warning("No speech synthesizer available; replies will not be spoken")
        synthesizer = None
    speech = SpeechOutput(
        synthesizer,
        preferred_name=settings.get("speech.preferred_voice_name", "Microsoft Zira"),
        preferred_language=settings.get("speech.preferred_language", "en-US"),
        rate=settings.get("speech.rate", 1.0),
        pitch=settings.get("speech.pitch", 1.0),
        volume=settings.get("speech.volume", 1.0),
    )

    return LifecycleController(loader, recorder, responses, speech)


async def handle_command(controller: LifecycleController, command: str) -> bool:
    """Apply one console command; returns False when the user quits."""
    command = command.strip().lower()
    if command == "q":
        return False
    if command == "":
        await controller.toggle_recording()
    elif command == "r":
        await controller.handle_retry()
    elif command == "s":
        controller.replay()
    elif command == "p":
        await controller.request_permission()
    else:
        print("Keys: Enter=talk  r=retry  s=speak again  p=microphone  q=quit")
    return True


async def run(controller: LifecycleController) -> None:
    last: Optional[str] = None

    def show(snapshot: ControllerSnapshot) -> None:
        nonlocal last
        text = render(snapshot)
        if text != last:
            print(text, flush=True)
            last = text

    unsubscribe = controller.subscribe(show)
    try:
        show(controller.snapshot())
        if await controller.start() is LifecycleState.MODEL_ERROR:
            return
        while True:
            try:
                command = await asyncio.to_thread(input)
            except EOFError:
                break
            if not await handle_command(controller, command):
                break
    finally:
        unsubscribe()
        controller.close()


def main() -> None:
    load_dotenv(Path.cwd() / ".env")

    from config.loader import config

    logging.basicConfig(
        level=getattr(logging, str(config.get("logging.level", "INFO")).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    import providers.stt  # noqa: F401  registers whisper
    import providers.tts  # noqa: F401  registers system voice

    try:
        asyncio.run(run(build_controller(config)))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
