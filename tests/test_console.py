"""
Tests for assistant/console.py — snapshot rendering and key handling.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

from assistant.console import handle_command, render
from assistant.controller import (
    ControllerSnapshot,
    ErrorInfo,
    LifecycleState,
    PermissionState,
    Turn,
)


def _snapshot(state=LifecycleState.MODEL_READY, **kwargs):
    values = dict(
        state=state,
        model_progress=100,
        permission=PermissionState.GRANTED,
        turn=None,
        last_error=None,
    )
    values.update(kwargs)
    return ControllerSnapshot(**values)


class TestRender:
    def test_loading_shows_progress(self):
        text = render(_snapshot(LifecycleState.MODEL_LOADING, model_progress=42))
        assert "42%" in text

    def test_turn_lines(self):
        turn = Turn(transcript="what is the capital of france", reply="Paris.")
        text = render(_snapshot(turn=turn))
        assert "You: what is the capital of france" in text
        assert "AI: Paris." in text
        assert "retry" not in text

    def test_error_offers_retry(self):
        turn = Turn(
            transcript="hello",
            reply="Error: upstream timeout",
            error=ErrorInfo("RemoteError", "upstream timeout"),
        )
        text = render(_snapshot(turn=turn, last_error="upstream timeout"))
        assert "Error: upstream timeout" in text
        assert "Press r to retry." in text

    def test_permission_denied_hint(self):
        text = render(_snapshot(permission=PermissionState.DENIED))
        assert "Press p" in text


class TestHandleCommand:
    def _controller(self):
        controller = MagicMock()
        controller.toggle_recording = AsyncMock()
        controller.handle_retry = AsyncMock()
        controller.request_permission = AsyncMock(return_value=True)
        return controller

    def test_enter_toggles(self):
        controller = self._controller()
        assert asyncio.run(handle_command(controller, "")) is True
        controller.toggle_recording.assert_awaited_once()

    def test_keys(self):
        controller = self._controller()
        asyncio.run(handle_command(controller, "r"))
        asyncio.run(handle_command(controller, "S"))
        asyncio.run(handle_command(controller, " p "))
        controller.handle_retry.assert_awaited_once()
        controller.replay.assert_called_once()
        controller.request_permission.assert_awaited_once()

    def test_quit(self):
        assert asyncio.run(handle_command(self._controller(), "q")) is False

    def test_unknown_key_prints_help(self, capsys):
        assert asyncio.run(handle_command(self._controller(), "x")) is True
        assert "Enter=talk" in capsys.readouterr().out
