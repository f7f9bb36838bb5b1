"""
Response client: transcript → /api/chat → cleaned reply.

A minimum interval separates accepted requests. The gate timestamp moves
forward as soon as a request is accepted, before the network call resolves,
so a slow call still blocks followers for the interval measured from its
start. Rejected calls (empty input, rate limited) never touch the gate.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from assistant.capabilities import HttpClient
from assistant.errors import AssistantError, EmptyInputError, RateLimitedError, RemoteError
from services.reply_cleaner import clean_reply

logger = logging.getLogger(__name__)

DEFAULT_MIN_INTERVAL_MS = 2000


class RateLimitGate:
    """Timestamp of the last accepted request plus the minimum spacing."""

    def __init__(
        self,
        min_interval_ms: int = DEFAULT_MIN_INTERVAL_MS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.min_interval_ms = min_interval_ms
        self.last_accepted: Optional[float] = None
        self._clock = clock

    def try_acquire(self) -> bool:
        """Accept and record a request if the interval has elapsed."""
        now = self._clock()
        if self.last_accepted is not None:
            elapsed_ms = (now - self.last_accepted) * 1000
            if elapsed_ms < self.min_interval_ms:
                return False
        self.last_accepted = now
        return True


class ResponseClient:
    def __init__(
        self,
        http: HttpClient,
        endpoint: str,
        gate: Optional[RateLimitGate] = None,
    ) -> None:
        self._http = http
        self.endpoint = endpoint
        self.gate = gate or RateLimitGate()

    async def respond(self, text: str) -> str:
        if not text or not text.strip():
            raise EmptyInputError("No transcription text provided")

        if not self.gate.try_acquire():
            raise RateLimitedError("Please wait before making another request")

        try:
            response = await self._http.post_json(self.endpoint, {"prompt": text})
        except AssistantError:
            raise
        except Exception as exc:
            raise RemoteError(f"Request failed: {exc}") from exc

        if not response.ok:
            try:
                body = response.json()
            except ValueError:
                body = {}
            message = body.get("error") if isinstance(body, dict) else None
            logger.error("Chat endpoint returned %d: %s", response.status, message)
            raise RemoteError(
                message or f"API request failed with status {response.status}",
                status=response.status,
            )

        try:
            reply = response.json().get("reply")
        except (ValueError, AttributeError):
            reply = None
        if not isinstance(reply, str):
            raise RemoteError("Malformed response from chat endpoint", status=response.status)

        return clean_reply(reply)


__all__ = ["RateLimitGate", "ResponseClient", "DEFAULT_MIN_INTERVAL_MS"]
