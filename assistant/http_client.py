"""
requests-backed HttpClient for the assistant.

requests is blocking, so each call runs in a worker thread; the session is
reused across calls for connection pooling.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import requests

from assistant.capabilities import HttpResponse
from assistant.errors import RemoteError

logger = logging.getLogger(__name__)


class RequestsHttpClient:
    def __init__(self, timeout: float = 60, session: Optional[requests.Session] = None) -> None:
        self.timeout = timeout
        self._session = session or requests.Session()

    def _post(self, url: str, payload: dict) -> HttpResponse:
        try:
            resp = self._session.post(
                url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("POST %s failed: %s", url, exc)
            raise RemoteError(f"Request failed: {exc}") from exc
        return HttpResponse(status=resp.status_code, text=resp.text)

    async def post_json(self, url: str, payload: dict) -> HttpResponse:
        return await asyncio.to_thread(self._post, url, payload)

    def close(self) -> None:
        self._session.close()
