"""AudD recognition client."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import requests

from config.settings import HTTP_TIMEOUT_SECONDS, audd_api_token

logger = logging.getLogger(__name__)

AUDD_API_URL = "https://api.audd.io/"
# Cross-reference sections requested alongside every recognition result.
AUDD_RETURN_FIELDS = "apple_music,spotify,youtube,youtube_music,soundcloud,tidal,deezer"


class RecognitionError(RuntimeError):
    """Any failure to obtain a usable result from the recognition provider."""


def _provider_message(error: Any) -> str:
    if isinstance(error, dict):
        message = error.get("error_message")
        if message:
            return str(message)
        code = error.get("error_code")
        if code is not None:
            return f"AudD error {code}"
    return f"AudD error: {error}"


class AuddClient:
    """Thin wrapper over the AudD HTTP API.

    Every failure (transport, non-2xx, non-JSON body, provider ``error``
    object, missing token) surfaces as a single ``RecognitionError``.
    """

    def __init__(
        self,
        api_token: str | None = None,
        *,
        session: requests.Session | None = None,
        timeout_sec: float = HTTP_TIMEOUT_SECONDS,
        base_url: str = AUDD_API_URL,
    ) -> None:
        self.api_token = (api_token or "").strip() or None
        self.timeout_sec = timeout_sec
        self.base_url = base_url
        self._session = session or requests.Session()

    @classmethod
    def from_config(cls, config=None, *, session: requests.Session | None = None) -> "AuddClient":
        return cls(audd_api_token(config), session=session)

    def _post(self, params: dict[str, str], files: dict[str, Any] | None = None) -> dict[str, Any]:
        if not self.api_token:
            logger.warning("AudD API token is not configured; recognition disabled")
            raise RecognitionError("AudD API token is not configured")

        data = {"api_token": self.api_token, **params}
        try:
            response = self._session.post(self.base_url, data=data, files=files, timeout=self.timeout_sec)
        except requests.RequestException as exc:
            raise RecognitionError(f"AudD request failed: {exc}") from exc

        body_preview = (response.text or "")[:300]
        try:
            payload = response.json()
        except ValueError as exc:
            logger.error("AudD returned non-JSON response status=%s body=%s", response.status_code, body_preview)
            raise RecognitionError("AudD returned an invalid JSON response") from exc

        if not 200 <= int(response.status_code) < 300:
            logger.error("AudD HTTP error status=%s body=%s", response.status_code, body_preview)
            raise RecognitionError(f"AudD HTTP {response.status_code}")

        if not isinstance(payload, dict):
            raise RecognitionError("AudD returned an unexpected response shape")
        if payload.get("error"):
            logger.error("AudD API error: %s", payload.get("error"))
            raise RecognitionError(_provider_message(payload.get("error")))
        return payload

    async def _call(self, params: dict[str, str], files: dict[str, Any] | None = None) -> Any:
        payload = await asyncio.to_thread(self._post, params, files)
        return payload.get("result") or None

    async def recognize_by_url(self, url: str | None) -> Any:
        """Identify the audio behind ``url``; None when nothing matched."""
        url = str(url or "").strip()
        if not url:
            return None
        return await self._call({"url": url, "method": "recognize", "return": AUDD_RETURN_FIELDS})

    async def search_by_text(self, query: str | None) -> Any:
        """Look a track up by free text, falling back once to ``recognize``."""
        query = str(query or "").strip()
        if not query:
            return None
        try:
            result = await self._call({"method": "search", "q": query, "return": AUDD_RETURN_FIELDS})
        except RecognitionError as exc:
            logger.warning("AudD search failed, falling back to recognize: %s", exc)
            result = None
        if result:
            return result
        return await self._call({"method": "recognize", "q": query, "return": AUDD_RETURN_FIELDS})

    async def recognize_file(self, data: bytes | None, filename: str = "clip.mp3") -> Any:
        """Identify an uploaded audio clip."""
        if not data:
            return None
        files = {"file": (filename or "clip.mp3", data)}
        return await self._call({"method": "recognize", "return": AUDD_RETURN_FIELDS}, files=files)
