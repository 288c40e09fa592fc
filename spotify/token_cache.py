"""Client-credentials access token cache for the Spotify Web API."""

from __future__ import annotations

import asyncio
import base64
import logging
import time
from dataclasses import dataclass
from typing import Callable

import requests

from config.settings import HTTP_TIMEOUT_SECONDS, TOKEN_EXPIRY_MARGIN_SECONDS

logger = logging.getLogger(__name__)

SPOTIFY_TOKEN_URL = "https://accounts.spotify.com/api/token"


@dataclass(frozen=True)
class TokenCacheEntry:
    token: str
    expires_at: float  # epoch seconds


class SpotifyTokenCache:
    """Lazily exchanges app credentials for a token and keeps it until expiry.

    One instance is created by the composition root and shared by every caller
    that needs Spotify access. Concurrent cold-start callers may each perform
    an exchange; the last one to finish wins, which is harmless because every
    exchange yields an equally valid token.
    """

    def __init__(
        self,
        client_id: str | None = None,
        client_secret: str | None = None,
        *,
        session: requests.Session | None = None,
        timeout_sec: float = HTTP_TIMEOUT_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.client_id = (client_id or "").strip() or None
        self.client_secret = (client_secret or "").strip() or None
        self.timeout_sec = timeout_sec
        self._session = session or requests.Session()
        self._clock = clock
        self._entry: TokenCacheEntry | None = None

    def has_credentials(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def invalidate(self) -> None:
        self._entry = None

    async def get_token(self) -> str | None:
        """Return a valid access token, or None when one cannot be obtained."""
        entry = self._entry
        if entry is not None and self._clock() < entry.expires_at:
            return entry.token

        if not self.has_credentials():
            logger.warning("Spotify credentials are not configured; token unavailable")
            return None

        now = self._clock()
        auth = base64.b64encode(f"{self.client_id}:{self.client_secret}".encode("utf-8")).decode("ascii")
        try:
            response = await asyncio.to_thread(
                self._session.post,
                SPOTIFY_TOKEN_URL,
                data={"grant_type": "client_credentials"},
                headers={"Authorization": f"Basic {auth}"},
                timeout=self.timeout_sec,
            )
        except requests.RequestException:
            logger.exception("Spotify token request failed")
            return None

        if not 200 <= int(response.status_code) < 300:
            logger.warning("Spotify token request failed (%s)", response.status_code)
            return None

        try:
            payload = response.json()
        except ValueError:
            logger.warning("Spotify token response was not JSON")
            return None

        token = payload.get("access_token") if isinstance(payload, dict) else None
        try:
            expires_in = int(payload.get("expires_in"))
        except (AttributeError, TypeError, ValueError):
            expires_in = None
        if not isinstance(token, str) or not token or expires_in is None:
            logger.warning("Spotify token response missing access_token or expires_in")
            return None

        self._entry = TokenCacheEntry(
            token=token,
            expires_at=now + expires_in - TOKEN_EXPIRY_MARGIN_SECONDS,
        )
        return token
