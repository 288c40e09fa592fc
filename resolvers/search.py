"""Platform search strategies returning normalized candidates."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import requests

from config.settings import HTTP_TIMEOUT_SECONDS
from resolvers.base import SearchCandidate

logger = logging.getLogger(__name__)

SPOTIFY_SEARCH_URL = "https://api.spotify.com/v1/search"
ITUNES_SEARCH_URL = "https://itunes.apple.com/search"


class SearchError(RuntimeError):
    """Raised when a platform search request cannot be completed."""


def _get_json(session: requests.Session, url: str, *, params: dict[str, Any], headers=None, timeout: float) -> Any:
    response = session.get(url, params=params, headers=headers or {}, timeout=timeout)
    if not 200 <= int(response.status_code) < 300:
        raise SearchError(f"search request failed ({response.status_code}) for {url}")
    try:
        return response.json()
    except ValueError as exc:
        raise SearchError(f"search response from {url} was not JSON") from exc


class SpotifySearch:
    """Track search against the Spotify Web API. Requires a bearer token."""

    def __init__(self, session: requests.Session | None = None, *, limit: int = 10, timeout_sec: float = HTTP_TIMEOUT_SECONDS):
        self._session = session or requests.Session()
        self.limit = limit
        self.timeout_sec = timeout_sec

    async def search(self, query: str, *, token: str | None = None) -> list[SearchCandidate]:
        if not token:
            raise SearchError("Spotify search requires an access token")
        payload = await asyncio.to_thread(
            _get_json,
            self._session,
            SPOTIFY_SEARCH_URL,
            params={"q": query, "type": "track", "limit": self.limit},
            headers={"Authorization": f"Bearer {token}"},
            timeout=self.timeout_sec,
        )
        items = ((payload or {}).get("tracks") or {}).get("items") or []
        candidates: list[SearchCandidate] = []
        for item in items:
            if not isinstance(item, dict):
                continue
            artists = item.get("artists") or []
            first_artist = artists[0] if artists and isinstance(artists[0], dict) else {}
            candidates.append(
                {
                    "id": item.get("id"),
                    "artist": first_artist.get("name"),
                    "title": item.get("name"),
                    "isrc": (item.get("external_ids") or {}).get("isrc"),
                    "web_url": (item.get("external_urls") or {}).get("spotify"),
                }
            )
        logger.debug("spotify search query=%r candidates=%s", query, len(candidates))
        return candidates


class ITunesSearch:
    """Song search against the public iTunes Search API (no auth)."""

    def __init__(self, session: requests.Session | None = None, *, limit: int = 10, timeout_sec: float = HTTP_TIMEOUT_SECONDS):
        self._session = session or requests.Session()
        self.limit = limit
        self.timeout_sec = timeout_sec

    async def search(self, query: str, *, token: str | None = None) -> list[SearchCandidate]:
        payload = await asyncio.to_thread(
            _get_json,
            self._session,
            ITUNES_SEARCH_URL,
            params={"term": query, "entity": "song", "limit": self.limit},
            timeout=self.timeout_sec,
        )
        candidates: list[SearchCandidate] = []
        for item in (payload or {}).get("results") or []:
            if not isinstance(item, dict):
                continue
            track_id = item.get("trackId")
            candidates.append(
                {
                    "id": str(track_id) if track_id is not None else None,
                    "artist": item.get("artistName"),
                    "title": item.get("trackName"),
                    # iTunes search results carry no ISRC.
                    "isrc": None,
                    "web_url": item.get("trackViewUrl"),
                }
            )
        logger.debug("itunes search query=%r candidates=%s", query, len(candidates))
        return candidates
