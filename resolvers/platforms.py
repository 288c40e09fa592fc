"""Platform descriptors and resolver wiring."""

from __future__ import annotations

import logging
import re
from typing import Iterable

import requests

from config.settings import HTTP_TIMEOUT_SECONDS, spotify_credentials
from resolvers.base import (
    SEARCH_STRATEGY_API,
    SEARCH_STRATEGY_SEARCH_URL,
    PlatformDescriptor,
    PlatformResolver,
)
from resolvers.search import ITunesSearch, SpotifySearch
from spotify.token_cache import SpotifyTokenCache

logger = logging.getLogger(__name__)

SPOTIFY = PlatformDescriptor(
    platform="spotify",
    direct_url_patterns=(
        re.compile(r"open\.spotify\.com/(?:intl-[a-z-]+/)?track/([A-Za-z0-9]+)", re.IGNORECASE),
        re.compile(r"^spotify:track:([A-Za-z0-9]+)$"),
    ),
    scheme_template="spotify:track:{id}",
    search_strategy=SEARCH_STRATEGY_API,
    search_url_template="https://open.spotify.com/search/{query}",
    domains=("spotify.com", "spotify:"),
)

APPLE_MUSIC = PlatformDescriptor(
    platform="apple_music",
    direct_url_patterns=(
        re.compile(r"music\.apple\.com/.*[?&]i=(\d+)", re.IGNORECASE),
        re.compile(r"music\.apple\.com/[a-z]{2}/song/[^/?#]+/(\d+)", re.IGNORECASE),
    ),
    search_strategy=SEARCH_STRATEGY_API,
    search_url_template="https://music.apple.com/us/search?term={query}",
    domains=("music.apple.com", "itunes.apple.com"),
)

YOUTUBE_MUSIC = PlatformDescriptor(
    platform="youtube_music",
    direct_url_patterns=(
        re.compile(r"(?:music\.)?youtube\.com/watch\?(?:.*&)?v=([A-Za-z0-9_-]{6,})", re.IGNORECASE),
        re.compile(r"youtu\.be/([A-Za-z0-9_-]{6,})", re.IGNORECASE),
    ),
    scheme_template="youtubemusic://watch?v={id}",
    search_strategy=SEARCH_STRATEGY_SEARCH_URL,
    search_url_template="https://music.youtube.com/search?q={query}",
    domains=("youtube.com", "youtu.be"),
)

TIDAL = PlatformDescriptor(
    platform="tidal",
    direct_url_patterns=(re.compile(r"tidal\.com/(?:browse/)?track/(\d+)", re.IGNORECASE),),
    scheme_template="tidal://track/{id}",
    search_strategy=SEARCH_STRATEGY_SEARCH_URL,
    search_url_template="https://listen.tidal.com/search?q={query}",
    domains=("tidal.com",),
)

# Top-level site pages, and profile sub-pages that are not tracks.
_SOUNDCLOUD_RESERVED_ROOTS = ("search", "discover", "you", "stream")
_SOUNDCLOUD_PROFILE_PAGES = (
    "sets",
    "likes",
    "tracks",
    "albums",
    "reposts",
    "followers",
    "following",
    "popular-tracks",
    "comments",
)

SOUNDCLOUD = PlatformDescriptor(
    platform="soundcloud",
    direct_url_patterns=(
        re.compile(
            r"soundcloud\.com/(?!(?:{roots})(?:[/?#]|$))([^/?#\s]+/(?!(?:{pages})(?:[/?#]|$))[^/?#\s]+)".format(
                roots="|".join(_SOUNDCLOUD_RESERVED_ROOTS),
                pages="|".join(re.escape(page) for page in _SOUNDCLOUD_PROFILE_PAGES),
            ),
            re.IGNORECASE,
        ),
    ),
    search_strategy=SEARCH_STRATEGY_SEARCH_URL,
    search_url_template="https://soundcloud.com/search/sounds?q={query}",
    domains=("soundcloud.com",),
)

DESCRIPTORS: dict[str, PlatformDescriptor] = {
    descriptor.platform: descriptor
    for descriptor in (SPOTIFY, APPLE_MUSIC, YOUTUBE_MUSIC, TIDAL, SOUNDCLOUD)
}

# Detected from pasted URLs but not resolved.
_EXTRA_DOMAINS = (("deezer", ("deezer.com", "deezer.page.link")),)


def detect_platform(url: str | None) -> str | None:
    """Return the platform key a pasted URL belongs to, or None."""
    text = str(url or "").strip()
    if not text:
        return None
    for descriptor in DESCRIPTORS.values():
        if descriptor.extract_id(text) or descriptor.matches_domain(text):
            return descriptor.platform
    lower = text.lower()
    for platform, domains in _EXTRA_DOMAINS:
        if any(domain in lower for domain in domains):
            return platform
    return None


def known_links_from_urls(urls: Iterable[str]) -> dict[str, str]:
    """Build a known-links map; the first URL seen for a platform wins."""
    known: dict[str, str] = {}
    for url in urls or []:
        platform = detect_platform(url)
        if platform and platform not in known:
            known[platform] = str(url).strip()
    return known


def build_default_resolvers(
    config=None,
    *,
    session: requests.Session | None = None,
    token_cache: SpotifyTokenCache | None = None,
    timeout_sec: float = HTTP_TIMEOUT_SECONDS,
) -> list[PlatformResolver]:
    """Wire the five platform resolvers around one shared session and token cache."""
    session = session or requests.Session()
    if token_cache is None:
        client_id, client_secret = spotify_credentials(config)
        token_cache = SpotifyTokenCache(client_id, client_secret, session=session, timeout_sec=timeout_sec)
    if not token_cache.has_credentials():
        logger.warning("Spotify credentials missing; spotify links will be unavailable")
    return [
        PlatformResolver(
            SPOTIFY,
            search=SpotifySearch(session, timeout_sec=timeout_sec),
            token_source=token_cache,
        ),
        PlatformResolver(APPLE_MUSIC, search=ITunesSearch(session, timeout_sec=timeout_sec)),
        PlatformResolver(YOUTUBE_MUSIC),
        PlatformResolver(TIDAL),
        PlatformResolver(SOUNDCLOUD),
    ]
