"""Map raw recognition results onto a canonical cross-platform record."""

from __future__ import annotations

from dataclasses import dataclass, field as dataclass_field
from types import MappingProxyType
from typing import Any, Mapping

from recognition.payload import Extractor, ExternalPayload, fields, first_present
from resolvers.platforms import DESCRIPTORS, SOUNDCLOUD, TIDAL, YOUTUBE_MUSIC

LINK_PLATFORMS = ("spotify", "apple_music", "youtube_music", "tidal", "soundcloud", "deezer")
DEEPLINK_PLATFORMS = ("spotify", "apple_music", "youtube_music", "tidal", "soundcloud")

APPLE_ARTWORK_SIZE = 600


def _frozen(values: Mapping[str, str | None] | None, keys) -> Mapping[str, str | None]:
    values = values or {}
    return MappingProxyType({key: values.get(key) for key in keys})


@dataclass(frozen=True)
class CanonicalTrackRecord:
    artist: str | None = None
    title: str | None = None
    isrc: str | None = None
    cover: str | None = None
    links: Mapping[str, str | None] = dataclass_field(default_factory=lambda: _frozen(None, LINK_PLATFORMS))
    deeplinks: Mapping[str, str | None] = dataclass_field(default_factory=lambda: _frozen(None, DEEPLINK_PLATFORMS))

    @property
    def identified(self) -> bool:
        return bool(self.artist or self.title or self.isrc or any(self.links.values()))

    def as_dict(self) -> dict[str, Any]:
        return {
            "artist": self.artist,
            "title": self.title,
            "isrc": self.isrc,
            "cover": self.cover,
            "links": dict(self.links),
            "deeplinks": dict(self.deeplinks),
        }


ARTIST_EXTRACTORS = fields("artist", "spotify.artists.0.name", "apple_music.artistName")
TITLE_EXTRACTORS = fields("title", "spotify.name", "apple_music.name")
ISRC_EXTRACTORS = fields("apple_music.isrc", "spotify.external_ids.isrc", "isrc")


def _apple_artwork(payload: ExternalPayload) -> str | None:
    url = payload.text("apple_music.artwork.url")
    if not url:
        return None
    size = str(APPLE_ARTWORK_SIZE)
    return url.replace("{w}", size).replace("{h}", size)


COVER_EXTRACTORS: tuple[Extractor, ...] = (*fields("spotify.album.images.0.url"), _apple_artwork)


def _cross_reference(section: str) -> Extractor:
    """Primary URL from an embedded provider section, whatever key it uses."""

    def _extract(payload: ExternalPayload) -> str | None:
        return first_present(
            payload.section(section),
            fields("external_urls.spotify", "url", "link", "permalink_url"),
        )

    _extract.__name__ = f"cross_reference[{section}]"
    return _extract


def _song_link(domains: tuple[str, ...]) -> Extractor:
    """The shared universal share link, only when it points at one of ``domains``."""

    def _extract(payload: ExternalPayload) -> str | None:
        link = payload.text("song_link")
        if link and any(domain in link.lower() for domain in domains):
            return link
        return None

    _extract.__name__ = f"song_link[{','.join(domains)}]"
    return _extract


LINK_EXTRACTORS: dict[str, tuple[Extractor, ...]] = {
    "spotify": (
        *fields("spotify.external_urls.spotify"),
        _cross_reference("spotify"),
        _song_link(("open.spotify.com/track/",)),
    ),
    "apple_music": (
        *fields("apple_music.url"),
        _cross_reference("apple_music"),
        _song_link(("music.apple.com",)),
    ),
    "youtube_music": (
        _cross_reference("youtube_music"),
        _cross_reference("youtube"),
        _song_link(("music.youtube.com",)),
    ),
    "tidal": (
        _cross_reference("tidal"),
        _song_link(("tidal.com",)),
    ),
    "soundcloud": (
        *fields("soundcloud.permalink_url"),
        _cross_reference("soundcloud"),
        _song_link(SOUNDCLOUD.domains),
    ),
    "deezer": (
        *fields("deezer.link"),
        _cross_reference("deezer"),
        _song_link(("deezer.com",)),
    ),
}

# Platforms that fall back to a constructed search URL when nothing direct was found.
SEARCH_FALLBACKS = {
    "youtube_music": YOUTUBE_MUSIC,
    "soundcloud": SOUNDCLOUD,
    "tidal": TIDAL,
}


def _unwrap(raw: Any) -> ExternalPayload:
    # Text search may return a list of matches; the first one is the best.
    if isinstance(raw, list):
        raw = next((item for item in raw if isinstance(item, dict)), None)
    return ExternalPayload(raw)


def _deeplink(platform: str, url: str | None) -> str | None:
    if not url:
        return None
    descriptor = DESCRIPTORS.get(platform)
    if descriptor is not None:
        scheme = descriptor.build_scheme_url(descriptor.extract_id(url))
        if scheme:
            return scheme
    return url


def map_recognition_result(raw: Any) -> CanonicalTrackRecord:
    """Build a CanonicalTrackRecord from a raw provider result. Never raises."""
    payload = _unwrap(raw)
    if not payload:
        return CanonicalTrackRecord()

    artist = first_present(payload, ARTIST_EXTRACTORS)
    title = first_present(payload, TITLE_EXTRACTORS)
    query = " ".join(part for part in (artist, title) if part)

    links: dict[str, str | None] = {}
    for platform in LINK_PLATFORMS:
        url = first_present(payload, LINK_EXTRACTORS[platform])
        fallback = SEARCH_FALLBACKS.get(platform)
        if not url and fallback is not None and query:
            url = fallback.build_search_url(query)
        links[platform] = url

    deeplinks = {platform: _deeplink(platform, links.get(platform)) for platform in DEEPLINK_PLATFORMS}

    return CanonicalTrackRecord(
        artist=artist,
        title=title,
        isrc=first_present(payload, ISRC_EXTRACTORS),
        cover=first_present(payload, COVER_EXTRACTORS),
        links=_frozen(links, LINK_PLATFORMS),
        deeplinks=_frozen(deeplinks, DEEPLINK_PLATFORMS),
    )
