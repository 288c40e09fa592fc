from __future__ import annotations

import asyncio

import pytest

from resolvers.base import LinkVariant, PlatformResolver
from resolvers.platforms import APPLE_MUSIC, SOUNDCLOUD, SPOTIFY, TIDAL, YOUTUBE_MUSIC


class _FakeSearch:
    def __init__(self, candidates=None, error: Exception | None = None) -> None:
        self.candidates = candidates or []
        self.error = error
        self.calls = []

    async def search(self, query, *, token=None):
        self.calls.append({"query": query, "token": token})
        if self.error is not None:
            raise self.error
        return list(self.candidates)


class _FakeTokens:
    def __init__(self, token: str | None = "tok") -> None:
        self.token = token
        self.calls = 0

    async def get_token(self):
        self.calls += 1
        return self.token


def _spotify(search, tokens=None) -> PlatformResolver:
    return PlatformResolver(SPOTIFY, search=search, token_source=tokens or _FakeTokens())


def test_known_link_is_trusted_without_search() -> None:
    search = _FakeSearch([{"id": "other", "artist": "x", "title": "y", "web_url": "https://open.spotify.com/track/other"}])
    tokens = _FakeTokens()
    resolver = _spotify(search, tokens)

    result = asyncio.run(
        resolver.resolve(
            "Test Artist",
            "Midnight",
            known_links={"spotify": "https://open.spotify.com/track/abc123"},
        )
    )

    assert result == LinkVariant(
        id="abc123",
        web_url="https://open.spotify.com/track/abc123",
        app_scheme_url="spotify:track:abc123",
        confidence=1.0,
    )
    assert search.calls == []
    assert tokens.calls == 0


def test_known_link_under_other_key_still_matches_by_shape() -> None:
    resolver = PlatformResolver(TIDAL)

    result = asyncio.run(
        resolver.resolve("A", "B", known_links={"pasted": "https://tidal.com/browse/track/998877?u"})
    )

    assert result.id == "998877"
    assert result.app_scheme_url == "tidal://track/998877"
    assert result.confidence == 1.0


def test_unparseable_known_link_falls_through_to_search() -> None:
    search = _FakeSearch(
        [{"id": "s1", "artist": "Test Artist", "title": "Midnight", "web_url": "https://open.spotify.com/track/s1"}]
    )
    resolver = _spotify(search)

    result = asyncio.run(
        resolver.resolve("Test Artist", "Midnight", known_links={"spotify": "https://open.spotify.com/album/xyz"})
    )

    assert result.id == "s1"
    assert len(search.calls) == 1


def test_search_full_match_scores_095() -> None:
    search = _FakeSearch(
        [{"id": "s1", "artist": "Test Artist", "title": "Midnight", "isrc": None, "web_url": "https://open.spotify.com/track/s1"}]
    )
    tokens = _FakeTokens("tok-xyz")
    resolver = _spotify(search, tokens)

    result = asyncio.run(resolver.resolve("Test Artist", "Midnight"))

    assert result.confidence == 0.95
    assert result.id == "s1"
    assert result.app_scheme_url == "spotify:track:s1"
    assert search.calls == [{"query": "Test Artist Midnight", "token": "tok-xyz"}]


def test_search_keeps_strictly_highest_and_first_on_tie() -> None:
    search = _FakeSearch(
        [
            {"id": "a", "artist": "Someone", "title": "Midnight", "web_url": "https://open.spotify.com/track/a"},
            {"id": "b", "artist": "Test Artist", "title": "Midnight", "web_url": "https://open.spotify.com/track/b"},
            {"id": "c", "artist": "Test Artist", "title": "Midnight", "web_url": "https://open.spotify.com/track/c"},
        ]
    )

    result = asyncio.run(_spotify(search).resolve("Test Artist", "Midnight"))

    assert result.id == "b"
    assert result.confidence == 0.95


def test_isrc_match_scores_one() -> None:
    search = _FakeSearch(
        [
            {"id": "a", "artist": "Test Artist", "title": "Midnight", "isrc": "OTHER", "web_url": "https://open.spotify.com/track/a"},
            {"id": "b", "artist": "Cover Band", "title": "Something", "isrc": "usabc1234567", "web_url": "https://open.spotify.com/track/b"},
        ]
    )

    result = asyncio.run(_spotify(search).resolve("Test Artist", "Midnight", isrc="USABC1234567"))

    assert result.id == "b"
    assert result.confidence == 1.0


def test_zero_candidates_returns_none() -> None:
    search = _FakeSearch([])

    assert asyncio.run(_spotify(search).resolve("Test Artist", "Midnight")) is None
    assert len(search.calls) == 1


def test_missing_token_returns_none_without_search() -> None:
    search = _FakeSearch([{"id": "a", "artist": "Test Artist", "title": "Midnight", "web_url": "u"}])

    result = asyncio.run(_spotify(search, _FakeTokens(None)).resolve("Test Artist", "Midnight"))

    assert result is None
    assert search.calls == []


def test_search_error_returns_none() -> None:
    search = _FakeSearch(error=RuntimeError("search down"))

    assert asyncio.run(_spotify(search).resolve("Test Artist", "Midnight")) is None


def test_apple_music_search_without_token() -> None:
    search = _FakeSearch(
        [
            {
                "id": "1440",
                "artist": "Test Artist",
                "title": "Sunrise",
                "web_url": "https://music.apple.com/us/album/x/1?i=1440",
            }
        ]
    )
    resolver = PlatformResolver(APPLE_MUSIC, search=search)

    result = asyncio.run(resolver.resolve("Test Artist", "Midnight"))

    assert result.confidence == 0.5
    assert result.id == "1440"
    assert result.app_scheme_url is None
    assert search.calls == [{"query": "Test Artist Midnight", "token": None}]


def test_search_url_fallback_for_platforms_without_search() -> None:
    expected = {
        YOUTUBE_MUSIC: "https://music.youtube.com/search?q=Test%20Artist%20Midnight",
        TIDAL: "https://listen.tidal.com/search?q=Test%20Artist%20Midnight",
        SOUNDCLOUD: "https://soundcloud.com/search/sounds?q=Test%20Artist%20Midnight",
    }
    for descriptor, url in expected.items():
        result = asyncio.run(PlatformResolver(descriptor).resolve("Test Artist", "Midnight"))
        assert result == LinkVariant(web_url=url, confidence=0.3)


def test_empty_query_without_known_links_returns_none() -> None:
    assert asyncio.run(PlatformResolver(TIDAL).resolve("", None)) is None


def test_known_link_patterns_per_platform() -> None:
    cases = [
        (SPOTIFY, "spotify:track:4uLU6hMCjMI75M1A2tKUQC", "4uLU6hMCjMI75M1A2tKUQC"),
        (SPOTIFY, "https://open.spotify.com/intl-de/track/4uLU6hMCjMI75M1A2tKUQC?si=1", "4uLU6hMCjMI75M1A2tKUQC"),
        (APPLE_MUSIC, "https://music.apple.com/us/album/midnight/123?i=456", "456"),
        (APPLE_MUSIC, "https://music.apple.com/gb/song/midnight/789", "789"),
        (YOUTUBE_MUSIC, "https://music.youtube.com/watch?v=dQw4w9WgXcQ&list=x", "dQw4w9WgXcQ"),
        (YOUTUBE_MUSIC, "https://youtu.be/dQw4w9WgXcQ", "dQw4w9WgXcQ"),
        (TIDAL, "https://tidal.com/track/12345", "12345"),
        (SOUNDCLOUD, "https://soundcloud.com/test-artist/midnight", "test-artist/midnight"),
    ]
    for descriptor, url, expected_id in cases:
        assert descriptor.extract_id(url) == expected_id, url

    assert SOUNDCLOUD.extract_id("https://soundcloud.com/search/sounds?q=x") is None
    assert TIDAL.extract_id("https://listen.tidal.com/search?q=x") is None


@pytest.mark.parametrize(
    "url",
    [
        "https://soundcloud.com/test-artist/sets/my-album",
        "https://soundcloud.com/test-artist/likes",
        "https://soundcloud.com/test-artist/tracks",
        "https://soundcloud.com/test-artist/albums",
        "https://soundcloud.com/test-artist/reposts",
        "https://soundcloud.com/test-artist/followers",
        "https://soundcloud.com/test-artist/following",
        "https://soundcloud.com/test-artist/popular-tracks",
        "https://soundcloud.com/test-artist/comments",
        "https://soundcloud.com/discover/sets/charts-top",
        "https://soundcloud.com/you/likes",
        "https://soundcloud.com/stream/x",
        "https://soundcloud.com/test-artist",
    ],
)
def test_soundcloud_non_track_pages_are_not_track_ids(url) -> None:
    assert SOUNDCLOUD.extract_id(url) is None


def test_soundcloud_track_subpage_keeps_track_id() -> None:
    assert SOUNDCLOUD.extract_id("https://soundcloud.com/test-artist/midnight/comments") == "test-artist/midnight"
    assert SOUNDCLOUD.extract_id("https://soundcloud.com/test-artist/likes-and-loves") == "test-artist/likes-and-loves"


@pytest.mark.parametrize(
    "known_links",
    [
        {"soundcloud": "https://soundcloud.com/test-artist/sets/my-album"},
        {"pasted": "https://soundcloud.com/test-artist/likes"},
    ],
)
def test_soundcloud_profile_pages_are_not_trusted(known_links) -> None:
    result = asyncio.run(PlatformResolver(SOUNDCLOUD).resolve("Test Artist", "Midnight", known_links=known_links))

    assert result == LinkVariant(
        web_url="https://soundcloud.com/search/sounds?q=Test%20Artist%20Midnight",
        confidence=0.3,
    )
