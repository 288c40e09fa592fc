"""Spotify integration modules."""

from spotify.token_cache import SpotifyTokenCache, TokenCacheEntry

__all__ = ["SpotifyTokenCache", "TokenCacheEntry"]
