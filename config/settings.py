"""Application settings constants and config accessors."""

from __future__ import annotations

import json
import os
from typing import Any

# Minimum confidence a resolved link needs before it is shown or forwarded.
DEFAULT_CONFIDENCE_THRESHOLD = 0.5

# Seconds subtracted from a provider token lifetime before it is treated as expired.
TOKEN_EXPIRY_MARGIN_SECONDS = 60

HTTP_TIMEOUT_SECONDS = float(os.getenv("LINK_RESOLVER_HTTP_TIMEOUT_SECONDS", "15"))

# Platforms tried in order when picking an advertising destination.
DEFAULT_DESTINATION_PRIORITY = ("spotify", "apple_music", "youtube_music", "tidal", "soundcloud")


def load_config(path):
    with open(path, "r") as f:
        return json.load(f)


def validate_config(config: Any) -> list[str]:
    errors = []
    if not isinstance(config, dict):
        return ["config must be a JSON object"]

    spotify = config.get("spotify")
    if spotify is not None:
        if not isinstance(spotify, dict):
            errors.append("spotify must be an object")
        else:
            for key in ("client_id", "client_secret"):
                value = spotify.get(key)
                if value is not None and not isinstance(value, str):
                    errors.append(f"spotify.{key} must be a string")

    audd = config.get("audd")
    if audd is not None:
        if not isinstance(audd, dict):
            errors.append("audd must be an object")
        elif audd.get("api_token") is not None and not isinstance(audd.get("api_token"), str):
            errors.append("audd.api_token must be a string")

    resolver = config.get("link_resolver")
    if resolver is not None:
        if not isinstance(resolver, dict):
            errors.append("link_resolver must be an object")
        else:
            threshold = resolver.get("confidence_threshold")
            if threshold is not None:
                if isinstance(threshold, bool) or not isinstance(threshold, (int, float)):
                    errors.append("link_resolver.confidence_threshold must be a number")
                elif not 0 <= threshold <= 1:
                    errors.append("link_resolver.confidence_threshold must be between 0 and 1")
            timeout = resolver.get("timeout_seconds")
            if timeout is not None:
                if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
                    errors.append("link_resolver.timeout_seconds must be a positive number")
    return errors


def spotify_credentials(config=None):
    client_id = os.environ.get("SPOTIFY_CLIENT_ID")
    client_secret = os.environ.get("SPOTIFY_CLIENT_SECRET")
    if client_id and client_secret:
        return client_id, client_secret
    if not isinstance(config, dict):
        return None, None
    spotify_cfg = config.get("spotify") or {}
    return spotify_cfg.get("client_id") or None, spotify_cfg.get("client_secret") or None


def audd_api_token(config=None):
    token = os.environ.get("AUDD_API_KEY")
    if token:
        return str(token).strip() or None
    if not isinstance(config, dict):
        return None
    token = (config.get("audd") or {}).get("api_token")
    if token:
        return str(token).strip() or None
    return None


def confidence_threshold(config=None, default=DEFAULT_CONFIDENCE_THRESHOLD):
    if not isinstance(config, dict):
        return default
    value = (config.get("link_resolver") or {}).get("confidence_threshold")
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def http_timeout(config=None, default=HTTP_TIMEOUT_SECONDS):
    if not isinstance(config, dict):
        return default
    value = (config.get("link_resolver") or {}).get("timeout_seconds")
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default
