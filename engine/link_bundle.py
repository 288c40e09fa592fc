from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable, Mapping

from config.settings import DEFAULT_CONFIDENCE_THRESHOLD, DEFAULT_DESTINATION_PRIORITY, HTTP_TIMEOUT_SECONDS
from engine.display_gate import should_show
from recognition.audd import RecognitionError
from recognition.mapper import CanonicalTrackRecord, map_recognition_result

logger = logging.getLogger(__name__)


async def _bounded(resolver, timeout_sec, artist, title, isrc, known_links):
    try:
        return await asyncio.wait_for(
            resolver.resolve(artist, title, isrc=isrc, known_links=known_links),
            timeout=timeout_sec,
        )
    except asyncio.TimeoutError:
        logger.warning("resolver timed out platform=%s after %ss", resolver.platform, timeout_sec)
        return None
    except Exception:
        logger.exception("resolver raised platform=%s", resolver.platform)
        return None


async def resolve_link_bundle(
    resolvers: Iterable[Any],
    artist: str | None,
    title: str | None,
    *,
    isrc: str | None = None,
    known_links: Mapping[str, str] | None = None,
    timeout_sec: float | None = HTTP_TIMEOUT_SECONDS,
) -> dict[str, Any]:
    """Resolve one recording on every platform concurrently.

    Returns ``{platform: LinkVariant | None}``. A slow or failing platform
    only blanks its own entry.
    """
    resolvers = list(resolvers)
    results = await asyncio.gather(
        *(_bounded(resolver, timeout_sec, artist, title, isrc, known_links) for resolver in resolvers)
    )
    bundle = {resolver.platform: result for resolver, result in zip(resolvers, results)}
    logger.info(
        "link bundle artist=%r title=%r resolved=%s",
        artist,
        title,
        sorted(platform for platform, link in bundle.items() if link is not None),
    )
    return bundle


async def identify_track(client, *, url: str | None = None, query: str | None = None, audio: bytes | None = None, filename: str = "clip.mp3") -> CanonicalTrackRecord | None:
    """Recognize a track and map it to a canonical record.

    Exactly one of ``url``, ``query`` or ``audio`` is used, in that order of
    preference. Returns None when the provider call fails; the mapper only
    runs on data the provider actually returned.
    """
    try:
        if url:
            raw = await client.recognize_by_url(url)
        elif query:
            raw = await client.search_by_text(query)
        elif audio:
            raw = await client.recognize_file(audio, filename)
        else:
            return None
    except RecognitionError as exc:
        logger.warning("recognition failed: %s", exc)
        return None
    return map_recognition_result(raw)


def select_destination(
    bundle: Mapping[str, Any],
    *,
    threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
    priority: tuple[str, ...] = DEFAULT_DESTINATION_PRIORITY,
):
    """Pick the advertising destination: first platform whose link passes the gate."""
    for platform in priority:
        link = (bundle or {}).get(platform)
        if should_show(link, threshold):
            return platform, link
    return None
