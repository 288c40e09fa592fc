"""Generic per-platform track resolver."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol, TypedDict
from urllib.parse import quote

from engine.confidence import EXACT_ID_CONFIDENCE, FLOOR_CONFIDENCE, isrc_matches, score_match

logger = logging.getLogger(__name__)

SEARCH_STRATEGY_API = "api"
SEARCH_STRATEGY_SEARCH_URL = "search_url"


@dataclass(frozen=True)
class LinkVariant:
    """A link to one recording on one platform."""

    web_url: str
    confidence: float
    id: str | None = None
    app_scheme_url: str | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "web_url": self.web_url,
            "app_scheme_url": self.app_scheme_url,
            "confidence": self.confidence,
        }


class SearchCandidate(TypedDict, total=False):
    id: str | None
    artist: str | None
    title: str | None
    isrc: str | None
    web_url: str | None


class TrackSearch(Protocol):
    async def search(self, query: str, *, token: str | None = None) -> list[SearchCandidate]:
        raise NotImplementedError


class TokenSource(Protocol):
    async def get_token(self) -> str | None:
        raise NotImplementedError


@dataclass(frozen=True)
class PlatformDescriptor:
    """Everything that differs between platforms.

    ``direct_url_patterns`` each capture the native track id in group 1.
    ``scheme_template`` and ``search_url_template`` are ``str.format`` templates
    taking ``id`` and ``query`` respectively.
    """

    platform: str
    direct_url_patterns: tuple[re.Pattern[str], ...]
    search_url_template: str
    search_strategy: str = SEARCH_STRATEGY_SEARCH_URL
    scheme_template: str | None = None
    domains: tuple[str, ...] = field(default_factory=tuple)

    def extract_id(self, url: str | None) -> str | None:
        text = str(url or "").strip()
        if not text:
            return None
        for pattern in self.direct_url_patterns:
            match = pattern.search(text)
            if match:
                return match.group(1)
        return None

    def build_scheme_url(self, native_id: str | None) -> str | None:
        if not native_id or not self.scheme_template:
            return None
        return self.scheme_template.format(id=native_id)

    def build_search_url(self, query: str) -> str:
        return self.search_url_template.format(query=quote(query, safe=""))

    def matches_domain(self, url: str | None) -> bool:
        lower = str(url or "").lower()
        return any(domain in lower for domain in self.domains)


def _search_query(artist: str | None, title: str | None) -> str:
    return " ".join(part for part in (str(artist or "").strip(), str(title or "").strip()) if part)


class PlatformResolver:
    """Resolve one recording on one platform.

    Branch order is fixed: trusted direct URL, then platform search, then a
    constructed low-trust search-results URL. ``resolve`` never raises; any
    failure is logged and reported as ``None`` ("unavailable", not "absent").
    """

    def __init__(
        self,
        descriptor: PlatformDescriptor,
        *,
        search: TrackSearch | None = None,
        token_source: TokenSource | None = None,
    ) -> None:
        self.descriptor = descriptor
        self.search = search
        self.token_source = token_source

    @property
    def platform(self) -> str:
        return self.descriptor.platform

    def _from_known_links(self, known_links: Mapping[str, str] | None) -> LinkVariant | None:
        if not known_links:
            return None
        own = known_links.get(self.platform)
        urls = [own] if own else []
        urls.extend(url for key, url in known_links.items() if key != self.platform and url)
        for url in urls:
            native_id = self.descriptor.extract_id(url)
            if native_id:
                return LinkVariant(
                    id=native_id,
                    web_url=str(url).strip(),
                    app_scheme_url=self.descriptor.build_scheme_url(native_id),
                    confidence=EXACT_ID_CONFIDENCE,
                )
        return None

    async def resolve(
        self,
        artist: str | None,
        title: str | None,
        isrc: str | None = None,
        known_links: Mapping[str, str] | None = None,
    ) -> LinkVariant | None:
        try:
            return await self._resolve(artist, title, isrc, known_links)
        except Exception:
            logger.exception("Resolver failed platform=%s artist=%r title=%r", self.platform, artist, title)
            return None

    async def _resolve(self, artist, title, isrc, known_links) -> LinkVariant | None:
        direct = self._from_known_links(known_links)
        if direct is not None:
            logger.info("resolver platform=%s source=known_link id=%s", self.platform, direct.id)
            return direct

        query = _search_query(artist, title)
        if not query:
            return None

        if self.descriptor.search_strategy != SEARCH_STRATEGY_API or self.search is None:
            url = self.descriptor.build_search_url(query)
            logger.info("resolver platform=%s source=search_url url=%s", self.platform, url)
            return LinkVariant(web_url=url, confidence=FLOOR_CONFIDENCE)

        token = None
        if self.token_source is not None:
            token = await self.token_source.get_token()
            if not token:
                logger.warning("resolver platform=%s token unavailable; skipping search", self.platform)
                return None

        candidates = await self.search.search(query, token=token)
        best: SearchCandidate | None = None
        best_score = -1.0
        for candidate in candidates or []:
            web_url = candidate.get("web_url")
            if not web_url:
                continue
            score = score_match(
                artist,
                title,
                candidate.get("artist"),
                candidate.get("title"),
                isrc_matches(isrc, candidate.get("isrc")),
            )
            if score > best_score:
                best = candidate
                best_score = score

        if best is None:
            logger.info("resolver platform=%s no candidates query=%r", self.platform, query)
            return None

        native_id = best.get("id") or self.descriptor.extract_id(best.get("web_url"))
        logger.info(
            "resolver platform=%s source=search id=%s confidence=%s",
            self.platform,
            native_id,
            best_score,
        )
        return LinkVariant(
            id=native_id,
            web_url=str(best["web_url"]),
            app_scheme_url=self.descriptor.build_scheme_url(native_id),
            confidence=best_score,
        )
