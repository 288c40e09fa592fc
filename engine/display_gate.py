from __future__ import annotations

from collections.abc import Mapping

from config.settings import DEFAULT_CONFIDENCE_THRESHOLD


def _link_fields(link):
    if isinstance(link, Mapping):
        web_url = link.get("web_url") or link.get("webUrl")
        return web_url, link.get("confidence")
    return getattr(link, "web_url", None), getattr(link, "confidence", None)


def should_show(link, threshold: float = DEFAULT_CONFIDENCE_THRESHOLD) -> bool:
    """Return True when a resolved link may be shown to users or forwarded.

    ``link`` is a ``LinkVariant`` or a mapping with ``web_url`` (or
    ``webUrl``) and ``confidence`` keys, as stored by callers.

    This is the only place low-confidence guesses are filtered out; both the
    public link page and automated destination selection go through it.
    """
    if link is None:
        return False
    web_url, confidence = _link_fields(link)
    if not web_url or confidence is None:
        return False
    try:
        return float(confidence) >= float(threshold)
    except (TypeError, ValueError):
        return False
