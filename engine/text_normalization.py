from __future__ import annotations

import re

_WS_RE = re.compile(r"\s+")
_QUOTE_RE = re.compile(r"[\"'‘’‚‛“”„‟]")
_TRAILING_FEAT_RE = re.compile(r"\s*\(feat.*?\)\s*$", re.IGNORECASE)


def normalize_text(value: str | None) -> str:
    """Canonicalize artist/title text for containment comparison.

    Lower-cases, collapses whitespace, strips straight and curly quotes and drops
    a trailing ``(feat ...)`` credit. Diacritics are left untouched, so
    ``"Beyoncé"`` and ``"Beyonce"`` do not compare equal.
    """
    text = str(value or "").lower()
    text = _WS_RE.sub(" ", text)
    text = _QUOTE_RE.sub("", text)
    # Repeat until stable so "x (feat. a) (feat. b)" normalizes in one call.
    while True:
        stripped = _TRAILING_FEAT_RE.sub("", text).strip()
        if stripped == text.strip():
            break
        text = stripped
    return _WS_RE.sub(" ", text).strip()
