from __future__ import annotations

from engine.text_normalization import normalize_text

EXACT_ID_CONFIDENCE = 1.0
FULL_MATCH_CONFIDENCE = 0.95
TITLE_MATCH_CONFIDENCE = 0.7
ARTIST_MATCH_CONFIDENCE = 0.5
FLOOR_CONFIDENCE = 0.3


def _contains_either(left: str, right: str) -> bool:
    if not left or not right:
        return False
    return left in right or right in left


def score_match(
    requested_artist: str | None,
    requested_title: str | None,
    found_artist: str | None,
    found_title: str | None,
    exact_id_match: bool = False,
) -> float:
    """Score how likely a found track is the requested one.

    Rules are evaluated in order and the first hit wins:

    - exact external id match (ISRC): 1.0
    - title and artist contain each other (either direction): 0.95
    - title only: 0.7
    - artist only: 0.5
    - neither: 0.3

    Containment rather than edit distance keeps catalog variants such as remix
    tags or featured-artist credits from being penalized. Callers still gate
    non-exact results with a threshold before trusting them.
    """
    if exact_id_match:
        return EXACT_ID_CONFIDENCE

    title_match = _contains_either(normalize_text(requested_title), normalize_text(found_title))
    artist_match = _contains_either(normalize_text(requested_artist), normalize_text(found_artist))

    if title_match and artist_match:
        return FULL_MATCH_CONFIDENCE
    if title_match:
        return TITLE_MATCH_CONFIDENCE
    if artist_match:
        return ARTIST_MATCH_CONFIDENCE
    return FLOOR_CONFIDENCE


def isrc_matches(requested_isrc: str | None, found_isrc: str | None) -> bool:
    requested = str(requested_isrc or "").strip().upper()
    found = str(found_isrc or "").strip().upper()
    return bool(requested and found and requested == found)
