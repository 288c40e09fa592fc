from .confidence import score_match
from .display_gate import should_show
from .text_normalization import normalize_text

__all__ = [
    "normalize_text",
    "score_match",
    "should_show",
]
