"""Read-only access to unvalidated provider payloads."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Sequence

Extractor = Callable[["ExternalPayload"], Any]


class ExternalPayload:
    """Wraps a decoded provider response that has not been validated.

    Nothing here assumes a field exists or has the expected type. Lookups go
    through dotted paths where integer segments index into lists, and any
    mismatch along the way yields None.
    """

    __slots__ = ("_raw",)

    def __init__(self, raw: Any) -> None:
        self._raw = raw if isinstance(raw, dict) else {}

    def __bool__(self) -> bool:
        return bool(self._raw)

    @property
    def raw(self) -> dict:
        return self._raw

    def get(self, path: str) -> Any:
        current: Any = self._raw
        for segment in path.split("."):
            if isinstance(current, dict):
                current = current.get(segment)
            elif isinstance(current, list) and segment.isdigit():
                index = int(segment)
                current = current[index] if index < len(current) else None
            else:
                return None
            if current is None:
                return None
        return current

    def text(self, path: str) -> str | None:
        value = self.get(path)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            value = str(value)
        if not isinstance(value, str):
            return None
        value = value.strip()
        return value or None

    def section(self, path: str) -> "ExternalPayload":
        return ExternalPayload(self.get(path))


def field(path: str) -> Extractor:
    """Extractor returning the non-empty string at ``path``."""

    def _extract(payload: ExternalPayload) -> str | None:
        return payload.text(path)

    _extract.__name__ = f"field[{path}]"
    return _extract


def first_present(payload: ExternalPayload, extractors: Iterable[Extractor]) -> Any:
    """Run extractors in order and return the first non-empty result."""
    for extract in extractors:
        value = extract(payload)
        if value not in (None, ""):
            return value
    return None


def fields(*paths: str) -> Sequence[Extractor]:
    return tuple(field(path) for path in paths)
