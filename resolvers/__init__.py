"""Per-platform track link resolvers."""

from resolvers.base import LinkVariant, PlatformDescriptor, PlatformResolver
from resolvers.platforms import build_default_resolvers, detect_platform, known_links_from_urls

__all__ = [
    "LinkVariant",
    "PlatformDescriptor",
    "PlatformResolver",
    "build_default_resolvers",
    "detect_platform",
    "known_links_from_urls",
]
