"""Platform classification by domain substring."""
from __future__ import annotations

from enum import Enum


class Platform(str, Enum):
    """Known content platforms.

    Notes
    -----
    - ``UNKNOWN`` is returned for any URL that matches no entry of ``PLATFORM_DOMAINS``.
    - Values double as the path segment of the platform-specific download endpoints.
    """

    YOUTUBE = "youtube"
    INSTAGRAM = "instagram"
    FACEBOOK = "facebook"
    TWITTER = "twitter"
    TIKTOK = "tiktok"
    LINKEDIN = "linkedin"
    PINTEREST = "pinterest"
    SNAPCHAT = "snapchat"
    UNKNOWN = "unknown"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES.get(self, self.value.capitalize())


_DISPLAY_NAMES: dict[Platform, str] = {
    Platform.YOUTUBE: "YouTube",
    Platform.TIKTOK: "TikTok",
    Platform.LINKEDIN: "LinkedIn",
}

# Checked in order; the first contained domain wins.
PLATFORM_DOMAINS: tuple[tuple[str, Platform], ...] = (
    ("youtube.com", Platform.YOUTUBE),
    ("youtu.be", Platform.YOUTUBE),
    ("instagram.com", Platform.INSTAGRAM),
    ("facebook.com", Platform.FACEBOOK),
    ("twitter.com", Platform.TWITTER),
    ("x.com", Platform.TWITTER),
    ("tiktok.com", Platform.TIKTOK),
    ("linkedin.com", Platform.LINKEDIN),
    ("pinterest.com", Platform.PINTEREST),
    ("snapchat.com", Platform.SNAPCHAT),
)

KNOWN_PLATFORMS: tuple[Platform, ...] = tuple(p for p in Platform if p is not Platform.UNKNOWN)


def detect_platform(url: str) -> Platform:
    """Map a URL to a platform by substring containment.

    Notes
    -----
    - Matching is on the whole URL string, so subdomains and regional variants match,
      and so does a domain embedded in a query string. The result is advisory only.
    """

    lowered: str = url.lower()
    for domain, platform in PLATFORM_DOMAINS:
        if domain in lowered:
            return platform
    return Platform.UNKNOWN
