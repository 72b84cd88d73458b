"""URL validation performed before any external process is spawned."""
from __future__ import annotations

from typing import Any
from urllib.parse import urlparse

from socialsave.core.errors import InvalidInput

ALLOWED_SCHEMES: frozenset[str] = frozenset({"http", "https"})


def is_valid_url(value: Any) -> bool:
    """Return ``True`` when ``value`` is an absolute http(s) URL with a host.

    Notes
    -----
    - Pure string inspection via ``urllib.parse.urlparse``; no network access.
    - Surrounding whitespace is ignored, embedded whitespace or control characters are not.
    """

    if not isinstance(value, str):
        return False
    candidate: str = value.strip()
    if not candidate or any(ch.isspace() or ord(ch) < 32 for ch in candidate):
        return False
    try:
        parsed = urlparse(candidate)
        host = parsed.hostname
    except ValueError:
        return False
    return parsed.scheme.lower() in ALLOWED_SCHEMES and bool(host)


def require_valid_url(value: Any) -> str:
    """Return the stripped URL or raise ``InvalidInput``."""

    if not is_valid_url(value):
        raise InvalidInput()
    return value.strip()
