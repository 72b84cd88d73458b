"""Human-readable formatting of durations and byte counts."""
from __future__ import annotations

import math
from typing import Optional, Union

UNKNOWN: str = "Unknown"

_SIZE_UNITS: tuple[str, ...] = ("Bytes", "KB", "MB", "GB")


def _to_number(value: Union[int, float, str, None]) -> Optional[float]:
    """Coerce template output or JSON values into a finite float, else ``None``."""

    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number) or number < 0:
        return None
    return number


def format_duration(seconds: Union[int, float, str, None]) -> str:
    """Render a duration as ``m:ss``.

    Notes
    -----
    - Minutes are not wrapped into hours: ``3725`` renders as ``"62:05"``.
    - Fractional seconds are truncated; absent or unparseable input gives ``"Unknown"``.
    """

    number = _to_number(seconds)
    if number is None:
        return UNKNOWN
    total: int = int(number)
    minutes, secs = divmod(total, 60)
    return f"{minutes}:{secs:02d}"


def format_file_size(size: Union[int, float, str, None]) -> str:
    """Render a byte count using the largest fitting unit up to GB.

    Notes
    -----
    - Base 1024, two decimals with trailing zeros dropped: ``1536 -> "1.5 KB"``.
    - ``None`` gives ``"Unknown size"``; zero gives ``"0 Bytes"``.
    """

    number = _to_number(size)
    if number is None:
        return f"{UNKNOWN} size"
    if number == 0:
        return "0 Bytes"
    index: int = 0
    while number >= 1024 and index < len(_SIZE_UNITS) - 1:
        number /= 1024
        index += 1
    rendered: str = f"{number:.2f}".rstrip("0").rstrip(".")
    return f"{rendered} {_SIZE_UNITS[index]}"
