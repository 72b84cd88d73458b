"""Parsing of yt-dlp output into ``VideoMetadata`` and best-format selection.

Two output shapes are supported and the caller always states which one it asked
the tool for:

- ``FieldTemplate``: a single ``--print`` line with fields joined by a separator
  that is unlikely to appear in titles; values are mapped positionally.
- ``JSON_RECORD``: the full info dictionary printed by ``--dump-single-json``.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional, Union

from socialsave.core.errors import ExternalToolFailure, NoDownloadableFormat
from socialsave.domain.media import (
    UNKNOWN_TITLE,
    UNKNOWN_UPLOADER,
    MediaFormat,
    VideoMetadata,
)

FIELD_SEPARATOR: str = "|||"

# yt-dlp renders missing template fields with its "NA" placeholder
_ABSENT_VALUES: frozenset[str] = frozenset({"", "NA", "None", "none", "null"})


@dataclass(frozen=True)
class FieldTemplate:
    """Ordered list of yt-dlp info fields printed on one line."""

    fields: tuple[str, ...]
    separator: str = FIELD_SEPARATOR

    def render(self) -> str:
        """Return the ``--print`` template, e.g. ``%(title)s|||%(duration)s``."""

        return self.separator.join(f"%({name})s" for name in self.fields)


class JsonRecord(Enum):
    """Marker for the full JSON info record shape."""

    JSON_RECORD = "json"


JSON_RECORD = JsonRecord.JSON_RECORD

OutputShape = Union[FieldTemplate, JsonRecord]

INFO_TEMPLATE: FieldTemplate = FieldTemplate(
    ("title", "duration", "uploader", "view_count", "thumbnail", "ext")
)
FALLBACK_TEMPLATE: FieldTemplate = FieldTemplate(("title", "duration", "url"))


def _clean(value: Any) -> Optional[str]:
    """Normalize a raw value to a stripped string, or ``None`` when absent."""

    if value is None:
        return None
    text: str = str(value).strip()
    if text in _ABSENT_VALUES:
        return None
    return text


def _to_float(value: Any) -> Optional[float]:
    text = _clean(value)
    if text is None:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def _to_int(value: Any) -> Optional[int]:
    number = _to_float(value)
    return int(number) if number is not None else None


def _metadata_from_mapping(values: dict[str, Any]) -> VideoMetadata:
    """Build metadata from a field→value mapping shared by both shapes."""

    view_count: Optional[str] = _clean(values.get("view_count"))
    return VideoMetadata(
        title=_clean(values.get("title")) or UNKNOWN_TITLE,
        uploader=_clean(values.get("uploader")) or _clean(values.get("channel")) or UNKNOWN_UPLOADER,
        duration_seconds=_to_float(values.get("duration")),
        view_count=view_count,
        thumbnail_url=_clean(values.get("thumbnail")),
        extension=_clean(values.get("ext")),
        direct_url=_clean(values.get("url")),
    )


def _parse_fields(raw: str, template: FieldTemplate) -> VideoMetadata:
    lines: list[str] = [line for line in raw.strip().splitlines() if line.strip()]
    if not lines:
        raise ExternalToolFailure("The extraction tool returned no metadata")
    # Playlist-like URLs can print one line per entry; the first entry wins.
    parts: list[str] = lines[0].split(template.separator)
    values: dict[str, Any] = {
        name: parts[index] if index < len(parts) else None
        for index, name in enumerate(template.fields)
    }
    return _metadata_from_mapping(values)


def _codec(value: Any) -> Optional[str]:
    # "none" is meaningful here (track absent) so it is not treated as missing
    if value is None:
        return None
    text: str = str(value).strip()
    return text or None


def _parse_format(entry: dict[str, Any]) -> MediaFormat:
    return MediaFormat(
        url=_clean(entry.get("url")),
        extension=_clean(entry.get("ext")) or "",
        format_id=_clean(entry.get("format_id")),
        video_codec=_codec(entry.get("vcodec")),
        audio_codec=_codec(entry.get("acodec")),
        height=_to_int(entry.get("height")),
        filesize=_to_int(entry.get("filesize") or entry.get("filesize_approx")),
    )


def _parse_json(raw: str) -> VideoMetadata:
    try:
        record: Any = json.loads(raw.strip())
    except json.JSONDecodeError as ex:
        raise ExternalToolFailure("Could not parse the extraction tool output") from ex
    if not isinstance(record, dict):
        raise ExternalToolFailure("Unexpected extraction tool output")

    metadata: VideoMetadata = _metadata_from_mapping(record)
    raw_formats: Any = record.get("formats") or []
    if isinstance(raw_formats, list):
        metadata.formats = [_parse_format(f) for f in raw_formats if isinstance(f, dict)]
    return metadata


def parse_output(raw: str, shape: OutputShape) -> VideoMetadata:
    """Parse tool output according to the shape that was requested.

    Raises
    ------
    ExternalToolFailure
        If the output is empty or does not match the requested shape.
    """

    if isinstance(shape, FieldTemplate):
        return _parse_fields(raw, shape)
    return _parse_json(raw)


def select_best_format(formats: Iterable[MediaFormat], require_muxed: bool = True) -> MediaFormat:
    """Pick the highest-quality usable format.

    Notes
    -----
    - Usable: has a media URL and, when ``require_muxed``, both a video and an audio track.
    - Ranked by height, then reported filesize, both descending; unknown values rank as 0.
      Ties keep the tool's original order.

    Raises
    ------
    NoDownloadableFormat
        If no format passes the filter.
    """

    candidates: list[MediaFormat] = [
        f for f in formats if f.url and (not require_muxed or (f.has_video and f.has_audio))
    ]
    if not candidates:
        raise NoDownloadableFormat()
    candidates.sort(key=lambda f: (f.height or 0, f.filesize or 0), reverse=True)
    return candidates[0]
