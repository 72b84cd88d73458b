"""Domain models for extracted media metadata and persisted artifacts."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

UNKNOWN_TITLE: str = "Unknown Title"
UNKNOWN_UPLOADER: str = "Unknown"


class MediaFormat(BaseModel):
    """One encoded variant of a video as reported by yt-dlp.

    Notes
    -----
    - Codec fields keep yt-dlp semantics: the literal string ``"none"`` means the
      stream lacks that track, ``None`` means the tool did not say.
    """

    url: Optional[str] = Field(default=None, description="Direct media URL")
    extension: str = Field(default="", description="Container/extension")
    format_id: Optional[str] = Field(default=None, description="yt-dlp format identifier")
    video_codec: Optional[str] = Field(default=None, description="Video codec or 'none'")
    audio_codec: Optional[str] = Field(default=None, description="Audio codec or 'none'")
    height: Optional[int] = Field(default=None, description="Vertical resolution in pixels")
    filesize: Optional[int] = Field(default=None, description="Reported size in bytes")

    @property
    def has_video(self) -> bool:
        return bool(self.video_codec) and self.video_codec != "none"

    @property
    def has_audio(self) -> bool:
        return bool(self.audio_codec) and self.audio_codec != "none"


class VideoMetadata(BaseModel):
    """Normalized metadata for a single video, produced fresh per request.

    Notes
    -----
    - ``title`` and ``uploader`` always hold a string; parsers substitute placeholders.
    - ``direct_url`` is only filled by strategies that ask yt-dlp for the media URL.
    """

    title: str = Field(default=UNKNOWN_TITLE)
    uploader: str = Field(default=UNKNOWN_UPLOADER)
    duration_seconds: Optional[float] = Field(default=None)
    view_count: Optional[str] = Field(default=None)
    thumbnail_url: Optional[str] = Field(default=None)
    extension: Optional[str] = Field(default=None)
    direct_url: Optional[str] = Field(default=None)
    formats: list[MediaFormat] = Field(default_factory=list)


@dataclass(frozen=True)
class DownloadedArtifact:
    """A media file materialized in the downloads directory.

    Notes
    -----
    - Created by the download orchestrator; only the retention sweeper deletes it.
    - ``served_path`` is URL-quoted and relative to the server root.
    """

    file_id: str
    display_filename: str
    size_bytes: int
    served_path: str
    created_at: datetime
    path: Path
