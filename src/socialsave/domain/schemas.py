"""Request and response payloads for the HTTP API.

Field names are camelCase to match the JSON contract consumed by the web client.
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from socialsave.domain.platform import Platform


class VideoRequest(BaseModel):
    """Request payload carrying a video URL.

    Notes
    -----
    - ``url`` is optional at the schema level so that a missing URL is reported with the
      same 400 response as a malformed one.
    - ``quality`` is a yt-dlp format selector passed through verbatim.
    """

    url: Optional[str] = Field(default=None, description="Video URL")
    quality: Optional[str] = Field(default=None, max_length=200, description="yt-dlp format selector")


class VideoInfo(BaseModel):
    title: str
    duration: str
    uploader: str
    viewCount: str
    thumbnail: str


class InfoResponse(BaseModel):
    success: bool = True
    platform: Platform
    videoInfo: VideoInfo


class DownloadedVideoInfo(BaseModel):
    title: str
    duration: str
    uploader: str
    extension: str
    filename: str
    fileSize: str
    downloadUrl: str


class DownloadResponse(BaseModel):
    success: bool = True
    platform: Platform
    videoInfo: DownloadedVideoInfo
    message: str = "Video downloaded successfully!"


class AudioInfo(BaseModel):
    filename: str
    fileSize: str
    downloadUrl: str
    format: str = "MP3"


class AudioResponse(BaseModel):
    success: bool = True
    audioInfo: AudioInfo
    message: str = "Audio downloaded successfully!"


class ResolveResponse(BaseModel):
    """Direct-link description of a video; nothing is stored on the server."""

    success: bool = True
    platform: Platform
    title: str
    author: str
    duration: str
    thumbnail: str
    downloadUrl: str
    filesize: str
    quality: str
    directDownload: bool = True


class HealthResponse(BaseModel):
    status: str
    message: str
    timestamp: str
    ytdlpVersion: str
    platforms: list[str]


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
