"""HTTP API routes for the SocialSave download server."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from yt_dlp.version import __version__ as ytdlp_version

from socialsave.core.errors import (
    ExternalToolFailure,
    NoDownloadableFormat,
    PlatformMismatch,
    SocialSaveError,
)
from socialsave.core.formatting import UNKNOWN, format_duration, format_file_size
from socialsave.domain.media import DownloadedArtifact, VideoMetadata
from socialsave.domain.platform import KNOWN_PLATFORMS, Platform, detect_platform
from socialsave.domain.schemas import (
    AudioInfo,
    AudioResponse,
    DownloadedVideoInfo,
    DownloadResponse,
    HealthResponse,
    InfoResponse,
    ResolveResponse,
    VideoInfo,
    VideoRequest,
)
from socialsave.domain.urls import require_valid_url
from socialsave.services.downloader import DownloadOrchestrator
from socialsave.services.extractor import MetadataExtractor

logger = logging.getLogger(__name__)

router: APIRouter = APIRouter(prefix="/api", tags=["api"])


def get_extractor(request: Request) -> MetadataExtractor:
    """Metadata extractor built by the application factory."""

    return request.app.state.extractor


def get_orchestrator(request: Request) -> DownloadOrchestrator:
    """Download orchestrator built by the application factory."""

    return request.app.state.orchestrator


def _placeholder_info(platform: Platform) -> VideoInfo:
    """Best-effort info shown when metadata extraction fails."""

    return VideoInfo(
        title=f"{platform.display_name} Video Ready",
        duration=UNKNOWN,
        uploader="SocialSave",
        viewCount=UNKNOWN,
        thumbnail="",
    )


@router.post("/info", response_model=InfoResponse)
async def post_info(
    payload: VideoRequest,
    extractor: MetadataExtractor = Depends(get_extractor),
) -> InfoResponse:
    """Return display metadata for a video.

    Notes
    -----
    - Never fails because of the external tool: extraction errors degrade to a
      placeholder ``videoInfo`` with HTTP 200. Only an invalid URL yields 400.
    """

    url: str = require_valid_url(payload.url)
    platform: Platform = detect_platform(url)
    logger.info("Getting info", extra={"url": url, "platform": platform.value})

    try:
        metadata: VideoMetadata = await extractor.fetch_info(url)
    except SocialSaveError as ex:
        logger.warning("Info extraction failed: %s", ex.message, extra={"url": url})
        return InfoResponse(platform=platform, videoInfo=_placeholder_info(platform))

    return InfoResponse(
        platform=platform,
        videoInfo=VideoInfo(
            title=metadata.title,
            duration=format_duration(metadata.duration_seconds),
            uploader=metadata.uploader,
            viewCount=metadata.view_count or UNKNOWN,
            thumbnail=metadata.thumbnail_url or "",
        ),
    )


async def _download_video(
    url: str,
    quality: Optional[str],
    extractor: MetadataExtractor,
    orchestrator: DownloadOrchestrator,
) -> DownloadResponse:
    platform: Platform = detect_platform(url)
    try:
        metadata: VideoMetadata = await extractor.fetch_info(url)
    except SocialSaveError as ex:
        # Descriptive fields only; the download itself decides success
        logger.warning("Info extraction before download failed: %s", ex.message, extra={"url": url})
        metadata = VideoMetadata(title="Video")

    artifact: DownloadedArtifact = await orchestrator.download(url, quality)
    extension: str = artifact.path.suffix.lstrip(".") or metadata.extension or "mp4"
    return DownloadResponse(
        platform=platform,
        videoInfo=DownloadedVideoInfo(
            title=metadata.title,
            duration=format_duration(metadata.duration_seconds),
            uploader=metadata.uploader,
            extension=extension,
            filename=artifact.display_filename,
            fileSize=format_file_size(artifact.size_bytes),
            downloadUrl=artifact.served_path,
        ),
    )


@router.post("/download", response_model=DownloadResponse)
async def post_download(
    payload: VideoRequest,
    extractor: MetadataExtractor = Depends(get_extractor),
    orchestrator: DownloadOrchestrator = Depends(get_orchestrator),
) -> DownloadResponse:
    """Download a video to the server and return a link to the stored file.

    Notes
    -----
    - ``quality`` is a yt-dlp format selector; the configured default applies when omitted.
    - The file stays available under ``/downloads`` until the retention sweeper removes it.
    """

    url: str = require_valid_url(payload.url)
    return await _download_video(url, payload.quality, extractor, orchestrator)


@router.post("/download-audio", response_model=AudioResponse)
async def post_download_audio(
    payload: VideoRequest,
    orchestrator: DownloadOrchestrator = Depends(get_orchestrator),
) -> AudioResponse:
    """Extract the audio track as MP3 and return a link to the stored file."""

    url: str = require_valid_url(payload.url)
    artifact: DownloadedArtifact = await orchestrator.download_audio(url)
    return AudioResponse(
        audioInfo=AudioInfo(
            filename=artifact.display_filename,
            fileSize=format_file_size(artifact.size_bytes),
            downloadUrl=artifact.served_path,
        )
    )


def _platform_handler(
    expected: Platform,
) -> Callable[..., Awaitable[DownloadResponse]]:
    async def handler(
        payload: VideoRequest,
        extractor: MetadataExtractor = Depends(get_extractor),
        orchestrator: DownloadOrchestrator = Depends(get_orchestrator),
    ) -> DownloadResponse:
        url: str = require_valid_url(payload.url)
        detected: Platform = detect_platform(url)
        if detected not in (expected, Platform.UNKNOWN):
            raise PlatformMismatch(expected.value, detected.value)
        return await _download_video(url, payload.quality, extractor, orchestrator)

    handler.__name__ = f"post_{expected.value}"
    handler.__doc__ = f"Download a {expected.display_name} video; other known platforms are rejected."
    return handler


for _platform in KNOWN_PLATFORMS:
    router.add_api_route(
        f"/{_platform.value}",
        _platform_handler(_platform),
        methods=["POST"],
        response_model=DownloadResponse,
    )


@router.post("/resolve", response_model=ResolveResponse)
async def post_resolve(
    payload: VideoRequest,
    extractor: MetadataExtractor = Depends(get_extractor),
) -> ResolveResponse:
    """Describe the best direct media link without storing anything.

    Notes
    -----
    - Primary strategy: full JSON record plus best muxed format selection.
    - If the primary call fails, a reduced field template is tried once. A parsed record
      without any usable format is reported as 404 and not retried.
    """

    url: str = require_valid_url(payload.url)
    platform: Platform = detect_platform(url)
    logger.info("Resolving direct link", extra={"url": url, "platform": platform.value})

    try:
        metadata, best = await extractor.resolve_best_format(url)
    except NoDownloadableFormat:
        raise
    except SocialSaveError as ex:
        logger.warning("Primary resolve failed, using fallback: %s", ex.message, extra={"url": url})
        try:
            fallback: VideoMetadata = await extractor.fetch_fallback(url)
        except SocialSaveError as fallback_ex:
            raise ExternalToolFailure(
                f"Failed to process {platform.value} video. The video might be private or unavailable."
            ) from fallback_ex
        return ResolveResponse(
            platform=platform,
            title=fallback.title,
            author=UNKNOWN,
            duration=format_duration(fallback.duration_seconds),
            thumbnail="",
            downloadUrl=fallback.direct_url or url,
            filesize=format_file_size(None),
            quality="Standard",
        )

    return ResolveResponse(
        platform=platform,
        title=metadata.title,
        author=metadata.uploader,
        duration=format_duration(metadata.duration_seconds),
        thumbnail=metadata.thumbnail_url or "",
        downloadUrl=str(best.url),
        filesize=format_file_size(best.filesize),
        quality=f"{best.height}p" if best.height else "Standard",
    )


@router.get("/direct-download")
async def get_direct_download(
    url: Optional[str] = None,
    extractor: MetadataExtractor = Depends(get_extractor),
) -> RedirectResponse:
    """Redirect the client to the best muxed media URL."""

    target: str = require_valid_url(url)
    direct: str = await extractor.resolve_direct_url(target)
    return RedirectResponse(direct)


@router.get("/health", response_model=HealthResponse)
async def get_health() -> HealthResponse:
    """Liveness probe; performs no external calls."""

    return HealthResponse(
        status="OK",
        message="SocialSave Download Server is running",
        timestamp=datetime.now(timezone.utc).isoformat(),
        ytdlpVersion=ytdlp_version,
        platforms=[p.display_name for p in KNOWN_PLATFORMS],
    )
