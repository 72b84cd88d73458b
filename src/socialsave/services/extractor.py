"""Metadata extraction service backed by the yt-dlp command line."""
from __future__ import annotations

import logging
from typing import Optional

from socialsave.core.config import Settings
from socialsave.domain.media import MediaFormat, VideoMetadata
from socialsave.infra.process import ToolInvoker
from socialsave.services.parsing import (
    FALLBACK_TEMPLATE,
    INFO_TEMPLATE,
    JSON_RECORD,
    OutputShape,
    parse_output,
    select_best_format,
)
from socialsave.services.ytdlp import YtDlpCommandBuilder

logger = logging.getLogger(__name__)


class MetadataExtractor:
    """Fetch video metadata without downloading media.

    Notes
    -----
    - Each method picks one invocation mode and parses with the matching shape.
    - Errors from the invoker and parser propagate; callers decide whether to degrade.
    """

    def __init__(self, invoker: ToolInvoker, settings: Settings) -> None:
        self.invoker: ToolInvoker = invoker
        self.settings: Settings = settings
        self.commands: YtDlpCommandBuilder = YtDlpCommandBuilder(settings.ytdlp_binary)

    async def _run(self, argv: list[str], shape: OutputShape, timeout: float) -> VideoMetadata:
        raw: str = await self.invoker.run(
            argv,
            timeout=timeout,
            max_output_bytes=self.settings.max_output_bytes,
        )
        return parse_output(raw, shape)

    async def fetch_info(self, url: str) -> VideoMetadata:
        """Title, duration, uploader, view count, thumbnail and extension."""

        return await self._run(
            self.commands.fields(url, INFO_TEMPLATE),
            INFO_TEMPLATE,
            self.settings.info_timeout,
        )

    async def fetch_record(self, url: str, timeout: Optional[float] = None) -> VideoMetadata:
        """Full metadata including the list of formats."""

        return await self._run(
            self.commands.record(url),
            JSON_RECORD,
            timeout or self.settings.record_timeout,
        )

    async def fetch_fallback(self, url: str) -> VideoMetadata:
        """Reduced field set with the direct URL of a single-file format."""

        return await self._run(
            self.commands.fields(url, FALLBACK_TEMPLATE, format_selector="best"),
            FALLBACK_TEMPLATE,
            self.settings.fallback_timeout,
        )

    async def resolve_best_format(
        self,
        url: str,
        timeout: Optional[float] = None,
    ) -> tuple[VideoMetadata, MediaFormat]:
        """Fetch the full record and select its best muxed format."""

        metadata: VideoMetadata = await self.fetch_record(url, timeout)
        best: MediaFormat = select_best_format(metadata.formats)
        logger.debug(
            "Selected format %s (%sp)", best.format_id, best.height, extra={"url": url}
        )
        return metadata, best

    async def resolve_direct_url(self, url: str) -> str:
        """Direct media URL of the best muxed format."""

        _, best = await self.resolve_best_format(url, self.settings.direct_url_timeout)
        return str(best.url)
