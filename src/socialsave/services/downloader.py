"""Download orchestration: run yt-dlp into a staging area and publish the result."""
from __future__ import annotations

import logging
import secrets
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from socialsave.core.config import Settings
from socialsave.domain.media import DownloadedArtifact
from socialsave.infra.fs import (
    display_filename,
    locate_artifact,
    promote_artifact,
    public_path,
    staging_dir,
)
from socialsave.infra.process import ToolInvoker
from socialsave.services.ytdlp import YtDlpCommandBuilder

logger = logging.getLogger(__name__)

FILE_ID_BYTES: int = 8


def new_file_id() -> str:
    """Return a random hex identifier used as the stored filename prefix."""

    return secrets.token_hex(FILE_ID_BYTES)


def _output_template(directory: Path, file_id: str) -> Path:
    """yt-dlp output template embedding ``file_id`` as the filename prefix."""

    return directory / f"{file_id}_%(title)s.%(ext)s"


class DownloadOrchestrator:
    """Materialize media files in the downloads directory.

    Notes
    -----
    - yt-dlp writes into ``<downloads>/.staging``; only after it exits successfully is
      the file located by its random prefix and renamed into ``<downloads>``. The
      retention sweeper therefore never sees a partially written public file.
    - The tool's exit status is not trusted on its own: success without a file on disk
      raises ``ArtifactNotFound``.
    - Client disconnects are not observed; the child runs until it finishes or times out.
    """

    def __init__(self, downloads_dir: Path, invoker: ToolInvoker, settings: Settings) -> None:
        self.downloads_dir: Path = downloads_dir
        self.invoker: ToolInvoker = invoker
        self.settings: Settings = settings
        self.commands: YtDlpCommandBuilder = YtDlpCommandBuilder(settings.ytdlp_binary)

    async def _materialize(self, url: str, file_id: str, argv: list[str]) -> DownloadedArtifact:
        logger.info("Starting download", extra={"url": url, "file_id": file_id})
        await self.invoker.run(
            argv,
            timeout=self.settings.download_timeout,
            max_output_bytes=self.settings.max_output_bytes,
        )

        staged: Path = locate_artifact(staging_dir(self.downloads_dir), file_id)
        final: Path = promote_artifact(staged, self.downloads_dir)
        size: int = final.stat().st_size
        artifact = DownloadedArtifact(
            file_id=file_id,
            display_filename=display_filename(final.name, file_id),
            size_bytes=size,
            served_path=public_path(self.settings.public_downloads_path, final.name),
            created_at=datetime.now(timezone.utc),
            path=final,
        )
        logger.info("Download completed", extra={"file_id": file_id, "path": final})
        return artifact

    async def download(self, url: str, quality: Optional[str] = None) -> DownloadedArtifact:
        """Download video using ``quality`` (a yt-dlp format selector) or the default.

        Raises
        ------
        ExternalToolTimeout, ExternalToolFailure
            Propagated from the invoker.
        ArtifactNotFound
            If the tool succeeded but no file with the identifier prefix exists.
        """

        file_id: str = new_file_id()
        template: Path = _output_template(staging_dir(self.downloads_dir), file_id)
        selector: str = quality or self.settings.default_quality
        argv: list[str] = self.commands.download(url, template, selector)
        return await self._materialize(url, file_id, argv)

    async def download_audio(self, url: str) -> DownloadedArtifact:
        """Download the best audio stream transcoded to MP3."""

        file_id: str = new_file_id()
        template: Path = _output_template(staging_dir(self.downloads_dir), file_id)
        argv: list[str] = self.commands.download_audio(url, template)
        return await self._materialize(url, file_id, argv)
