"""Argument vectors for the yt-dlp command line."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

from socialsave.services.parsing import FieldTemplate

AUDIO_FORMAT: str = "mp3"


class YtDlpCommandBuilder:
    """Build yt-dlp commands.

    Notes
    -----
    - The target URL is always the last argument, preceded by ``--`` so it can never be
      read as an option.
    - ``--no-playlist`` keeps single-video semantics for URLs that also reference a list.
    - Downloads pass ``--no-mtime`` so file age reflects when the file was written, which
      is what the retention sweeper measures.
    """

    def __init__(self, binary: str = "yt-dlp") -> None:
        self.binary: str = binary

    def _base(self) -> list[str]:
        return [self.binary, "--no-playlist", "--no-warnings", "--no-progress"]

    def fields(
        self,
        url: str,
        template: FieldTemplate,
        format_selector: Optional[str] = None,
    ) -> list[str]:
        """Print selected fields on one line without downloading.

        Notes
        -----
        - Pass a single-file ``format_selector`` (e.g. ``best``) when the template asks for
          ``url``; merged selections have no top-level media URL.
        """

        cmd: list[str] = [*self._base(), "--skip-download", "--print", template.render()]
        if format_selector:
            cmd.extend(["-f", format_selector])
        cmd.extend(["--", url])
        return cmd

    def record(self, url: str) -> list[str]:
        """Print the full info dictionary as a single JSON document."""

        return [*self._base(), "--dump-single-json", "--", url]

    def download(self, url: str, output_template: Path, format_selector: str) -> list[str]:
        """Download media to ``output_template``."""

        return [
            *self._base(),
            "--quiet",
            "--no-mtime",
            "-f",
            format_selector,
            "-o",
            str(output_template),
            "--",
            url,
        ]

    def download_audio(self, url: str, output_template: Path) -> list[str]:
        """Download the best audio stream and transcode it to ``AUDIO_FORMAT``."""

        return [
            *self._base(),
            "--quiet",
            "--no-mtime",
            "-f",
            "bestaudio",
            "--extract-audio",
            "--audio-format",
            AUDIO_FORMAT,
            "-o",
            str(output_template),
            "--",
            url,
        ]
