"""Periodic deletion of aged download artifacts."""
from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from typing import Iterator, Optional

from socialsave.infra.fs import STAGING_DIR_NAME

logger = logging.getLogger(__name__)


class RetentionSweeper:
    """Delete files in the downloads directory older than ``max_age_seconds``.

    Notes
    -----
    - Age is measured from the file's last-modified time.
    - Covers the staging directory as well, so output abandoned by killed or crashed
      downloads is eventually removed. Anything still being written has a fresh mtime.
    - A failure to delete one file is logged and the sweep continues.
    """

    def __init__(self, downloads_dir: Path, max_age_seconds: float, interval_seconds: float) -> None:
        self.downloads_dir: Path = downloads_dir
        self.max_age_seconds: float = max_age_seconds
        self.interval_seconds: float = interval_seconds

    def _candidates(self) -> Iterator[Path]:
        for directory in (self.downloads_dir, self.downloads_dir / STAGING_DIR_NAME):
            try:
                entries = list(directory.iterdir())
            except FileNotFoundError:
                continue
            for entry in entries:
                if entry.is_file():
                    yield entry

    def sweep_once(self, now: Optional[float] = None) -> list[Path]:
        """Run one pass and return the deleted paths.

        Parameters
        ----------
        now: Optional[float]
            Reference epoch time; defaults to ``time.time()``.
        """

        reference: float = time.time() if now is None else now
        deleted: list[Path] = []
        for path in self._candidates():
            try:
                age: float = reference - path.stat().st_mtime
                if age <= self.max_age_seconds:
                    continue
                path.unlink()
            except FileNotFoundError:
                # Removed concurrently; nothing left to do
                continue
            except OSError:
                logger.exception("Failed to delete old file", extra={"path": path})
                continue
            deleted.append(path)
            logger.info("Deleted old file", extra={"path": path})
        return deleted

    async def run_forever(self) -> None:
        """Sweep every ``interval_seconds`` until cancelled."""

        while True:
            await asyncio.sleep(self.interval_seconds)
            logger.info("Cleaning up old files")
            try:
                await asyncio.to_thread(self.sweep_once)
            except Exception:  # noqa: BLE001 - keep the schedule alive
                logger.exception("Retention sweep failed")
