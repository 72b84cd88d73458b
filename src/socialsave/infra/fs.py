"""Filesystem helpers for locating, publishing and naming downloaded artifacts."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from urllib.parse import quote

from socialsave.core.errors import ArtifactNotFound

logger = logging.getLogger(__name__)

STAGING_DIR_NAME: str = ".staging"

# Suffixes yt-dlp uses for in-progress or intermediate files
INCOMPLETE_SUFFIXES: tuple[str, ...] = (".part", ".ytdl", ".temp", ".tmp")


def staging_dir(downloads_dir: Path) -> Path:
    """Return the staging directory for ``downloads_dir``, creating it if needed.

    Notes
    -----
    - Lives inside the downloads directory so the final ``os.replace`` stays on one
      filesystem and is atomic.
    - Dot-prefixed so it is never listed as a public artifact.
    """

    path: Path = downloads_dir / STAGING_DIR_NAME
    path.mkdir(parents=True, exist_ok=True)
    return path


def locate_artifact(directory: Path, file_id: str) -> Path:
    """Find the completed file whose name starts with ``<file_id>_``.

    Parameters
    ----------
    directory: Path
        Directory the external tool wrote into.
    file_id: str
        Random identifier embedded as the filename prefix.

    Returns
    -------
    Path
        The matching file. When several match, the most recently modified one.

    Raises
    ------
    ArtifactNotFound
        If no completed file with the prefix exists.
    """

    prefix: str = f"{file_id}_"
    matches: list[Path] = [
        p
        for p in directory.glob(f"{file_id}_*")
        if p.is_file() and p.name.startswith(prefix) and not p.name.endswith(INCOMPLETE_SUFFIXES)
    ]
    if not matches:
        raise ArtifactNotFound()
    if len(matches) > 1:
        logger.warning(
            "Several files share one download prefix; keeping the newest",
            extra={"file_id": file_id},
        )
        matches.sort(key=lambda p: p.stat().st_mtime, reverse=True)
    return matches[0]


def promote_artifact(source: Path, destination_dir: Path) -> Path:
    """Atomically move a finished file into the public downloads directory."""

    target: Path = destination_dir / source.name
    os.replace(source, target)
    return target


def display_filename(filename: str, file_id: str) -> str:
    """Strip the ``<file_id>_`` prefix used to keep stored names unique."""

    prefix: str = f"{file_id}_"
    return filename[len(prefix):] if filename.startswith(prefix) else filename


def public_path(mount_path: str, filename: str) -> str:
    """Build the URL path under which ``filename`` is served."""

    return f"{mount_path.rstrip('/')}/{quote(filename)}"
