"""Unit tests for filesystem helpers in infra.fs."""
from __future__ import annotations

import os
import tempfile
import time
import unittest
from pathlib import Path

from socialsave.core.errors import ArtifactNotFound
from socialsave.infra.fs import (
    display_filename,
    locate_artifact,
    promote_artifact,
    public_path,
    staging_dir,
)


class TestFS(unittest.TestCase):
    """Tests for artifact location, promotion and naming."""

    def test_staging_dir_created_inside_downloads(self) -> None:
        """The staging directory is a hidden child of the downloads directory."""
        with tempfile.TemporaryDirectory() as td:
            root: Path = Path(td)
            stage: Path = staging_dir(root)
            self.assertTrue(stage.is_dir())
            self.assertEqual(stage.parent, root)
            self.assertTrue(stage.name.startswith("."))
            # Idempotent
            self.assertEqual(staging_dir(root), stage)

    def test_locate_artifact_by_prefix(self) -> None:
        """Only completed files with the exact prefix are considered."""
        with tempfile.TemporaryDirectory() as td:
            root: Path = Path(td)
            (root / "aaaa_other.mp4").write_bytes(b"x")
            (root / "abcd_Clip.mp4.part").write_bytes(b"x")
            (root / "abcdef_Clip.mp4").write_bytes(b"x")
            target: Path = root / "abcd_Clip.mp4"
            target.write_bytes(b"video")
            self.assertEqual(locate_artifact(root, "abcd"), target)

    def test_locate_artifact_missing_raises(self) -> None:
        """No match (or only partial files) raises ArtifactNotFound."""
        with tempfile.TemporaryDirectory() as td:
            root: Path = Path(td)
            with self.assertRaises(ArtifactNotFound):
                locate_artifact(root, "abcd")
            (root / "abcd_Clip.mp4.part").write_bytes(b"x")
            (root / "abcd_Clip.f137.mp4.ytdl").write_bytes(b"x")
            with self.assertRaises(ArtifactNotFound):
                locate_artifact(root, "abcd")

    def test_locate_artifact_prefers_newest(self) -> None:
        """With several matches the most recently modified file wins."""
        with tempfile.TemporaryDirectory() as td:
            root: Path = Path(td)
            old: Path = root / "abcd_Clip.webm"
            new: Path = root / "abcd_Clip.mp4"
            old.write_bytes(b"x")
            new.write_bytes(b"y")
            now: float = time.time()
            os.utime(old, (now - 60, now - 60))
            os.utime(new, (now, now))
            self.assertEqual(locate_artifact(root, "abcd"), new)

    def test_promote_artifact_moves_file(self) -> None:
        """Promotion renames the file into the destination directory."""
        with tempfile.TemporaryDirectory() as td:
            root: Path = Path(td)
            stage: Path = staging_dir(root)
            src: Path = stage / "abcd_Clip.mp4"
            src.write_bytes(b"video")
            final: Path = promote_artifact(src, root)
            self.assertEqual(final, root / "abcd_Clip.mp4")
            self.assertFalse(src.exists())
            self.assertEqual(final.read_bytes(), b"video")

    def test_display_filename_strips_prefix(self) -> None:
        """Only a leading `<id>_` is removed."""
        self.assertEqual(display_filename("abcd_My Clip.mp4", "abcd"), "My Clip.mp4")
        self.assertEqual(display_filename("My abcd_Clip.mp4", "abcd"), "My abcd_Clip.mp4")

    def test_public_path_quotes_filename(self) -> None:
        """Served paths are URL-quoted and joined without duplicate slashes."""
        self.assertEqual(public_path("/downloads", "ab_My Clip#1.mp4"), "/downloads/ab_My%20Clip%231.mp4")
        self.assertEqual(public_path("/downloads/", "a.mp3"), "/downloads/a.mp3")
