"""Tests for the JSON log formatter."""
from __future__ import annotations

import json
import logging
import unittest
from pathlib import Path
from typing import Any

from socialsave.core.logging_cfg import JsonFormatter


def _record(**extra: Any) -> logging.LogRecord:
    record = logging.LogRecord("socialsave.test", logging.INFO, __file__, 10, "Download %s", ("done",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonFormatter(unittest.TestCase):
    """Context fields attached with ``extra=`` are lifted into the payload."""

    def test_context_fields(self) -> None:
        line: str = JsonFormatter().format(
            _record(
                url="https://youtu.be/abc",
                file_id="0123456789abcdef",
                path=Path("/data/0123_clip.mp4"),
                argv=["yt-dlp", "--", "https://youtu.be/abc"],
                returncode=1,
            )
        )
        payload: dict[str, Any] = json.loads(line)
        self.assertEqual(payload["message"], "Download done")
        self.assertEqual(payload["level"], "INFO")
        self.assertEqual(payload["url"], "https://youtu.be/abc")
        self.assertEqual(payload["file_id"], "0123456789abcdef")
        self.assertEqual(payload["path"], "/data/0123_clip.mp4")
        self.assertEqual(payload["argv"], ["yt-dlp", "--", "https://youtu.be/abc"])
        self.assertEqual(payload["returncode"], 1)

    def test_absent_context_is_omitted(self) -> None:
        payload: dict[str, Any] = json.loads(JsonFormatter().format(_record()))
        for key in ("url", "platform", "file_id", "path", "argv", "returncode"):
            self.assertNotIn(key, payload)


if __name__ == "__main__":
    unittest.main()
