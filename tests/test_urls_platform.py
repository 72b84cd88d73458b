"""Unit tests for URL validation and platform detection."""
from __future__ import annotations

import unittest

from socialsave.core.errors import InvalidInput
from socialsave.domain.platform import KNOWN_PLATFORMS, Platform, detect_platform
from socialsave.domain.urls import is_valid_url, require_valid_url


class TestUrlValidation(unittest.TestCase):
    """Tests for is_valid_url and require_valid_url."""

    def test_rejects_non_urls(self) -> None:
        """Strings without scheme and host are rejected."""
        for value in ["", "   ", "notaurl", "youtube.com/watch?v=1", "/relative/path", "http://", "https:///x"]:
            with self.subTest(value=value):
                self.assertFalse(is_valid_url(value))

    def test_rejects_non_strings(self) -> None:
        """None and other types are rejected rather than raising."""
        for value in [None, 123, ["https://youtu.be/x"], {"url": "https://youtu.be/x"}]:
            with self.subTest(value=value):
                self.assertFalse(is_valid_url(value))

    def test_rejects_unsupported_scheme(self) -> None:
        """Only http(s) URLs are passed to the extraction tool."""
        self.assertFalse(is_valid_url("ftp://example.com/file.mp4"))
        self.assertFalse(is_valid_url("file:///etc/passwd"))
        self.assertFalse(is_valid_url("javascript:alert(1)"))

    def test_rejects_embedded_whitespace(self) -> None:
        """A URL with spaces or newlines inside is not a single URL."""
        self.assertFalse(is_valid_url("https://youtu.be/abc def"))
        self.assertFalse(is_valid_url("https://youtu.be/abc\n--exec"))

    def test_accepts_urls_with_scheme_and_host(self) -> None:
        """Absolute http(s) URLs are accepted, including ports and queries."""
        for value in [
            "https://www.youtube.com/watch?v=l0X3dJiVx1M",
            "http://example.com",
            "HTTPS://VM.TIKTOK.COM/ZM123/",
            "https://localhost:8080/video?id=1&x=2",
            "  https://youtu.be/abc  ",
        ]:
            with self.subTest(value=value):
                self.assertTrue(is_valid_url(value))

    def test_require_valid_url_strips_and_raises(self) -> None:
        """require_valid_url returns the stripped URL or raises InvalidInput."""
        self.assertEqual(require_valid_url(" https://youtu.be/abc "), "https://youtu.be/abc")
        with self.assertRaises(InvalidInput) as ctx:
            require_valid_url(None)
        self.assertEqual(ctx.exception.status_code, 400)


class TestPlatformDetection(unittest.TestCase):
    """Tests for detect_platform."""

    def test_known_domains(self) -> None:
        """Each table domain maps to its platform, subdomains included."""
        cases: dict[str, Platform] = {
            "https://www.youtube.com/watch?v=1": Platform.YOUTUBE,
            "https://m.youtube.com/shorts/1": Platform.YOUTUBE,
            "https://youtu.be/abc": Platform.YOUTUBE,
            "https://www.instagram.com/reel/abc/": Platform.INSTAGRAM,
            "https://www.facebook.com/watch/?v=1": Platform.FACEBOOK,
            "https://twitter.com/user/status/1": Platform.TWITTER,
            "https://x.com/user/status/1": Platform.TWITTER,
            "https://www.tiktok.com/@u/video/1": Platform.TIKTOK,
            "https://www.linkedin.com/posts/abc": Platform.LINKEDIN,
            "https://www.pinterest.com/pin/1/": Platform.PINTEREST,
            "https://www.snapchat.com/spotlight/abc": Platform.SNAPCHAT,
        }
        for url, expected in cases.items():
            with self.subTest(url=url):
                self.assertEqual(detect_platform(url), expected)

    def test_case_insensitive(self) -> None:
        """Domain matching ignores case."""
        self.assertEqual(detect_platform("https://WWW.YOUTUBE.COM/watch?v=1"), Platform.YOUTUBE)

    def test_unknown(self) -> None:
        """URLs with no table domain are unknown."""
        self.assertEqual(detect_platform("https://vimeo.com/12345"), Platform.UNKNOWN)
        self.assertEqual(detect_platform("https://example.org/video.mp4"), Platform.UNKNOWN)

    def test_first_match_in_table_order_wins(self) -> None:
        """When several domains appear, the earlier table entry decides."""
        url: str = "https://www.tiktok.com/share?ref=https://www.youtube.com/watch?v=1"
        self.assertEqual(detect_platform(url), Platform.YOUTUBE)
        url2: str = "https://www.pinterest.com/pin/1/?via=instagram.com"
        self.assertEqual(detect_platform(url2), Platform.INSTAGRAM)

    def test_known_platforms_excludes_unknown(self) -> None:
        """KNOWN_PLATFORMS lists every platform except UNKNOWN."""
        self.assertNotIn(Platform.UNKNOWN, KNOWN_PLATFORMS)
        self.assertEqual(len(KNOWN_PLATFORMS), len(Platform) - 1)

    def test_display_names(self) -> None:
        """Display names use the platforms' own capitalisation."""
        self.assertEqual(Platform.YOUTUBE.display_name, "YouTube")
        self.assertEqual(Platform.TIKTOK.display_name, "TikTok")
        self.assertEqual(Platform.INSTAGRAM.display_name, "Instagram")
        self.assertEqual(Platform.UNKNOWN.display_name, "Unknown")
