"""Error taxonomy shared by services and HTTP handlers.

Every failure the service can report to a client is a ``SocialSaveError``
subclass carrying the HTTP status it maps to and a human-readable message.
The API layer converts them into ``{"success": false, "error": ...}`` bodies.
"""
from __future__ import annotations

from typing import Optional


class SocialSaveError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code: int = 500
    default_message: str = "Something went wrong. Please try again."

    def __init__(self, message: Optional[str] = None) -> None:
        self.message: str = message or self.default_message
        super().__init__(self.message)


class InvalidInput(SocialSaveError):
    """Malformed or missing request input; the external tool is never invoked."""

    status_code = 400
    default_message = "Valid video URL is required"


class PlatformMismatch(InvalidInput):
    """A platform-specific endpoint received a URL for another known platform."""

    def __init__(self, expected: str, detected: str) -> None:
        super().__init__(
            f"This endpoint is for {expected} videos, but you provided a {detected} URL"
        )
        self.expected: str = expected
        self.detected: str = detected


class ExternalToolTimeout(SocialSaveError):
    """The extraction tool exceeded its time budget and was killed."""

    default_message = "The request timed out. Please try again."

    def __init__(self, timeout: float, message: Optional[str] = None) -> None:
        super().__init__(message)
        self.timeout: float = timeout


class ExternalToolFailure(SocialSaveError):
    """The extraction tool failed to run, exited non-zero, or produced unusable output."""

    default_message = "Failed to process video. The video might be private or unavailable."

    def __init__(
        self,
        message: Optional[str] = None,
        returncode: Optional[int] = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.returncode: Optional[int] = returncode
        self.stderr: str = stderr


class ExternalToolOutputTooLarge(ExternalToolFailure):
    """Captured output exceeded the configured bound."""

    default_message = "The extraction tool produced too much output."

    def __init__(self, limit: int) -> None:
        super().__init__(f"{self.default_message} (limit {limit} bytes)")
        self.limit: int = limit


class NoDownloadableFormat(SocialSaveError):
    """Output parsed fine but no format passed the selection filter."""

    status_code = 404
    default_message = "No downloadable format found"


class ArtifactNotFound(SocialSaveError):
    """The tool reported success yet no matching file appeared on disk."""

    default_message = "Downloaded file not found"
