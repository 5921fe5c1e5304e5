"""Custom exceptions for the MarkHub preview server."""

from __future__ import annotations


class MarkhubError(Exception):
    """Base class for preview server errors."""


class RenderError(MarkhubError):
    """Raised when Markdown cannot be converted to HTML."""


class RemoteFetchError(MarkhubError):
    """Raised when a remote Markdown document cannot be fetched."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(reason)


class NotMarkdownError(RemoteFetchError):
    """Raised when a URL serves an HTML page instead of raw Markdown."""

    def __init__(self, url: str) -> None:
        super().__init__(
            url,
            "The URL returned HTML instead of Markdown. "
            "Make sure it is a raw link or a public Gist.",
        )
