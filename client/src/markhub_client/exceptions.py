"""Custom exceptions for locating and starting the preview server."""

from __future__ import annotations


class DiscoveryError(Exception):
    """Base class for failures to obtain a reachable preview server."""


class ServerSpawnError(DiscoveryError):
    """Raised when the server process cannot be launched or exits with an error."""

    def __init__(self, command: list[str], original_error: BaseException) -> None:
        self.command = command
        self.original_error = original_error
        super().__init__(
            f"Could not launch MarkHub server ({' '.join(command)}): {original_error}"
        )


class ServerStartTimeoutError(DiscoveryError):
    """Raised when a started server never becomes reachable."""

    def __init__(self, attempts: int, interval_s: float) -> None:
        self.attempts = attempts
        self.interval_s = interval_s
        super().__init__("MarkHub server failed to start or respond")
