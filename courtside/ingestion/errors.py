from __future__ import annotations


class MediaLoadError(RuntimeError):
    """Raised when a video resource cannot be opened or its metadata read."""

    def __init__(self, resource: object, reason: str | None = None) -> None:
        message = f"failed to load video: {resource}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.resource = resource
        self.reason = reason


class SeekError(RuntimeError):
    """Raised when seeking to (or reading at) a timestamp does not settle."""

    def __init__(self, timestamp: float, reason: str | None = None) -> None:
        message = f"error seeking to time {timestamp}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.timestamp = timestamp
        self.reason = reason


class SamplingCancelled(RuntimeError):
    """Raised when a sampling call is cancelled through its token."""

    def __init__(self, completed: int, total: int) -> None:
        super().__init__(f"frame sampling cancelled after {completed}/{total} timestamps")
        self.completed = completed
        self.total = total


class FrameExtractionError(RuntimeError):
    """Raised when no key frame could be extracted from a video."""


class DecodeError(RuntimeError):
    """Backend-level decode failure; translated by the sampler."""
