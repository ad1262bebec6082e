from __future__ import annotations

import base64
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class SessionState(str, Enum):
    """Lifecycle states of a decode session."""

    UNOPENED = "unopened"
    METADATA_LOADED = "metadata_loaded"
    SEEKING = "seeking"
    CAPTURED = "captured"
    CLOSED = "closed"


class MediaInfo(BaseModel):
    """Intrinsic properties of an opened video resource."""

    duration: float = Field(ge=0, description="Media duration in seconds.")
    width: int = Field(gt=0, description="Frame width in pixels.")
    height: int = Field(gt=0, description="Frame height in pixels.")
    frame_rate: Optional[float] = Field(default=None, gt=0, description="Average frames per second.")

    def clamp(self, timestamp: float) -> float:
        """Clamp a timestamp to the playable range ``[0, duration]``."""
        return min(max(timestamp, 0.0), self.duration)

    @property
    def frame_interval(self) -> float:
        if not self.frame_rate:
            return 0.0
        return 1.0 / self.frame_rate


@dataclass(frozen=True)
class RawFrame:
    """Packed RGB24 pixels read from the current session position."""

    width: int
    height: int
    pixels: bytes

    @property
    def expected_size(self) -> int:
        return self.width * self.height * 3


@dataclass(frozen=True)
class EncodedFrame:
    """A compressed still image captured at a requested timestamp."""

    requested_at: float
    position: float
    data: bytes
    mime_type: str = "image/jpeg"

    def as_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    def as_data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.as_base64()}"


def frames_to_base64(frames: list[EncodedFrame]) -> list[str]:
    """Transport-encode frames for embedding in JSON requests."""
    return [frame.as_base64() for frame in frames]
