from __future__ import annotations

import io
from typing import Protocol

from PIL import Image

from .models import RawFrame

DEFAULT_JPEG_QUALITY = 92


class FrameEncoder(Protocol):
    """Protocol implemented by still-image encoders."""

    mime_type: str

    def encode(self, frame: RawFrame) -> bytes:
        ...


class JpegFrameEncoder:
    """Compress RGB24 frames to JPEG with Pillow."""

    mime_type = "image/jpeg"

    def __init__(self, quality: int = DEFAULT_JPEG_QUALITY) -> None:
        if not 1 <= quality <= 95:
            raise ValueError("jpeg quality must be between 1 and 95")
        self._quality = quality

    @property
    def quality(self) -> int:
        return self._quality

    def encode(self, frame: RawFrame) -> bytes:
        if len(frame.pixels) != frame.expected_size:
            raise ValueError(
                f"frame buffer holds {len(frame.pixels)} bytes, "
                f"expected {frame.expected_size} for {frame.width}x{frame.height} rgb24"
            )
        image = Image.frombytes("RGB", (frame.width, frame.height), frame.pixels)
        buffer = io.BytesIO()
        image.save(buffer, format="JPEG", quality=self._quality)
        return buffer.getvalue()
