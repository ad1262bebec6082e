from __future__ import annotations

import asyncio
import json
import shutil
from pathlib import Path
from typing import Any, Sequence

from loguru import logger
from pydantic import ValidationError

from .decoder import DecodeSession
from .errors import DecodeError, MediaLoadError
from .models import MediaInfo, RawFrame

# Pull-back applied to seeks at the very end when the frame rate is unknown.
DEFAULT_END_MARGIN = 0.1


def _ensure_executable(path: str | None, /, default: str) -> str:
    if path:
        return path
    resolved = shutil.which(default)
    if not resolved:
        raise FileNotFoundError(f"{default} executable not found in PATH")
    return resolved


async def _run(args: Sequence[str]) -> tuple[int, bytes, bytes]:
    logger.debug("Running command: {}", " ".join(args))
    process = await asyncio.create_subprocess_exec(
        *args,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        stdout, stderr = await process.communicate()
    except BaseException:
        if process.returncode is None:
            process.kill()
            await process.wait()
        raise
    return process.returncode or 0, stdout, stderr


def _parse_frame_rate(value: Any) -> float | None:
    if not value or not isinstance(value, str):
        return None
    numerator, _, denominator = value.partition("/")
    try:
        num = float(numerator)
        den = float(denominator) if denominator else 1.0
    except ValueError:
        return None
    if num <= 0 or den <= 0:
        return None
    return num / den


def parse_probe_output(payload: dict[str, Any]) -> MediaInfo:
    """Build MediaInfo from ``ffprobe -of json`` output."""
    streams = payload.get("streams") or []
    if not streams:
        raise ValueError("no video stream found")
    stream = streams[0]
    duration = (payload.get("format") or {}).get("duration") or stream.get("duration")
    if duration is None:
        raise ValueError("duration not reported")
    return MediaInfo(
        duration=float(duration),
        width=stream.get("width") or 0,
        height=stream.get("height") or 0,
        frame_rate=_parse_frame_rate(stream.get("avg_frame_rate")),
    )


class FFmpegDecodeSession(DecodeSession):
    """
    Decode session backed by one ffmpeg invocation per seek.

    ffmpeg has no long-lived read position, so a seek settles once the frame at the
    requested position has been decoded into memory; ``read_frame`` then hands that
    buffer out.
    """

    def __init__(self, path: Path, info: MediaInfo, *, ffmpeg: str) -> None:
        super().__init__(info)
        self._path = path
        self._ffmpeg = ffmpeg
        self._pixels: bytes | None = None

    @property
    def path(self) -> Path:
        return self._path

    def _target_position(self, position: float) -> float:
        margin = self.info.frame_interval or DEFAULT_END_MARGIN
        last_frame = max(self.info.duration - margin, 0.0)
        return min(position, last_frame)

    async def _seek(self, position: float) -> None:
        self._pixels = None
        target = self._target_position(position)
        command = [
            self._ffmpeg,
            "-hide_banner",
            "-loglevel",
            "error",
            "-noautorotate",
            "-ss",
            f"{target:.3f}",
            "-i",
            str(self._path),
            "-frames:v",
            "1",
            "-f",
            "rawvideo",
            "-pix_fmt",
            "rgb24",
            "-",
        ]
        returncode, stdout, stderr = await _run(command)
        if returncode != 0:
            message = stderr.decode("utf-8", errors="replace").strip()
            raise DecodeError(f"ffmpeg exited with {returncode}: {message}")
        if not stdout:
            raise DecodeError(f"ffmpeg decoded no frame at {target:.3f}s")
        self._pixels = stdout

    async def _read_frame(self) -> RawFrame:
        if self._pixels is None:
            raise DecodeError("no decoded frame available")
        frame = RawFrame(width=self.info.width, height=self.info.height, pixels=self._pixels)
        if len(frame.pixels) < frame.expected_size:
            raise DecodeError(
                f"truncated frame: got {len(frame.pixels)} bytes, expected {frame.expected_size}"
            )
        if len(frame.pixels) > frame.expected_size:
            frame = RawFrame(
                width=frame.width,
                height=frame.height,
                pixels=frame.pixels[: frame.expected_size],
            )
        return frame

    async def _close(self) -> None:
        self._pixels = None


class FFmpegDecodeBackend:
    """Decode backend built on the ffprobe and ffmpeg executables."""

    def __init__(
        self,
        ffmpeg_executable: str | None = None,
        ffprobe_executable: str | None = None,
    ) -> None:
        self._ffmpeg = _ensure_executable(ffmpeg_executable, "ffmpeg")
        self._ffprobe = _ensure_executable(ffprobe_executable, "ffprobe")

    async def probe(self, path: Path) -> MediaInfo:
        command = [
            self._ffprobe,
            "-v",
            "error",
            "-select_streams",
            "v:0",
            "-show_entries",
            "stream=width,height,avg_frame_rate,duration:format=duration",
            "-of",
            "json",
            str(path),
        ]
        returncode, stdout, stderr = await _run(command)
        if returncode != 0:
            message = stderr.decode("utf-8", errors="replace").strip()
            raise MediaLoadError(path, f"ffprobe exited with {returncode}: {message}")
        try:
            return parse_probe_output(json.loads(stdout or b"{}"))
        except (json.JSONDecodeError, ValueError, ValidationError) as exc:
            raise MediaLoadError(path, str(exc)) from exc

    async def open(self, resource: Path | str) -> FFmpegDecodeSession:
        path = Path(resource).expanduser().resolve()
        if not path.is_file():
            raise MediaLoadError(path, "file not found")
        info = await self.probe(path)
        logger.debug(
            "Opened {} ({}x{}, {:.3f}s)", path.name, info.width, info.height, info.duration
        )
        return FFmpegDecodeSession(path, info, ffmpeg=self._ffmpeg)
