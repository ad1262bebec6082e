from __future__ import annotations

"""
Sequential frame sampling over a single decode session.

Each sampling call owns exactly one decode session: it opens the resource, seeks
to every requested timestamp in order, captures and encodes the frame there, and
releases the session on every exit path. Either the full ordered list of frames is
returned or an error is raised; partial results are never handed out.
"""

import asyncio
import math
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Iterable, Optional, Sequence

from loguru import logger

from .decoder import DecodeBackend, DecodeSession
from .encoder import FrameEncoder, JpegFrameEncoder
from .errors import DecodeError, FrameExtractionError, MediaLoadError, SamplingCancelled, SeekError
from .models import EncodedFrame, RawFrame

DEFAULT_KEY_FRAME_CANDIDATES = (1.0, 2.0, 3.0, 4.0, 5.0)
DEFAULT_KEY_FRAME_FALLBACKS = (0.7, 1.5, 2.5)
DEFAULT_KEY_FRAME_LIMIT = 3


class CancellationToken:
    """Cooperative cancellation signal for a sampling call. Use from the loop thread."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    async def wait(self) -> None:
        await self._event.wait()


def _normalise_timestamps(timestamps: Iterable[float]) -> list[float]:
    values: list[float] = []
    for value in timestamps:
        number = float(value)
        if math.isnan(number):
            raise ValueError("timestamps must be numbers, got NaN")
        values.append(number)
    return values


class FrameSampler:
    """Capture encoded still frames from a video at given timestamps."""

    def __init__(
        self,
        backend: DecodeBackend | None = None,
        encoder: FrameEncoder | None = None,
        *,
        seek_timeout: float | None = None,
    ) -> None:
        if seek_timeout is not None and seek_timeout <= 0:
            raise ValueError("seek_timeout must be positive")
        self._backend = backend
        self._encoder = encoder or JpegFrameEncoder()
        self._seek_timeout = seek_timeout

    @property
    def backend(self) -> DecodeBackend:
        if self._backend is None:
            from .ffmpeg_backend import FFmpegDecodeBackend

            self._backend = FFmpegDecodeBackend()
        return self._backend

    @property
    def encoder(self) -> FrameEncoder:
        return self._encoder

    @asynccontextmanager
    async def open_session(self, resource: Path | str) -> AsyncIterator[DecodeSession]:
        """Open a decode session for ``resource`` and guarantee its release."""
        try:
            session = await self.backend.open(resource)
        except MediaLoadError:
            raise
        except (DecodeError, OSError, ValueError) as exc:
            raise MediaLoadError(resource, str(exc)) from exc

        try:
            yield session
        finally:
            try:
                await session.close()
            except Exception as exc:  # noqa: BLE001
                logger.warning("Failed to release decode session for {}: {}", resource, exc)

    async def sample(
        self,
        resource: Path | str,
        timestamps: Iterable[float],
        *,
        cancel_token: Optional[CancellationToken] = None,
    ) -> list[EncodedFrame]:
        """
        Capture one encoded frame per timestamp, preserving input order.

        Timestamps are clamped to ``[0, duration]`` before seeking. Raises
        ``MediaLoadError`` if the resource cannot be opened, ``SeekError`` for the
        first timestamp whose seek fails, and ``SamplingCancelled`` when the token
        fires before all timestamps are processed.
        """
        requested = _normalise_timestamps(timestamps)
        total = len(requested)
        if cancel_token is not None and cancel_token.cancelled:
            raise SamplingCancelled(0, total)

        frames: list[EncodedFrame] = []
        async with self.open_session(resource) as session:
            for timestamp in requested:
                if cancel_token is not None and cancel_token.cancelled:
                    raise SamplingCancelled(len(frames), total)

                position = session.info.clamp(timestamp)
                if position != timestamp:
                    logger.debug("Clamped timestamp {}s to {}s for {}", timestamp, position, resource)

                raw = await self._capture(
                    session,
                    timestamp,
                    position,
                    cancel_token,
                    completed=len(frames),
                    total=total,
                )
                frames.append(self._encode(raw, timestamp, position))

        logger.info("Sampled {} frame(s) from {}", len(frames), resource)
        return frames

    async def extract_key_frames(
        self,
        resource: Path | str,
        *,
        candidates: Sequence[float] = DEFAULT_KEY_FRAME_CANDIDATES,
        fallbacks: Sequence[float] = DEFAULT_KEY_FRAME_FALLBACKS,
        limit: int = DEFAULT_KEY_FRAME_LIMIT,
    ) -> list[EncodedFrame]:
        """
        Best-effort key frame extraction for clips of unknown length.

        Candidate timestamps are tried first, then fallbacks, until ``limit`` frames
        are captured. Timestamps beyond the clip and failed seeks are skipped. The
        result is ordered by position.
        """
        if limit <= 0:
            raise ValueError("limit must be positive")

        frames: list[EncodedFrame] = []
        async with self.open_session(resource) as session:
            duration = session.info.duration
            tried: set[float] = set()
            for timestamp in _normalise_timestamps([*candidates, *fallbacks]):
                if len(frames) >= limit:
                    break
                if timestamp in tried or timestamp < 0 or timestamp > duration:
                    continue
                tried.add(timestamp)
                try:
                    raw = await self._seek_and_read(session, timestamp, timestamp)
                except SeekError as exc:
                    logger.warning("Skipping key frame at {}s of {}: {}", timestamp, resource, exc)
                    continue
                frames.append(self._encode(raw, timestamp, timestamp))

        if not frames:
            raise FrameExtractionError(f"could not extract any frame from {resource}")
        return sorted(frames, key=lambda frame: frame.position)

    def _encode(self, raw: RawFrame, timestamp: float, position: float) -> EncodedFrame:
        return EncodedFrame(
            requested_at=timestamp,
            position=position,
            data=self._encoder.encode(raw),
            mime_type=self._encoder.mime_type,
        )

    async def _capture(
        self,
        session: DecodeSession,
        timestamp: float,
        position: float,
        cancel_token: Optional[CancellationToken],
        *,
        completed: int,
        total: int,
    ) -> RawFrame:
        if cancel_token is None:
            return await self._seek_and_read(session, timestamp, position)

        capture = asyncio.ensure_future(self._seek_and_read(session, timestamp, position))
        waiter = asyncio.ensure_future(cancel_token.wait())
        try:
            done, _ = await asyncio.wait({capture, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (capture, waiter):
                if not task.done():
                    task.cancel()
            await asyncio.gather(capture, waiter, return_exceptions=True)

        if capture in done:
            return capture.result()
        logger.info("Frame sampling cancelled at {}s ({}/{} captured)", timestamp, completed, total)
        raise SamplingCancelled(completed, total)

    async def _seek_and_read(self, session: DecodeSession, timestamp: float, position: float) -> RawFrame:
        try:
            await asyncio.wait_for(session.seek(position), timeout=self._seek_timeout)
            return await session.read_frame()
        except asyncio.TimeoutError as exc:
            raise SeekError(timestamp, f"seek did not settle within {self._seek_timeout}s") from exc
        except DecodeError as exc:
            raise SeekError(timestamp, str(exc)) from exc


async def sample_frames(
    resource: Path | str,
    timestamps: Iterable[float],
    *,
    backend: DecodeBackend | None = None,
    encoder: FrameEncoder | None = None,
    cancel_token: Optional[CancellationToken] = None,
    seek_timeout: float | None = None,
) -> list[EncodedFrame]:
    """Sample frames with a one-off ``FrameSampler``."""
    sampler = FrameSampler(backend=backend, encoder=encoder, seek_timeout=seek_timeout)
    return await sampler.sample(resource, timestamps, cancel_token=cancel_token)


def sample_frames_sync(
    resource: Path | str,
    timestamps: Iterable[float],
    **kwargs,
) -> list[EncodedFrame]:
    """Blocking wrapper around ``sample_frames`` for synchronous callers."""
    return asyncio.run(sample_frames(resource, timestamps, **kwargs))
