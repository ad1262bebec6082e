from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Protocol

from .errors import DecodeError
from .models import MediaInfo, RawFrame, SessionState


class DecodeSession(ABC):
    """
    Stateful handle to an opened video resource.

    A session exposes a single read position: callers seek, wait for the seek to
    settle, then read the frame at that position. Sessions are not shared between
    concurrent sampling calls, so no locking is done here.
    """

    def __init__(self, info: MediaInfo) -> None:
        self._info = info
        self._state = SessionState.METADATA_LOADED

    @property
    def info(self) -> MediaInfo:
        return self._info

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._state is SessionState.CLOSED

    async def seek(self, position: float) -> None:
        """Move the read position and return once the frame there is readable."""
        self._ensure_open()
        self._state = SessionState.SEEKING
        await self._seek(position)

    async def read_frame(self) -> RawFrame:
        """Read the frame at the settled position."""
        self._ensure_open()
        if self._state is not SessionState.SEEKING:
            raise DecodeError("read_frame called before seek")
        frame = await self._read_frame()
        self._state = SessionState.CAPTURED
        return frame

    async def close(self) -> None:
        """Release the underlying handle. Safe to call more than once."""
        if self._state is SessionState.CLOSED:
            return
        try:
            await self._close()
        finally:
            self._state = SessionState.CLOSED

    def _ensure_open(self) -> None:
        if self._state is SessionState.CLOSED:
            raise DecodeError("decode session is closed")

    @abstractmethod
    async def _seek(self, position: float) -> None:
        raise NotImplementedError

    @abstractmethod
    async def _read_frame(self) -> RawFrame:
        raise NotImplementedError

    async def _close(self) -> None:
        return None


class DecodeBackend(Protocol):
    """Protocol implemented by media-decode capabilities."""

    async def open(self, resource: Path | str) -> DecodeSession:
        ...
