from __future__ import annotations

"""
Coach/learner technique comparison.

Key frames are pulled from both videos concurrently, each through its own decode
session, then sent to the analysis client. The blocking HTTP call runs in a worker
thread so the event loop stays free for other sampling calls.
"""

import asyncio
from pathlib import Path
from typing import Protocol, Sequence

from loguru import logger

from courtside.ingestion import EncodedFrame, FrameSampler, frames_to_base64

from .models import VideoComparisonResult


class ComparisonClient(Protocol):
    """Anything that can compare coach and learner frames."""

    def compare_videos(
        self,
        coach_frames: Sequence[str],
        coach_timestamps: Sequence[float],
        learner_frames: Sequence[str],
        learner_timestamps: Sequence[float],
    ) -> VideoComparisonResult:
        ...


class TechniqueComparisonService:
    """Compare a learner submission against the coach's reference video."""

    def __init__(self, client: ComparisonClient, *, sampler: FrameSampler | None = None) -> None:
        self._client = client
        self._sampler = sampler or FrameSampler()

    async def compare(self, coach_video: Path | str, learner_video: Path | str) -> VideoComparisonResult:
        coach_frames, learner_frames = await self._extract_both(coach_video, learner_video)
        logger.info(
            "Comparing {} coach frame(s) with {} learner frame(s)",
            len(coach_frames),
            len(learner_frames),
        )
        return await asyncio.to_thread(
            self._client.compare_videos,
            frames_to_base64(coach_frames),
            _positions(coach_frames),
            frames_to_base64(learner_frames),
            _positions(learner_frames),
        )

    async def _extract_both(
        self, coach_video: Path | str, learner_video: Path | str
    ) -> tuple[list[EncodedFrame], list[EncodedFrame]]:
        coach = asyncio.ensure_future(self._sampler.extract_key_frames(coach_video))
        learner = asyncio.ensure_future(self._sampler.extract_key_frames(learner_video))
        try:
            await asyncio.wait({coach, learner}, return_when=asyncio.FIRST_EXCEPTION)
        finally:
            pending = [task for task in (coach, learner) if not task.done()]
            for task in pending:
                task.cancel()
            if pending:
                # Let the cancelled extraction release its decode session.
                await asyncio.gather(*pending, return_exceptions=True)
        for task in (coach, learner):
            if not task.cancelled() and task.exception() is not None:
                raise task.exception()  # type: ignore[misc]
        return coach.result(), learner.result()

    def compare_sync(self, coach_video: Path | str, learner_video: Path | str) -> VideoComparisonResult:
        return asyncio.run(self.compare(coach_video, learner_video))


def _positions(frames: Sequence[EncodedFrame]) -> list[float]:
    return [round(frame.position, 2) for frame in frames]
