from __future__ import annotations

from courtside.analysis import GeminiClient, TechniqueComparisonService
from courtside.config import AppConfig, load_config
from courtside.ingestion import FrameSampler, JpegFrameEncoder
from courtside.ingestion.decoder import DecodeBackend


def build_sampler(config: AppConfig | None = None) -> FrameSampler:
    """
    Construct a frame sampler based on the loaded configuration.

    The ffmpeg backend is resolved lazily by the sampler unless explicit
    executables are configured.
    """

    config = config or load_config()
    backend: DecodeBackend | None = None
    if config.sampler.ffmpeg_executable or config.sampler.ffprobe_executable:
        from courtside.ingestion.ffmpeg_backend import FFmpegDecodeBackend

        backend = FFmpegDecodeBackend(
            ffmpeg_executable=config.sampler.ffmpeg_executable,
            ffprobe_executable=config.sampler.ffprobe_executable,
        )
    return FrameSampler(
        backend=backend,
        encoder=JpegFrameEncoder(quality=config.sampler.jpeg_quality),
        seek_timeout=config.sampler.seek_timeout_seconds,
    )


def build_comparison_service(config: AppConfig | None = None) -> TechniqueComparisonService:
    config = config or load_config()
    try:
        client = GeminiClient(config.gemini)
    except ValueError as exc:
        raise RuntimeError("Gemini is not configured; set COURTSIDE_GEMINI_API_KEY") from exc
    return TechniqueComparisonService(client, sampler=build_sampler(config))
