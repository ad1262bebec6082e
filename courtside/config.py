from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from typing import Any, List, Mapping, Optional

from loguru import logger

from courtside.ingestion.encoder import DEFAULT_JPEG_QUALITY
from courtside.processing.envelope import DEFAULT_MAX_DEPTH

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class GeminiConfig:
    """Configuration required to call the Gemini generateContent API."""

    api_key: str = ""
    model: str = "gemini-1.5-flash"
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    request_timeout: float = 120.0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "GeminiConfig":
        """Create an instance from a mapping loaded out of config."""
        if data is None:
            data = {}
        allowed = {item.name for item in fields(cls)}
        kwargs = {key: data[key] for key in allowed & data.keys()}
        return cls(**kwargs)

    def build_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/models/{self.model}:generateContent"


@dataclass(slots=True)
class SamplerConfig:
    """Runtime configuration for frame sampling."""

    ffmpeg_executable: Optional[str] = None
    ffprobe_executable: Optional[str] = None
    jpeg_quality: int = DEFAULT_JPEG_QUALITY
    seek_timeout_seconds: Optional[float] = 30.0


@dataclass(slots=True)
class UploadLimits:
    """Validation applied to videos uploaded over HTTP."""

    max_size_mb: int = 512
    allowed_types: List[str] = field(
        default_factory=lambda: ["video/mp4", "video/quicktime", "video/x-matroska", "video/webm"]
    )

    @property
    def max_bytes(self) -> int:
        return self.max_size_mb * 1024 * 1024


@dataclass(slots=True)
class AppConfig:
    """Top-level configuration consumed by the CLI and HTTP surfaces."""

    sampler: SamplerConfig = field(default_factory=SamplerConfig)
    gemini: GeminiConfig = field(default_factory=GeminiConfig)
    upload_limits: UploadLimits = field(default_factory=UploadLimits)
    envelope_max_depth: int = DEFAULT_MAX_DEPTH
    log_level: str = "INFO"


def _env_number(name: str, cast, default):
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError:
        logger.warning("Ignoring invalid value for {}: {!r}", name, raw)
        return default


def _parse_sampler(prefix: str = "COURTSIDE_") -> SamplerConfig:
    config = SamplerConfig(
        ffmpeg_executable=os.getenv(f"{prefix}FFMPEG") or None,
        ffprobe_executable=os.getenv(f"{prefix}FFPROBE") or None,
    )
    quality = _env_number(f"{prefix}JPEG_QUALITY", int, config.jpeg_quality)
    if 1 <= quality <= 95:
        config.jpeg_quality = quality
    else:
        logger.warning("{}JPEG_QUALITY must be within 1..95, keeping {}", prefix, config.jpeg_quality)

    timeout = _env_number(f"{prefix}SEEK_TIMEOUT", float, config.seek_timeout_seconds)
    config.seek_timeout_seconds = timeout if timeout and timeout > 0 else None
    return config


def _parse_gemini(prefix: str = "COURTSIDE_GEMINI_") -> GeminiConfig:
    data: dict[str, Any] = {}
    api_key = os.getenv(f"{prefix}API_KEY")
    if api_key:
        data["api_key"] = api_key.strip()
    model = os.getenv(f"{prefix}MODEL")
    if model:
        data["model"] = model.strip()
    base_url = os.getenv(f"{prefix}BASE_URL")
    if base_url:
        data["base_url"] = base_url.strip()
    data["request_timeout"] = _env_number(f"{prefix}TIMEOUT", float, GeminiConfig.request_timeout)
    return GeminiConfig.from_dict(data)


def _parse_upload_limits(prefix: str = "COURTSIDE_UPLOAD_") -> UploadLimits:
    limits = UploadLimits()
    max_size = _env_number(f"{prefix}MAX_SIZE_MB", int, limits.max_size_mb)
    if max_size > 0:
        limits.max_size_mb = max_size
    else:
        logger.warning("{}MAX_SIZE_MB must be positive, keeping {}", prefix, limits.max_size_mb)

    allowed = os.getenv(f"{prefix}ALLOWED_TYPES")
    if allowed:
        values = [entry.strip().lower() for entry in allowed.split(",") if entry.strip()]
        if values:
            limits.allowed_types = values
    return limits


def _parse_log_level(name: str = "COURTSIDE_LOG_LEVEL") -> str:
    level = os.getenv(name, "INFO").strip().upper() or "INFO"
    if level not in LOG_LEVELS:
        logger.warning("Ignoring unknown {}: {!r}", name, level)
        return "INFO"
    return level


def load_config() -> AppConfig:
    """Load configuration from environment variables."""

    depth = _env_number("COURTSIDE_ENVELOPE_MAX_DEPTH", int, DEFAULT_MAX_DEPTH)
    return AppConfig(
        sampler=_parse_sampler(),
        gemini=_parse_gemini(),
        upload_limits=_parse_upload_limits(),
        envelope_max_depth=max(1, depth),
        log_level=_parse_log_level(),
    )
