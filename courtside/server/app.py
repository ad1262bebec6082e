from __future__ import annotations

import tempfile
import uuid
from pathlib import Path
from typing import Any, BinaryIO

from fastapi import Body, Depends, FastAPI, File, Form, HTTPException, Request, UploadFile
from loguru import logger

from courtside.config import AppConfig, UploadLimits, load_config
from courtside.factory import build_sampler
from courtside.ingestion import FrameSampler, MediaLoadError, SeekError
from courtside.processing import EXTRACTORS


CHUNK_SIZE = 1024 * 1024


class UploadTooLargeError(ValueError):
    """Raised when an upload exceeds the configured size limit."""


def _validate_upload(file: UploadFile, content_length: str | None, limits: UploadLimits) -> None:
    content_type = (file.content_type or "").split(";")[0].strip().lower()
    if content_type not in limits.allowed_types:
        raise ValueError(f"unsupported upload type: {content_type or 'unknown'}")

    if content_length:
        try:
            length = int(content_length)
        except ValueError:
            length = None
        if length is not None and length > limits.max_bytes:
            raise UploadTooLargeError(f"upload exceeds {limits.max_size_mb} MB")


def _write_stream(source: BinaryIO, destination: Path, max_bytes: int) -> int:
    total = 0
    with destination.open("wb") as handle:
        while True:
            chunk = source.read(CHUNK_SIZE)
            if not chunk:
                break
            total += len(chunk)
            if total > max_bytes:
                raise UploadTooLargeError(f"upload exceeds {max_bytes // (1024 * 1024)} MB")
            handle.write(chunk)
    return total


def parse_timestamps(raw: str) -> list[float]:
    """Parse a comma-separated list of seconds."""
    values = [entry.strip() for entry in raw.split(",") if entry.strip()]
    if not values:
        raise ValueError("at least one timestamp is required")
    try:
        return [float(value) for value in values]
    except ValueError as exc:
        raise ValueError(f"invalid timestamp list: {raw!r}") from exc


def create_app(
    config: AppConfig | None = None,
    *,
    sampler: FrameSampler | None = None,
    upload_dir: Path | None = None,
) -> FastAPI:
    """Create the FastAPI application exposing frame sampling and envelope unwrapping."""

    config = config or load_config()
    frame_sampler = sampler or build_sampler(config)
    uploads = (upload_dir or Path(tempfile.gettempdir()) / "courtside-uploads").resolve()
    uploads.mkdir(parents=True, exist_ok=True)

    app = FastAPI(
        title="Courtside",
        version="0.1.0",
        description="Frame sampling and response envelope normalisation for coaching video review.",
    )
    app.state.config = config
    app.state.sampler = frame_sampler
    limits = config.upload_limits

    def get_sampler(request: Request) -> FrameSampler:
        return request.app.state.sampler  # type: ignore[return-value]

    @app.get("/health")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/frames")
    async def sample_video_frames(
        request: Request,
        file: UploadFile = File(...),
        timestamps: str = Form(...),
        sampler_dep: FrameSampler = Depends(get_sampler),
    ) -> dict[str, Any]:
        try:
            requested = parse_timestamps(timestamps)
            _validate_upload(file, request.headers.get("content-length"), limits)
        except UploadTooLargeError as exc:
            await file.close()
            raise HTTPException(status_code=413, detail=str(exc)) from exc
        except ValueError as exc:
            await file.close()
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        safe_name = Path(file.filename or "upload.bin").name or "upload.bin"
        destination = uploads / f"{uuid.uuid4().hex}_{safe_name}"
        try:
            _write_stream(file.file, destination, limits.max_bytes)
            frames = await sampler_dep.sample(destination, requested)
        except UploadTooLargeError as exc:
            raise HTTPException(status_code=413, detail=str(exc)) from exc
        except SeekError as exc:
            raise HTTPException(
                status_code=422,
                detail={"message": str(exc), "timestamp": exc.timestamp},
            ) from exc
        except MediaLoadError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        finally:
            await file.close()
            _cleanup(destination)

        return {
            "data": {
                "frames": [
                    {
                        "timestamp": frame.requested_at,
                        "position": frame.position,
                        "mime_type": frame.mime_type,
                        "data": frame.as_base64(),
                    }
                    for frame in frames
                ]
            }
        }

    @app.post("/envelope/{kind}")
    async def unwrap_envelope(kind: str, payload: Any = Body(...)) -> dict[str, Any]:
        extractor = EXTRACTORS.get(kind)
        if extractor is None:
            raise HTTPException(status_code=404, detail=f"unknown payload kind: {kind}")
        return {"data": extractor(payload, max_depth=config.envelope_max_depth)}

    return app


def _cleanup(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        logger.debug("Failed to remove uploaded video {}: {}", path, exc)
