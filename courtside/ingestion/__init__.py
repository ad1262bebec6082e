from .decoder import DecodeBackend, DecodeSession
from .encoder import FrameEncoder, JpegFrameEncoder
from .errors import DecodeError, FrameExtractionError, MediaLoadError, SamplingCancelled, SeekError
from .models import EncodedFrame, MediaInfo, RawFrame, SessionState, frames_to_base64
from .sampler import CancellationToken, FrameSampler, sample_frames, sample_frames_sync

__all__ = [
    "CancellationToken",
    "DecodeBackend",
    "DecodeError",
    "DecodeSession",
    "EncodedFrame",
    "FrameEncoder",
    "FrameExtractionError",
    "FrameSampler",
    "JpegFrameEncoder",
    "MediaInfo",
    "MediaLoadError",
    "RawFrame",
    "SamplingCancelled",
    "SeekError",
    "SessionState",
    "frames_to_base64",
    "sample_frames",
    "sample_frames_sync",
]
