"""
Response payload normalisation for Courtside.

Envelope unwrapping and field normalisation helpers operate on decoded JSON
(plain mappings and lists) and never raise on unexpected shapes.
"""

from .envelope import (
    DEFAULT_MAX_DEPTH,
    EXTRACTORS,
    collection_matcher,
    extract_payload,
    extract_quizzes_from_payload,
    extract_session_payload,
    extract_videos_from_payload,
    has_fields,
)
from .fields import parse_string_array

__all__ = (
    "DEFAULT_MAX_DEPTH",
    "EXTRACTORS",
    "collection_matcher",
    "extract_payload",
    "extract_quizzes_from_payload",
    "extract_session_payload",
    "extract_videos_from_payload",
    "has_fields",
    "parse_string_array",
)
