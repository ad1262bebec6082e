from __future__ import annotations

"""
Payload extraction from backend response envelopes.

The platform backend wraps payloads at varying depths (``{"data": {...}}``,
``{"data": {"metadata": {...}}}`` or no wrapper at all). Consumers describe the
payload they want with a matcher and let ``extract_payload`` find it, so callers
never branch on the envelope shape of a particular endpoint.
"""

from collections.abc import Mapping, Sequence
from typing import Any, Callable, Optional

from loguru import logger

WRAPPER_KEYS = ("data", "metadata")
DEFAULT_MAX_DEPTH = 8

Matcher = Callable[[Mapping[str, Any]], Optional[Any]]


def _is_empty_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes)) and len(value) == 0


def extract_payload(root: Any, matcher: Matcher, *, max_depth: int = DEFAULT_MAX_DEPTH) -> Optional[Any]:
    """
    Locate the first node matched by ``matcher`` in a response envelope.

    The root is tested first; a non-``None`` matcher result is returned as is. The
    walk then descends into ``data`` before ``metadata``. Nested results that are
    empty sequences do not end the search. Non-mapping nodes never match, and the
    walk stops after ``max_depth`` wrapper levels. Returns ``None`` when nothing
    matches; never raises on malformed input.
    """
    return _walk(root, matcher, depth=0, max_depth=max_depth)


def _walk(node: Any, matcher: Matcher, *, depth: int, max_depth: int) -> Optional[Any]:
    if not isinstance(node, Mapping):
        return None

    matched = matcher(node)
    if matched is not None:
        return matched

    if depth >= max_depth:
        logger.debug("Envelope depth limit {} reached; giving up", max_depth)
        return None

    for key in WRAPPER_KEYS:
        if key not in node:
            continue
        nested = _walk(node[key], matcher, depth=depth + 1, max_depth=max_depth)
        if nested is not None and not _is_empty_sequence(nested):
            return nested
    return None


def has_fields(*names: str) -> Matcher:
    """Match a mapping that carries every one of ``names``; yields the mapping."""

    def _match(node: Mapping[str, Any]) -> Optional[Mapping[str, Any]]:
        if all(name in node for name in names):
            return node
        return None

    return _match


def collection_matcher(plural: str, singular: str) -> Matcher:
    """
    Match a list-valued ``plural`` field, falling back to a mapping-valued
    ``singular`` field wrapped into a one-element list.
    """

    def _match(node: Mapping[str, Any]) -> Optional[list[Any]]:
        items = node.get(plural)
        if isinstance(items, list):
            return items
        item = node.get(singular)
        if isinstance(item, Mapping):
            return [item]
        return None

    return _match


SESSION_MATCHER = has_fields("id", "sessionNumber")
VIDEOS_MATCHER = collection_matcher("videos", "video")
QUIZZES_MATCHER = collection_matcher("quizzes", "quiz")


def extract_session_payload(payload: Any, *, max_depth: int = DEFAULT_MAX_DEPTH) -> Optional[Mapping[str, Any]]:
    return extract_payload(payload, SESSION_MATCHER, max_depth=max_depth)


def extract_videos_from_payload(payload: Any, *, max_depth: int = DEFAULT_MAX_DEPTH) -> list[Any]:
    return extract_payload(payload, VIDEOS_MATCHER, max_depth=max_depth) or []


def extract_quizzes_from_payload(payload: Any, *, max_depth: int = DEFAULT_MAX_DEPTH) -> list[Any]:
    return extract_payload(payload, QUIZZES_MATCHER, max_depth=max_depth) or []


EXTRACTORS: dict[str, Callable[..., Any]] = {
    "session": extract_session_payload,
    "videos": extract_videos_from_payload,
    "quizzes": extract_quizzes_from_payload,
}
