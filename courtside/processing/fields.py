from __future__ import annotations

import json
from typing import Any, Iterable


def _clean(items: Iterable[Any]) -> list[str]:
    cleaned = (str(item).strip() for item in items if item is not None)
    return [item for item in cleaned if item]


def parse_string_array(value: Any) -> list[str]:
    """
    Normalise list-like backend fields (specialties, teaching methods) to a list.

    Accepts ``None``, a list, or a string holding a JSON array (``["a","b"]``),
    a brace set as produced by Postgres array columns (``{"a","b"}``) or a plain
    comma-separated list.
    """
    if not value:
        return []
    if isinstance(value, (list, tuple)):
        return _clean(value)
    if not isinstance(value, str):
        return []

    text = value.strip()
    if text.startswith("[") and text.endswith("]"):
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list):
            return _clean(parsed)

    if text.startswith("{") and text.endswith("}"):
        return _clean(item.replace('"', "") for item in text[1:-1].split(","))

    return _clean(text.split(","))
