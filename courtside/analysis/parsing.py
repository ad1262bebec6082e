from __future__ import annotations

import json
import re
from typing import Type, TypeVar

from pydantic import BaseModel, ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)

FENCE_PATTERN = re.compile(r"^\s*```(?:json)?\s*|\s*```\s*$", re.IGNORECASE)
JSON_PATTERN = re.compile(r"\{.*\}", re.DOTALL)


class AnalysisResponseError(ValueError):
    """Raised when an AI response cannot be parsed into the expected model."""


def strip_code_fences(text: str) -> str:
    return FENCE_PATTERN.sub("", text).strip()


def parse_json_response(text: str, model: Type[ModelT]) -> ModelT:
    """Parse a model out of AI output that may be fenced or padded with prose."""
    cleaned = strip_code_fences(text)
    candidates = [cleaned]
    match = JSON_PATTERN.search(cleaned)
    if match and match.group(0) != cleaned:
        candidates.append(match.group(0))

    last_error: Exception | None = None
    for candidate in candidates:
        try:
            payload = json.loads(candidate)
        except json.JSONDecodeError as exc:
            last_error = exc
            continue
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            last_error = exc
            continue
    raise AnalysisResponseError(f"Unable to parse {model.__name__} response: {last_error}")
