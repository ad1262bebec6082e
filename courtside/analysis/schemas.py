from __future__ import annotations

"""
Gemini ``responseSchema`` definitions.

These mirror the pydantic models in ``courtside.analysis.models`` using the
OpenAPI subset accepted by ``generationConfig.responseSchema``. Keep the two in
sync when fields are added.
"""

from typing import Any


def _string() -> dict[str, Any]:
    return {"type": "STRING"}


def _number() -> dict[str, Any]:
    return {"type": "NUMBER"}


def _array(items: dict[str, Any]) -> dict[str, Any]:
    return {"type": "ARRAY", "items": items}


def _object(properties: dict[str, Any], required: list[str] | None = None) -> dict[str, Any]:
    return {
        "type": "OBJECT",
        "properties": properties,
        "required": list(properties) if required is None else required,
    }


ANALYZE_VIDEO_SCHEMA: dict[str, Any] = _object(
    {
        "shotType": _string(),
        "confidence": _number(),
        "pose": _object({"summary": _string(), "feedback": _string()}),
        "movement": _object(
            {"preparation": _string(), "contact": _string(), "followThrough": _string()}
        ),
        "recommendations": _array(_string()),
        "tags": _array(_string()),
        "description": _string(),
    }
)

_COMPARISON_DETAIL = _object(
    {
        "analysis": _string(),
        "strengths": _array(_string()),
        "weaknesses": _array(_string()),
        "timestamp": _number(),
    }
)

_PHASE = _object(
    {
        "player1": _COMPARISON_DETAIL,
        "player2": _COMPARISON_DETAIL,
        "advantage": _string(),
    }
)

_KEY_DIFFERENCE = _object(
    {
        "aspect": _string(),
        "player1_technique": _string(),
        "player2_technique": _string(),
        "impact": _string(),
    }
)

_RECOMMENDATION = _object(
    {
        "recommendation": _string(),
        "drill": _object(
            {"title": _string(), "description": _string(), "practice_sets": _string()}
        ),
    }
)

_POSE = _array(_object({"name": _string(), "x": _number(), "y": _number()}))

COMPARE_VIDEOS_SCHEMA: dict[str, Any] = _object(
    {
        "comparison": _object(
            {"preparation": _PHASE, "swingAndContact": _PHASE, "followThrough": _PHASE}
        ),
        "keyDifferences": _array(_KEY_DIFFERENCE),
        "summary": _string(),
        "recommendationsForPlayer2": _array(_RECOMMENDATION),
        "overallScoreForPlayer2": _number(),
        "coachPoses": _array(_POSE),
        "learnerPoses": _array(_POSE),
    }
)
