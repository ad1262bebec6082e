from __future__ import annotations

import pytest

from courtside.analysis import VideoComparisonResult, build_feedback_payload, format_analysis_result

from sample_results import COMPARISON_PAYLOAD


def test_format_analysis_result_renders_all_sections() -> None:
    result = VideoComparisonResult.model_validate(COMPARISON_PAYLOAD)

    report = format_analysis_result(result)

    assert "OVERALL SCORE: 72/100" in report
    assert "Solid base, contact point needs work." in report
    assert report.index("1. PREPARATION:") < report.index("2. SWING AND CONTACT:") < report.index("3. FOLLOW THROUGH:")
    assert "     - Paddle starts too low" in report
    assert "   Your technique: Beside the hip" in report
    assert "   Drill: Wall dinks" in report
    assert "   Practice sets: 3 x 20" in report


def test_format_analysis_result_omits_missing_sections() -> None:
    report = format_analysis_result(VideoComparisonResult(summary="Only a summary"))

    assert "Only a summary" in report
    assert "OVERALL SCORE" not in report
    assert "KEY DIFFERENCES" not in report
    assert "RECOMMENDATIONS" not in report


def test_build_feedback_payload_maps_learner_fields() -> None:
    result = VideoComparisonResult.model_validate(COMPARISON_PAYLOAD)

    payload = build_feedback_payload(result, "  Work on your contact point  ")

    assert payload["coachNote"] == "Work on your contact point"
    assert payload["learnerScore"] == 72
    assert payload["keyDifferents"] == [
        {"aspect": "Contact point", "learnerTechnique": "Beside the hip", "impact": "Less control on dinks"}
    ]
    assert [detail["type"] for detail in payload["details"]] == ["preparation", "swingAndContact", "followThrough"]
    assert payload["details"][0]["weaknesses"] == ["Paddle starts too low"]
    assert payload["recommendationDrills"] == [
        {"name": "Wall dinks", "description": "Dink against a wall", "practiceSets": "3 x 20"}
    ]


def test_build_feedback_payload_requires_coach_note() -> None:
    result = VideoComparisonResult.model_validate(COMPARISON_PAYLOAD)

    with pytest.raises(ValueError):
        build_feedback_payload(result, "   ")
