from __future__ import annotations

from typing import Any

from .models import VideoComparisonResult

RULE = "-" * 50

PHASE_TITLES = {
    "preparation": "PREPARATION",
    "swingAndContact": "SWING AND CONTACT",
    "followThrough": "FOLLOW THROUGH",
}


def format_analysis_result(result: VideoComparisonResult) -> str:
    """Render a comparison result as a plain-text report for the learner."""
    lines: list[str] = ["TECHNIQUE ANALYSIS RESULT", "=" * 50, ""]

    if result.overall_score_for_player2 is not None:
        lines += [f"OVERALL SCORE: {result.overall_score_for_player2:g}/100", ""]

    if result.summary:
        lines += ["SUMMARY:", result.summary, ""]

    phases = result.comparison.phases() if result.comparison else []
    if phases:
        lines += ["DETAILED COMPARISON:", RULE, ""]
        for index, (name, phase) in enumerate(phases, start=1):
            learner = phase.player2
            lines.append(f"{index}. {PHASE_TITLES[name]}:")
            lines.append(f"   Advantage: {phase.advantage}")
            if learner.analysis:
                lines.append(f"   Analysis: {learner.analysis}")
            if learner.strengths:
                lines.append("   Strengths:")
                lines += [f"     - {item}" for item in learner.strengths]
            if learner.weaknesses:
                lines.append("   To improve:")
                lines += [f"     - {item}" for item in learner.weaknesses]
            lines.append("")

    if result.key_differences:
        lines += ["KEY DIFFERENCES:", RULE, ""]
        for index, diff in enumerate(result.key_differences, start=1):
            lines += [
                f"{index}. {diff.aspect}",
                f"   Your technique: {diff.player2_technique}",
                f"   Impact: {diff.impact}",
                "",
            ]

    if result.recommendations_for_player2:
        lines += ["RECOMMENDATIONS:", RULE, ""]
        for index, rec in enumerate(result.recommendations_for_player2, start=1):
            lines.append(f"{index}. {rec.recommendation}")
            drill = rec.drill
            if drill is not None:
                if drill.title:
                    lines.append(f"   Drill: {drill.title}")
                if drill.description:
                    lines.append(f"   Description: {drill.description}")
                if drill.practice_sets:
                    lines.append(f"   Practice sets: {drill.practice_sets}")
            lines.append("")

    return "\n".join(lines)


def build_feedback_payload(result: VideoComparisonResult, coach_note: str) -> dict[str, Any]:
    """
    Build the body the coach submits as AI feedback on a learner video.

    The learner is player2 in the comparison; each phase becomes one ``details``
    entry carrying the learner's strengths and weaknesses.
    """
    note = (coach_note or "").strip()
    if not note:
        raise ValueError("coach note is required")

    phases = result.comparison.phases() if result.comparison else []
    return {
        "summary": result.summary,
        "learnerScore": result.overall_score_for_player2,
        "keyDifferents": [
            {
                "aspect": diff.aspect,
                "learnerTechnique": diff.player2_technique,
                "impact": diff.impact,
            }
            for diff in result.key_differences
        ],
        "details": [
            {
                "type": name,
                "advanced": phase.advantage,
                "strengths": list(phase.player2.strengths),
                "weaknesses": list(phase.player2.weaknesses),
            }
            for name, phase in phases
        ],
        "recommendationDrills": [
            {
                "name": rec.drill.title if rec.drill else rec.recommendation,
                "description": rec.drill.description if rec.drill else "",
                "practiceSets": rec.drill.practice_sets if rec.drill else "",
            }
            for rec in result.recommendations_for_player2
        ],
        "coachNote": note,
    }
