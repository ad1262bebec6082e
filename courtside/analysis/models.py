from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ComparisonDetail(_WireModel):
    """Assessment of one player within a stroke phase."""

    analysis: str = ""
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    timestamp: float | None = None


class PhaseComparison(_WireModel):
    player1: ComparisonDetail = Field(default_factory=ComparisonDetail, description="Coach.")
    player2: ComparisonDetail = Field(default_factory=ComparisonDetail, description="Learner.")
    advantage: str = ""


class TechniqueComparison(_WireModel):
    """Phase-by-phase comparison: preparation, swing and contact, follow through."""

    preparation: PhaseComparison | None = None
    swing_and_contact: PhaseComparison | None = Field(default=None, alias="swingAndContact")
    follow_through: PhaseComparison | None = Field(default=None, alias="followThrough")

    def phases(self) -> list[tuple[str, PhaseComparison]]:
        """Return the present phases in stroke order, keyed by wire name."""
        ordered = [
            ("preparation", self.preparation),
            ("swingAndContact", self.swing_and_contact),
            ("followThrough", self.follow_through),
        ]
        return [(name, phase) for name, phase in ordered if phase is not None]


class KeyDifference(_WireModel):
    aspect: str
    player1_technique: str = ""
    player2_technique: str = ""
    impact: str = ""


class Drill(_WireModel):
    title: str = ""
    description: str = ""
    practice_sets: str = ""


class RecommendationWithDrill(_WireModel):
    recommendation: str
    drill: Drill | None = None


class PoseLandmark(_WireModel):
    """Normalised (0..1) body landmark position."""

    name: str
    x: float
    y: float

    @field_validator("x", "y")
    @classmethod
    def _clamp_unit(cls, value: float) -> float:
        return min(max(value, 0.0), 1.0)


class VideoComparisonResult(_WireModel):
    """AI comparison of a learner's stroke against the coach's reference video."""

    comparison: TechniqueComparison | None = None
    key_differences: List[KeyDifference] = Field(default_factory=list, alias="keyDifferences")
    summary: str = ""
    recommendations_for_player2: List[RecommendationWithDrill] = Field(
        default_factory=list, alias="recommendationsForPlayer2"
    )
    overall_score_for_player2: float | None = Field(default=None, alias="overallScoreForPlayer2")
    coach_poses: List[List[PoseLandmark]] = Field(default_factory=list, alias="coachPoses")
    learner_poses: List[List[PoseLandmark]] = Field(default_factory=list, alias="learnerPoses")

    @field_validator("overall_score_for_player2")
    @classmethod
    def _clamp_score(cls, value: float | None) -> float | None:
        if value is None:
            return None
        return min(max(value, 0.0), 100.0)


class PoseAnalysis(_WireModel):
    summary: str
    feedback: str


class MovementAnalysis(_WireModel):
    preparation: str
    contact: str
    follow_through: str = Field(alias="followThrough")


class CombinedAnalysisResult(_WireModel):
    """AI classification and technique feedback for a single-stroke clip."""

    shot_type: str = Field(alias="shotType")
    confidence: float = Field(ge=0)
    pose: PoseAnalysis
    movement: MovementAnalysis
    recommendations: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    description: str = ""
