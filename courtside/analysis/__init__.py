from .gemini_client import GeminiClient, GeminiError
from .models import (
    CombinedAnalysisResult,
    ComparisonDetail,
    Drill,
    KeyDifference,
    MovementAnalysis,
    PhaseComparison,
    PoseAnalysis,
    PoseLandmark,
    RecommendationWithDrill,
    TechniqueComparison,
    VideoComparisonResult,
)
from .parsing import AnalysisResponseError, parse_json_response
from .report import build_feedback_payload, format_analysis_result
from .service import TechniqueComparisonService

__all__ = [
    "AnalysisResponseError",
    "CombinedAnalysisResult",
    "ComparisonDetail",
    "Drill",
    "GeminiClient",
    "GeminiError",
    "KeyDifference",
    "MovementAnalysis",
    "PhaseComparison",
    "PoseAnalysis",
    "PoseLandmark",
    "RecommendationWithDrill",
    "TechniqueComparison",
    "TechniqueComparisonService",
    "VideoComparisonResult",
    "build_feedback_payload",
    "format_analysis_result",
    "parse_json_response",
]
