from __future__ import annotations

from typing import Any, Optional, Sequence

import requests
from loguru import logger

from courtside.config import GeminiConfig

from .models import CombinedAnalysisResult, VideoComparisonResult
from .parsing import parse_json_response
from .schemas import ANALYZE_VIDEO_SCHEMA, COMPARE_VIDEOS_SCHEMA

FRAME_MIME_TYPE = "image/jpeg"

ANALYZE_PROMPT = """
You are a pickleball coach analysing a sequence of frames showing a single stroke.
1) Classify the shot, analyse the posture through preparation, contact and follow
   through, and give recommendations.
2) Produce 1-3 tags naming the main technique and a 1-2 sentence description.
Reply with JSON only, using the keys: shotType, confidence, pose {summary, feedback},
movement {preparation, contact, followThrough}, recommendations, tags, description.
""".strip()

COMPARE_PROMPT = """
You are an elite pickleball coach comparing the technique of player1 (the coach)
with player2 (the learner).
- Coach timestamps: {coach_timestamps} (seconds)
- Learner timestamps: {learner_timestamps} (seconds)
Phases: preparation, swingAndContact, followThrough.
Reply with JSON only, using the keys: comparison {{preparation, swingAndContact,
followThrough}} where each phase has player1, player2 (analysis, strengths, weaknesses,
timestamp) and advantage; keyDifferences [{{aspect, player1_technique,
player2_technique, impact}}]; summary; recommendationsForPlayer2 [{{recommendation,
drill {{title, description, practice_sets}}}}]; overallScoreForPlayer2 (0-100);
coachPoses and learnerPoses as lists of landmark lists [{{name, x, y}}] with x and y
normalised to 0..1.
""".strip()


class GeminiError(RuntimeError):
    """Raised when the Gemini API call fails or returns no usable content."""


def _format_timestamps(timestamps: Sequence[float]) -> str:
    return ", ".join(f"{value:g}" for value in timestamps)


def _frame_parts(frames: Sequence[str]) -> list[dict[str, Any]]:
    return [{"inlineData": {"mimeType": FRAME_MIME_TYPE, "data": frame}} for frame in frames]


class GeminiClient:
    """Technique analysis backed by Gemini's generateContent REST endpoint."""

    def __init__(
        self,
        config: GeminiConfig,
        *,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not config.api_key:
            raise ValueError("Gemini api_key must be configured")
        self._config = config
        self._session = session or requests.Session()

    def analyze_video(self, frames: Sequence[str]) -> CombinedAnalysisResult:
        """Classify and critique a single stroke from base64 JPEG frames."""
        if not frames:
            raise ValueError("at least one frame is required")
        parts = [*_frame_parts(frames), {"text": ANALYZE_PROMPT}]
        text = self.generate(parts, response_schema=ANALYZE_VIDEO_SCHEMA)
        result = parse_json_response(text, CombinedAnalysisResult)
        logger.info("Gemini stroke analysis completed ({} frames, shot={})", len(frames), result.shot_type)
        return result

    def compare_videos(
        self,
        coach_frames: Sequence[str],
        coach_timestamps: Sequence[float],
        learner_frames: Sequence[str],
        learner_timestamps: Sequence[float],
    ) -> VideoComparisonResult:
        """Compare learner frames against coach frames."""
        if not coach_frames or not learner_frames:
            raise ValueError("coach and learner frames are both required")
        prompt = COMPARE_PROMPT.format(
            coach_timestamps=_format_timestamps(coach_timestamps),
            learner_timestamps=_format_timestamps(learner_timestamps),
        )
        parts = [
            {"text": "Frames from the coach video (player1):"},
            *_frame_parts(coach_frames),
            {"text": "Frames from the learner video (player2):"},
            *_frame_parts(learner_frames),
            {"text": prompt},
        ]
        text = self.generate(parts, response_schema=COMPARE_VIDEOS_SCHEMA)
        result = parse_json_response(text, VideoComparisonResult)
        logger.info(
            "Gemini technique comparison completed (coach={}, learner={} frames)",
            len(coach_frames),
            len(learner_frames),
        )
        return result

    def generate(
        self,
        parts: list[dict[str, Any]],
        *,
        response_schema: Optional[dict[str, Any]] = None,
    ) -> str:
        """Send one user turn and return the concatenated text of the first candidate."""
        generation_config: dict[str, Any] = {"responseMimeType": "application/json"}
        if response_schema is not None:
            generation_config["responseSchema"] = response_schema
        payload = {
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": generation_config,
        }
        try:
            response = self._session.post(
                self._config.build_url(),
                headers=self._build_headers(),
                json=payload,
                timeout=self._config.request_timeout,
            )
        except requests.RequestException as exc:
            logger.error("Gemini request failed: {}", exc)
            raise GeminiError("Gemini request failed") from exc

        if response.status_code != 200:
            raise GeminiError(f"Gemini returned HTTP {response.status_code}: {response.text[:200]}")

        try:
            body = response.json()
        except ValueError as exc:
            logger.error("Gemini returned a non-JSON body: {}", response.text[:200])
            raise GeminiError("Gemini returned a non-JSON body") from exc

        text = self._extract_text(body)
        if not text:
            raise GeminiError("Gemini response did not contain any text")
        return text

    def _build_headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-goog-api-key": self._config.api_key,
        }

    @staticmethod
    def _extract_text(payload: dict[str, Any]) -> str:
        candidates = payload.get("candidates") or []
        if not candidates:
            feedback = payload.get("promptFeedback") or {}
            if feedback.get("blockReason"):
                raise GeminiError(f"Gemini blocked the prompt: {feedback['blockReason']}")
            return ""
        content = candidates[0].get("content") or {}
        texts = [part.get("text") or "" for part in content.get("parts") or []]
        return "".join(texts).strip()
