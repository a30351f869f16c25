"""Defensive decoding of vision model output into an AnalysisResult."""

import math
import re
from typing import Any

import orjson

from src.api.analysis.schemas import AnalysisConfidence, AnalysisResult
from src.modules.carbon.constants import MODEL_LAND_COVER_CLASSES, LandCoverClass

_CODE_FENCE = re.compile(r"```(?:json?)?[ \t]*\n?", re.IGNORECASE)

DEFAULT_ANALYSIS_NOTES = "Analysis completed"

# Used when the model answered but not with parseable JSON
FALLBACK_ANALYSIS: dict[str, Any] = {
    "tree_count": 10,
    "land_cover_class": LandCoverClass.MIXED_FOREST.value,
    "estimated_area_hectares": 0.025,
    "confidence": AnalysisConfidence.LOW.value,
    "analysis_notes": "AI analysis parsing failed, using defaults",
}


class ParseError(Exception):
    """Model output could not be decoded into a JSON object."""


def strip_code_fences(content: str) -> str:
    """Remove markdown code-fence markers the model may wrap its JSON in."""
    return _CODE_FENCE.sub("", content).strip()


def parse_model_response(content: str) -> dict[str, Any]:
    """Decode the model's text answer into a raw dict. Raises ParseError."""
    cleaned = strip_code_fences(content)
    try:
        data = orjson.loads(cleaned)
    except orjson.JSONDecodeError as e:
        raise ParseError(f"Model response is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ParseError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def _as_number(value: Any) -> float:
    """Numeric coercion where anything unusable becomes 0."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def _land_cover_class(value: Any) -> LandCoverClass:
    if isinstance(value, str):
        normalized = value.strip().lower()
        for candidate in MODEL_LAND_COVER_CLASSES:
            if candidate.value == normalized:
                return candidate
    return LandCoverClass.MIXED_FOREST


def _confidence(value: Any) -> AnalysisConfidence:
    if isinstance(value, str):
        try:
            return AnalysisConfidence(value.strip().lower())
        except ValueError:
            pass
    return AnalysisConfidence.MEDIUM


def sanitize_analysis(raw: dict[str, Any]) -> AnalysisResult:
    """
    Clamp every field of a raw model answer into the AnalysisResult contract.

    tree_count is floored and clamped to >= 0, the land-cover class must be one
    of the six model classes (else mixed_forest), the area is clamped to >= 0,
    unknown confidence becomes medium and empty notes get a placeholder.
    """
    notes = raw.get("analysis_notes")
    if not isinstance(notes, str) or not notes.strip():
        notes = DEFAULT_ANALYSIS_NOTES

    return AnalysisResult(
        tree_count=max(0, math.floor(_as_number(raw.get("tree_count")))),
        land_cover_class=_land_cover_class(raw.get("land_cover_class")),
        estimated_area_hectares=max(
            0.0, _as_number(raw.get("estimated_area_hectares"))
        ),
        confidence=_confidence(raw.get("confidence")),
        analysis_notes=notes,
    )
