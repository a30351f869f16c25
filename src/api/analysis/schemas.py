"""Tree image analysis API schemas (combined models/requests)."""

from enum import Enum

from pydantic import BaseModel, Field

from src.api.core.messages import APIResponse
from src.modules.carbon.constants import LandCoverClass

CACHE_NOTE_SUFFIX = " (from cache)"


class AnalysisConfidence(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AnalysisResult(BaseModel):
    """Vision model estimate for a single tree image."""

    tree_count: int = Field(ge=0)
    land_cover_class: LandCoverClass
    estimated_area_hectares: float = Field(ge=0)
    confidence: AnalysisConfidence
    analysis_notes: str

    @property
    def has_trees(self) -> bool:
        # Zero trees is a rejection, not a zero-offset success
        return self.tree_count > 0

    @property
    def is_cached(self) -> bool:
        return self.analysis_notes.endswith(CACHE_NOTE_SUFFIX)


class TreeImageAnalysisRequest(BaseModel):
    image_url: str = Field(min_length=1, max_length=4096)


class TreeImageAnalysisResponse(BaseModel):
    image_hash: str
    from_cache: bool
    analysis: AnalysisResult


class CachePurgeResponse(BaseModel):
    deleted: int
    max_age_days: int | None


TreeImageAnalysisAPIResponse = APIResponse[TreeImageAnalysisResponse]
CachePurgeAPIResponse = APIResponse[CachePurgeResponse]
