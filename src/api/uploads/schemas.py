"""Tree upload API schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from src.api.analysis.schemas import AnalysisResult
from src.api.carbon.schemas import CarbonCalculationResponse
from src.api.core.messages import APIResponse
from src.database.models.tree_uploads import TreeUpload
from src.modules.carbon.use_cases import UploadProcessingResult


class TreeUploadRequest(BaseModel):
    image_url: str = Field(..., min_length=1, max_length=4096)
    location: str | None = Field(default=None, max_length=255)
    user_id: UUID | None = None


class TreeUploadRecord(BaseModel):
    id: UUID
    user_id: UUID | None
    image_url: str
    location: str | None
    status: str
    tree_count: int | None
    co2_offset: float | None
    verification_notes: str | None
    created_at: datetime | None
    updated_at: datetime | None

    @classmethod
    def from_upload(cls, upload: TreeUpload) -> "TreeUploadRecord":
        return cls(
            id=upload.id,
            user_id=upload.user_id,
            image_url=upload.image_url,
            location=upload.location,
            status=upload.status,
            tree_count=upload.tree_count,
            co2_offset=upload.co2_offset,
            verification_notes=upload.verification_notes,
            created_at=upload.created_at,
            updated_at=upload.updated_at,
        )


class TreeUploadProcessedResponse(BaseModel):
    upload: TreeUploadRecord
    analysis: AnalysisResult
    carbon: CarbonCalculationResponse

    @classmethod
    def from_processing(
        cls, result: UploadProcessingResult
    ) -> "TreeUploadProcessedResponse":
        return cls(
            upload=TreeUploadRecord.from_upload(result.upload),
            analysis=result.analysis,
            carbon=CarbonCalculationResponse.from_result(result.carbon),
        )


TreeUploadProcessedAPIResponse = APIResponse[TreeUploadProcessedResponse]
TreeUploadRecordAPIResponse = APIResponse[TreeUploadRecord]
