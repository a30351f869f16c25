from uuid import UUID

from fastapi import APIRouter, status

from src.api.core.dependencies import (
    AsyncSessionDep,
    RandomSourceDep,
    TreeImageAnalyzerDep,
)
from src.api.core.messages import APIResponse, MessageCode
from src.api.uploads.schemas import (
    TreeUploadProcessedAPIResponse,
    TreeUploadProcessedResponse,
    TreeUploadRecord,
    TreeUploadRecordAPIResponse,
    TreeUploadRequest,
)
from src.modules.carbon.use_cases import (
    create_tree_upload,
    get_tree_upload,
    process_tree_upload,
)

router = APIRouter(prefix="/uploads", tags=["uploads"])


@router.post(
    "",
    response_model=TreeUploadProcessedAPIResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_tree_upload(
    body: TreeUploadRequest,
    db: AsyncSessionDep,
    analyzer: TreeImageAnalyzerDep,
    rng: RandomSourceDep,
) -> APIResponse[TreeUploadProcessedResponse]:
    """Register a tree photo, analyze it and record its CO2 offset.

    A photo without trees is rejected with 422 and its upload record removed.
    """
    upload = await create_tree_upload(
        db, image_url=body.image_url, location=body.location, user_id=body.user_id
    )
    result = await process_tree_upload(upload, db=db, analyzer=analyzer, rng=rng)

    return APIResponse.success(
        message_code=MessageCode.UPLOAD_PROCESSED,
        data=TreeUploadProcessedResponse.from_processing(result),
    )


@router.get("/{upload_id}", response_model=TreeUploadRecordAPIResponse)
async def get_upload(
    upload_id: UUID, db: AsyncSessionDep
) -> APIResponse[TreeUploadRecord]:
    upload = await get_tree_upload(db, upload_id)
    return APIResponse.success(
        message_code=MessageCode.SUCCESS, data=TreeUploadRecord.from_upload(upload)
    )


@router.post("/{upload_id}/process", response_model=TreeUploadProcessedAPIResponse)
async def reprocess_tree_upload(
    upload_id: UUID,
    db: AsyncSessionDep,
    analyzer: TreeImageAnalyzerDep,
    rng: RandomSourceDep,
) -> APIResponse[TreeUploadProcessedResponse]:
    """Run analysis again for an existing upload, e.g. after an upstream failure."""
    upload = await get_tree_upload(db, upload_id)
    result = await process_tree_upload(upload, db=db, analyzer=analyzer, rng=rng)

    return APIResponse.success(
        message_code=MessageCode.UPLOAD_PROCESSED,
        data=TreeUploadProcessedResponse.from_processing(result),
    )
