from fastapi import APIRouter

from src.api.analysis.schemas import (
    CachePurgeAPIResponse,
    CachePurgeResponse,
    TreeImageAnalysisAPIResponse,
    TreeImageAnalysisRequest,
    TreeImageAnalysisResponse,
)
from src.api.core.dependencies import AnalysisCacheDep, TreeImageAnalyzerDep
from src.api.core.messages import APIResponse, MessageCode
from src.utils.hashing import ImageHashingService

router = APIRouter(prefix="/analysis", tags=["analysis"])


@router.post("/tree-image", response_model=TreeImageAnalysisAPIResponse)
async def analyze_tree_image(
    body: TreeImageAnalysisRequest,
    analyzer: TreeImageAnalyzerDep,
) -> APIResponse[TreeImageAnalysisResponse]:
    """Estimate tree count, land cover and area for an image URL.

    A tree_count of 0 means the image holds no usable vegetation; callers must
    reject it rather than credit a zero offset.
    """
    analysis = await analyzer.analyze(body.image_url)

    return APIResponse.success(
        message_code=(
            MessageCode.ANALYSIS_FROM_CACHE
            if analysis.is_cached
            else MessageCode.ANALYSIS_COMPLETED
        ),
        data=TreeImageAnalysisResponse(
            image_hash=ImageHashingService.hash_image_reference(body.image_url),
            from_cache=analysis.is_cached,
            analysis=analysis,
        ),
    )


@router.delete("/cache/expired", response_model=CachePurgeAPIResponse)
async def purge_expired_cache_entries(
    cache: AnalysisCacheDep,
) -> APIResponse[CachePurgeResponse]:
    """Remove cache entries idle for longer than the configured max age."""
    deleted = await cache.purge_expired()

    return APIResponse.success(
        message_code=MessageCode.CACHE_PURGED,
        data=CachePurgeResponse(
            deleted=deleted,
            max_age_days=(
                cache.max_age.days if cache.max_age is not None else None
            ),
        ),
    )
