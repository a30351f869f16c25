import random
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.analysis.schemas import AnalysisResult
from src.api.core.exceptions.base import TreeNotDetectedError, UploadNotFoundError
from src.database.models.tree_uploads import TreeUpload, UploadStatus
from src.modules.analysis.analyzer import TreeImageAnalyzer
from src.modules.carbon.estimation import (
    CarbonCalculationInput,
    CarbonCalculationResult,
    calculate_carbon,
)
from src.utils.hashing import ImageHashingService
from src.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class UploadProcessingResult:
    upload: TreeUpload
    analysis: AnalysisResult
    carbon: CarbonCalculationResult


async def get_tree_upload(db: AsyncSession, upload_id: UUID) -> TreeUpload:
    result = await db.execute(select(TreeUpload).where(TreeUpload.id == upload_id))
    upload = result.scalar_one_or_none()
    if upload is None:
        raise UploadNotFoundError(upload_id)
    return upload


async def calculate_and_persist(
    data: CarbonCalculationInput,
    db: AsyncSession,
    upload_id: UUID | None = None,
    rng: random.Random | None = None,
) -> CarbonCalculationResult:
    """
    Run the carbon estimate and, when an upload id is given, record it.

    The engine itself stays pure; writing ``co2_offset`` onto the upload is the
    only externally visible side effect and happens here.

    Raises:
        InvalidInputError: Neither tree_count nor area_hectares supplied
        UploadNotFoundError: upload_id does not reference a tree upload
    """
    logger.info(
        "Calculating carbon",
        tree_count=data.tree_count,
        area_hectares=data.area_hectares,
        land_cover_class=data.land_cover_class,
        upload_id=str(upload_id) if upload_id else None,
    )
    result = calculate_carbon(data, rng=rng)

    if upload_id is not None:
        upload = await get_tree_upload(db, upload_id)
        upload.co2_offset = result.co2_equivalent_tons
        await db.commit()
        logger.info("Updated tree upload co2_offset", upload_id=str(upload_id))

    return result


async def create_tree_upload(
    db: AsyncSession,
    image_url: str,
    location: str | None = None,
    user_id: UUID | None = None,
) -> TreeUpload:
    upload = TreeUpload(
        image_url=image_url,
        location=location or "Tree Upload",
        user_id=user_id,
        status=UploadStatus.PENDING.value,
        tree_count=0,
    )
    db.add(upload)
    await db.commit()
    await db.refresh(upload)
    return upload


def carbon_input_from_analysis(analysis: AnalysisResult) -> CarbonCalculationInput:
    """Measured area wins when the model estimated one, else area comes from trees."""
    return CarbonCalculationInput(
        tree_count=analysis.tree_count,
        land_cover_class=analysis.land_cover_class.value,
        area_hectares=(
            analysis.estimated_area_hectares
            if analysis.estimated_area_hectares > 0
            else None
        ),
    )


async def process_tree_upload(
    upload: TreeUpload,
    db: AsyncSession,
    analyzer: TreeImageAnalyzer,
    rng: random.Random | None = None,
) -> UploadProcessingResult:
    """
    Analyze an upload's image, reject it when no trees are present, otherwise
    estimate and record its carbon offset.

    Raises:
        TreeNotDetectedError: The model reported zero trees; the upload is deleted
        ConfigurationError / UpstreamModelError: Propagated from the analyzer
    """
    # A failed cache write rolls the shared session back and expires the upload
    upload_id, image_url = upload.id, upload.image_url
    analysis = await analyzer.analyze(image_url)

    if not analysis.has_trees:
        image_hash = ImageHashingService.hash_image_reference(image_url)
        logger.info("No trees detected, rejecting upload", upload_id=str(upload_id))
        await db.delete(upload)
        await db.commit()
        raise TreeNotDetectedError(image_hash)

    carbon = calculate_carbon(carbon_input_from_analysis(analysis), rng=rng)

    upload.tree_count = analysis.tree_count
    upload.co2_offset = carbon.co2_equivalent_tons
    upload.status = UploadStatus.ANALYZED.value
    await db.commit()
    await db.refresh(upload)

    logger.info(
        "Tree upload processed",
        upload_id=str(upload_id),
        tree_count=analysis.tree_count,
        co2_offset=carbon.co2_equivalent_tons,
    )
    return UploadProcessingResult(upload=upload, analysis=analysis, carbon=carbon)
