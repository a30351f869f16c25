"""Tree image analysis: cache read-through around the vision model."""

from src.api.analysis.schemas import AnalysisResult
from src.modules.analysis.cache import AnalysisCache, StoreOutcome
from src.modules.analysis.infrastructure.vision_client import VisionModelClient
from src.modules.analysis.parsing import (
    FALLBACK_ANALYSIS,
    ParseError,
    parse_model_response,
    sanitize_analysis,
)
from src.utils.hashing import ImageHashingService
from src.utils.logger import get_logger

logger = get_logger(__name__)


class TreeImageAnalyzer:
    """Estimates tree count, land cover and area for an image reference.

    A cached analysis short-circuits the model call. Fresh analyses are cached
    on a best-effort basis: a failing cache write never fails the request.
    """

    def __init__(self, cache: AnalysisCache, client: VisionModelClient):
        self.cache = cache
        self.client = client

    async def analyze(self, image_reference: str) -> AnalysisResult:
        """
        Analyze a tree image, consulting the cache first.

        Args:
            image_reference: Public URL (or other canonical reference) of the image

        Returns:
            AnalysisResult; ``analysis_notes`` ends with "(from cache)" on a hit.
            A tree_count of 0 means the image must be rejected.

        Raises:
            ConfigurationError: No model credential configured (cache miss only)
            UpstreamModelError: The model call failed
        """
        image_hash = ImageHashingService.hash_image_reference(image_reference)

        cached = await self.cache.lookup(image_hash)
        if cached is not None:
            logger.info("Analysis cache hit", image_hash=image_hash)
            await self._touch_best_effort(image_hash)
            return cached

        logger.info("Analysis cache miss, calling vision model", image_hash=image_hash)
        content = await self.client.analyze_image(image_reference)
        result = self.interpret(content)
        logger.info(
            "Parsed analysis result",
            image_hash=image_hash,
            tree_count=result.tree_count,
            land_cover_class=result.land_cover_class.value,
            confidence=result.confidence.value,
        )

        await self._store_best_effort(image_hash, result)
        return result

    @staticmethod
    def interpret(content: str) -> AnalysisResult:
        """Turn raw model text into a sanitized result, never raising."""
        try:
            raw = parse_model_response(content)
        except ParseError as e:
            logger.warning(
                "Failed to parse vision model response, using defaults",
                error=str(e),
                raw_content=content[:500],
            )
            raw = dict(FALLBACK_ANALYSIS)
        return sanitize_analysis(raw)

    async def _store_best_effort(
        self, image_hash: str, result: AnalysisResult
    ) -> None:
        try:
            outcome = await self.cache.store(image_hash, result)
        except Exception as e:
            logger.error(
                f"Failed to cache analysis result: {e}", image_hash=image_hash
            )
            await self._rollback_quietly()
            return

        if outcome is StoreOutcome.ALREADY_EXISTS:
            logger.info(
                "Analysis already cached by a concurrent request",
                image_hash=image_hash,
            )
        else:
            logger.debug("Analysis result cached", image_hash=image_hash)

    async def _touch_best_effort(self, image_hash: str) -> None:
        try:
            await self.cache.touch(image_hash)
        except Exception as e:
            logger.error(
                f"Failed to update cache access time: {e}", image_hash=image_hash
            )
            await self._rollback_quietly()

    async def _rollback_quietly(self) -> None:
        try:
            await self.cache.db.rollback()
        except Exception as e:
            logger.error(f"Rollback after cache failure also failed: {e}")
