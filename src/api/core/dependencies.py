import random
from typing import Annotated, AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.modules.analysis.analyzer import TreeImageAnalyzer
from src.modules.analysis.cache import AnalysisCache
from src.modules.analysis.infrastructure.vision_client import (
    VisionModelClient,
    get_vision_client,
)
from src.utils.settings.cache import AnalysisCacheSettings


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Get database session from app state."""
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        yield session


def get_random_source() -> random.Random:
    """Entropy-backed random source for the carbon estimation engine."""
    return random.SystemRandom()


async def get_analysis_cache(
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> AnalysisCache:
    """Get analysis cache bound to the request's database session."""
    return AnalysisCache(db, max_age=AnalysisCacheSettings().max_age)


async def get_tree_image_analyzer(
    cache: Annotated[AnalysisCache, Depends(get_analysis_cache)],
    client: Annotated[VisionModelClient, Depends(get_vision_client)],
) -> TreeImageAnalyzer:
    """Get tree image analyzer wired to the cache and vision model client."""
    return TreeImageAnalyzer(cache, client)


AsyncSessionDep = Annotated[AsyncSession, Depends(get_db_session)]
RandomSourceDep = Annotated[random.Random, Depends(get_random_source)]
VisionClientDep = Annotated[VisionModelClient, Depends(get_vision_client)]
AnalysisCacheDep = Annotated[AnalysisCache, Depends(get_analysis_cache)]
TreeImageAnalyzerDep = Annotated[TreeImageAnalyzer, Depends(get_tree_image_analyzer)]
