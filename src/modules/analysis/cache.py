"""Content-addressed cache of tree image analyses."""

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.analysis.schemas import (
    CACHE_NOTE_SUFFIX,
    AnalysisConfidence,
    AnalysisResult,
)
from src.core.base import BaseService
from src.database.models.analysis_cache import TreeImageAnalysisCache
from src.modules.carbon.constants import LandCoverClass


class StoreOutcome(str, Enum):
    STORED = "stored"
    ALREADY_EXISTS = "already_exists"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class AnalysisCache(BaseService):
    """Read-through / write-back store of vision model results keyed by image hash.

    Entries are immutable once written: the first analysis stored for a hash
    wins and later stores report ALREADY_EXISTS. Only ``last_accessed_at``
    changes, on every hit. With ``max_age`` unset entries never expire.
    """

    def __init__(
        self,
        db: AsyncSession,
        max_age: timedelta | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        super().__init__(db)
        self.max_age = max_age
        self.clock = clock

    async def _get_entry(self, image_hash: str) -> TreeImageAnalysisCache | None:
        result = await self.db.execute(
            select(TreeImageAnalysisCache).where(
                TreeImageAnalysisCache.image_hash == image_hash
            )
        )
        return result.scalar_one_or_none()

    def _is_expired(self, entry: TreeImageAnalysisCache) -> bool:
        if self.max_age is None or entry.last_accessed_at is None:
            return False
        return self.clock() - _as_utc(entry.last_accessed_at) > self.max_age

    async def lookup(self, image_hash: str) -> AnalysisResult | None:
        """Return the cached analysis annotated as cache-sourced, or None."""
        entry = await self._get_entry(image_hash)
        if entry is None:
            return None

        if self._is_expired(entry):
            await self.db.delete(entry)
            await self.commit()
            self.logger.info("Evicted expired analysis", image_hash=image_hash)
            return None

        return AnalysisResult(
            tree_count=entry.tree_count,
            land_cover_class=LandCoverClass(entry.land_cover_class),
            estimated_area_hectares=entry.estimated_area_hectares,
            confidence=AnalysisConfidence(entry.confidence),
            analysis_notes=entry.analysis_notes + CACHE_NOTE_SUFFIX,
        )

    async def store(self, image_hash: str, result: AnalysisResult) -> StoreOutcome:
        """Insert a fresh analysis. Database errors other than a duplicate propagate."""
        if await self._get_entry(image_hash) is not None:
            return StoreOutcome.ALREADY_EXISTS

        now = self.clock()
        self.db.add(
            TreeImageAnalysisCache(
                image_hash=image_hash,
                tree_count=result.tree_count,
                land_cover_class=result.land_cover_class.value,
                estimated_area_hectares=result.estimated_area_hectares,
                confidence=result.confidence.value,
                analysis_notes=result.analysis_notes,
                created_at=now,
                last_accessed_at=now,
            )
        )
        try:
            await self.commit()
        except IntegrityError:
            # Concurrent miss on the same image inserted first
            return StoreOutcome.ALREADY_EXISTS

        return StoreOutcome.STORED

    async def touch(self, image_hash: str) -> bool:
        """Record a cache hit. Returns False if the entry no longer exists."""
        result = await self.db.execute(
            update(TreeImageAnalysisCache)
            .where(TreeImageAnalysisCache.image_hash == image_hash)
            .values(last_accessed_at=self.clock())
        )
        await self.commit()
        return result.rowcount > 0

    async def purge_expired(self) -> int:
        """Delete every entry idle for longer than max_age. No-op without max_age."""
        if self.max_age is None:
            return 0

        cutoff = self.clock() - self.max_age
        result = await self.db.execute(
            delete(TreeImageAnalysisCache)
            .where(TreeImageAnalysisCache.last_accessed_at < cutoff)
            .execution_options(synchronize_session=False)
        )
        await self.commit()
        self.logger.info(
            f"Purged {result.rowcount} expired analysis cache entries",
            cutoff=cutoff.isoformat(),
        )
        return result.rowcount
