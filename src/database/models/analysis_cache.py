"""Cached vision-model analyses keyed by image hash."""

from datetime import datetime, timezone
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Float, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class TreeImageAnalysisCache(Base):
    """One row per distinct image reference that has been analyzed."""

    __tablename__ = "tree_image_analysis_cache"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    image_hash: Mapped[str] = mapped_column(
        String(64), unique=True, index=True, nullable=False
    )

    tree_count: Mapped[int] = mapped_column(Integer, nullable=False)
    land_cover_class: Mapped[str] = mapped_column(String, nullable=False)
    estimated_area_hectares: Mapped[float] = mapped_column(Float, nullable=False)
    confidence: Mapped[str] = mapped_column(String, nullable=False)
    analysis_notes: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    last_accessed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
