"""Tree upload records submitted by contributors."""

from datetime import datetime, timezone
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Float, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class UploadStatus(str, Enum):
    PENDING = "pending"
    ANALYZED = "analyzed"


class TreeUpload(Base):
    """A contributor's tree photo awaiting or holding its carbon estimate."""

    __tablename__ = "tree_uploads"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    # Owned by the external identity provider, no FK
    user_id: Mapped[UUID | None] = mapped_column(Uuid, nullable=True, index=True)
    image_url: Mapped[str] = mapped_column(Text, nullable=False)
    location: Mapped[str | None] = mapped_column(String, nullable=True)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=UploadStatus.PENDING.value
    )
    tree_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    co2_offset: Mapped[float | None] = mapped_column(Float, nullable=True)
    verification_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
