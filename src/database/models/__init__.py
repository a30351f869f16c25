"""Database models for the Tree Carbon API."""

from .analysis_cache import TreeImageAnalysisCache
from .base import Base
from .tree_uploads import TreeUpload, UploadStatus

__all__ = [
    # Base
    "Base",
    # Enums
    "UploadStatus",
    # Models
    "TreeImageAnalysisCache",
    "TreeUpload",
]
