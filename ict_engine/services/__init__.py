"""Service layer: orchestration and caching."""

from .analysis_service import AnalysisService
from .cache import TTLCache

__all__ = ["AnalysisService", "TTLCache"]
