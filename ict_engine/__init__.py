"""ICT market structure analysis engine for forex and gold."""

from .core.analyzer import run_ict_analysis
from .core.models import Candle, ICTAnalysis

__version__ = "0.1.0"

__all__ = ["Candle", "ICTAnalysis", "run_ict_analysis"]
