"""Alert system for the ICT engine."""

from .alert_engine import (
    Alert,
    AlertConfig,
    AlertEngine,
    AlertPriority,
    AlertStore,
    AlertType,
)

__all__ = [
    "Alert",
    "AlertConfig",
    "AlertEngine",
    "AlertPriority",
    "AlertStore",
    "AlertType",
]
