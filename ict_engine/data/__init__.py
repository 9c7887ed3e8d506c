"""Candle input boundary and demo data."""

from .candles import (
    InvalidCandleError,
    OHLCVData,
    candles_from_records,
    load_csv,
    sanitize_candles,
    validate_candles,
)
from .demo import generate_demo_candles, get_demo_price

__all__ = [
    "InvalidCandleError",
    "OHLCVData",
    "candles_from_records",
    "load_csv",
    "sanitize_candles",
    "validate_candles",
    "generate_demo_candles",
    "get_demo_price",
]
