"""
Candle input boundary.

Providers deliver column-oriented OHLCV data or JSON rows. Both are turned
into `Candle` lists here, and checked before they reach the detectors:
- validate_candles raises InvalidCandleError on the first bad row
- sanitize_candles drops bad rows and keeps going
"""

import csv
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from ..core.models import Candle

logger = logging.getLogger(__name__)


class InvalidCandleError(ValueError):
    """Raised when candle data is malformed."""

    def __init__(self, index: int, reason: str):
        self.index = index
        self.reason = reason
        super().__init__(f"invalid candle at index {index}: {reason}")


@dataclass
class OHLCVData:
    """
    Column-oriented series as returned by market-data providers.
    Timestamps are Unix seconds, ascending.
    """
    timestamps: List[int]
    open: List[float]
    high: List[float]
    low: List[float]
    close: List[float]
    volume: List[float] = field(default_factory=list)

    def __len__(self):
        return len(self.timestamps)

    def is_empty(self):
        return len(self.timestamps) == 0

    def to_candles(self) -> List[Candle]:
        n = len(self.timestamps)
        for name in ("open", "high", "low", "close"):
            if len(getattr(self, name)) != n:
                raise ValueError(f"{name} length {len(getattr(self, name))} != {n}")
        if self.volume and len(self.volume) != n:
            raise ValueError(f"volume length {len(self.volume)} != {n}")

        return [
            Candle(
                time=int(self.timestamps[i]),
                open=float(self.open[i]),
                high=float(self.high[i]),
                low=float(self.low[i]),
                close=float(self.close[i]),
                volume=float(self.volume[i]) if self.volume else None,
            )
            for i in range(n)
        ]

    @classmethod
    def from_candles(cls, candles: Sequence[Candle]) -> "OHLCVData":
        has_volume = bool(candles) and all(c.volume is not None for c in candles)
        return cls(
            timestamps=[c.time for c in candles],
            open=[c.open for c in candles],
            high=[c.high for c in candles],
            low=[c.low for c in candles],
            close=[c.close for c in candles],
            volume=[c.volume for c in candles] if has_volume else [],
        )


def candles_from_records(records: Iterable[Dict[str, Any]]) -> List[Candle]:
    """Build candles from dict rows with time/open/high/low/close[/volume]."""
    candles = []
    for row in records:
        volume = row.get("volume")
        candles.append(Candle(
            time=int(row["time"]),
            open=float(row["open"]),
            high=float(row["high"]),
            low=float(row["low"]),
            close=float(row["close"]),
            volume=float(volume) if volume is not None else None,
        ))
    return candles


def _row_problem(candle: Candle) -> Optional[str]:
    """Reason the candle is malformed, or None."""
    prices = (candle.open, candle.high, candle.low, candle.close)
    if not all(math.isfinite(p) for p in prices):
        return "non-finite price"
    if candle.volume is not None and not math.isfinite(candle.volume):
        return "non-finite volume"
    if min(prices) <= 0:
        return "non-positive price"
    if candle.high < candle.low:
        return f"high {candle.high} < low {candle.low}"
    if not (candle.low <= candle.open <= candle.high and candle.low <= candle.close <= candle.high):
        return "open/close outside high-low range"
    return None


def validate_candles(candles: Sequence[Candle]) -> None:
    """Raise InvalidCandleError on the first malformed or out-of-order candle."""
    prev_time: Optional[int] = None
    for i, candle in enumerate(candles):
        problem = _row_problem(candle)
        if problem is not None:
            raise InvalidCandleError(i, problem)
        if prev_time is not None and candle.time <= prev_time:
            raise InvalidCandleError(i, f"time {candle.time} not after {prev_time}")
        prev_time = candle.time


def sanitize_candles(candles: Sequence[Candle]) -> List[Candle]:
    """
    Drop malformed candles and candles whose time does not advance.

    Returns the clean candles in their original order.
    """
    clean: List[Candle] = []
    dropped = 0

    for candle in candles:
        if _row_problem(candle) is not None:
            dropped += 1
            continue
        if clean and candle.time <= clean[-1].time:
            dropped += 1
            continue
        clean.append(candle)

    if dropped:
        logger.warning(f"[Candles] dropped {dropped} of {len(candles)} malformed or out-of-order candles")

    return clean


def load_csv(filepath: Union[str, Path]) -> OHLCVData:
    """
    Load OHLCV data from a CSV file.

    Columns: time (or timestamp, Unix seconds), open, high, low, close,
    optional volume. Capitalized headers are accepted.
    """
    timestamps = []
    opens = []
    highs = []
    lows = []
    closes = []
    volumes = []

    with open(filepath, "r", newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            time_val = row.get("time") or row.get("timestamp") or row.get("Time") or row.get("Timestamp")
            if time_val is None:
                raise ValueError(f"{filepath}: row {reader.line_num} has no time column")
            timestamps.append(int(float(time_val)))
            opens.append(float(row.get("Open") or row.get("open")))
            highs.append(float(row.get("High") or row.get("high")))
            lows.append(float(row.get("Low") or row.get("low")))
            closes.append(float(row.get("Close") or row.get("close")))
            volume = row.get("Volume") or row.get("volume")
            if volume:
                volumes.append(float(volume))

    if volumes and len(volumes) != len(timestamps):
        volumes = []

    logger.debug(f"[Candles] loaded {len(timestamps)} rows from {filepath}")
    return OHLCVData(
        timestamps=timestamps,
        open=opens,
        high=highs,
        low=lows,
        close=closes,
        volume=volumes,
    )
