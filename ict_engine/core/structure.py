"""
Market structure detection: pivot swings, trend bias and break of structure.

Rules:
- Pivot swings: `swing_length` bars on each side, strict inequality.
  A bar whose high equals a neighbour's high is not a swing high.
- Trend: >= 2 higher highs and >= 2 higher lows is bullish, >= 2 lower
  lows and >= 2 lower highs is bearish, anything else is ranging.
- BOS: close beyond the most recent swing point formed before the bar.
  Every breaking bar is reported, consecutive breaks are not merged.
"""

import logging
from typing import List, Optional, Sequence

import numpy as np

from .models import (
    Candle,
    StructureBreak,
    StructureBreakType,
    SwingPoint,
    SwingType,
    TrendDirection,
    TrendResult,
    ZoneType,
    as_arrays,
)

logger = logging.getLogger(__name__)

# Keeps the consistency ratio finite when there are no swings at all
_STRENGTH_EPSILON = 0.01


def detect_swing_points(
    candles: Sequence[Candle],
    swing_length: int = 5,
) -> List[SwingPoint]:
    """
    Find pivot swing highs and lows.

    A swing high at index i requires:
      high[i] > high[i-swing_length:i] AND high[i] > high[i+1:i+swing_length+1]

    A swing low at index i requires:
      low[i] < low[i-swing_length:i] AND low[i] < low[i+1:i+swing_length+1]

    Args:
        candles: Candle series, oldest first
        swing_length: Bars required on each side of the pivot

    Returns:
        List of SwingPoint sorted by index (highs and lows interleaved)
    """
    if swing_length < 1:
        raise ValueError("swing_length must be >= 1")

    n = len(candles)
    swings: List[SwingPoint] = []

    if n < swing_length * 2 + 1:
        return swings

    _, high, low, _ = as_arrays(candles)

    for i in range(swing_length, n - swing_length):
        left_high_max = np.max(high[i - swing_length:i])
        right_high_max = np.max(high[i + 1:i + swing_length + 1])

        if high[i] > left_high_max and high[i] > right_high_max:
            swings.append(SwingPoint(
                index=i,
                time=candles[i].time,
                price=float(high[i]),
                type=SwingType.HIGH,
                strength=_swing_strength(high, low, i, SwingType.HIGH, swing_length),
            ))

        left_low_min = np.min(low[i - swing_length:i])
        right_low_min = np.min(low[i + 1:i + swing_length + 1])

        if low[i] < left_low_min and low[i] < right_low_min:
            swings.append(SwingPoint(
                index=i,
                time=candles[i].time,
                price=float(low[i]),
                type=SwingType.LOW,
                strength=_swing_strength(high, low, i, SwingType.LOW, swing_length),
            ))

    logger.debug(f"[Swings] bars={n}, length={swing_length}, found={len(swings)}")
    return swings


def _swing_strength(
    high: np.ndarray,
    low: np.ndarray,
    idx: int,
    swing_type: SwingType,
    swing_length: int,
) -> float:
    """
    Average margin of the pivot over its neighbours as a percentage of
    price, scaled x10 and clamped to [1, 100].
    """
    offsets = np.arange(1, swing_length + 1)
    left = idx - offsets
    right = idx + offsets

    if swing_type == SwingType.HIGH:
        price = high[idx]
        diffs = price - np.maximum(high[left], high[right])
    else:
        price = low[idx]
        diffs = np.minimum(low[left], low[right]) - price

    # Each offset covers two neighbours
    avg_diff = float(np.sum(diffs)) / (2 * swing_length)
    if price == 0:
        return 1.0

    strength_pct = avg_diff / price * 100
    return float(min(max(strength_pct * 10, 1.0), 100.0))


def _count_rising(points: List[SwingPoint]) -> int:
    return sum(1 for prev, cur in zip(points, points[1:]) if cur.price > prev.price)


def _count_falling(points: List[SwingPoint]) -> int:
    return sum(1 for prev, cur in zip(points, points[1:]) if cur.price < prev.price)


def _trend_strength(
    higher_highs: int,
    lower_lows: int,
    higher_lows: int,
    lower_highs: int,
    direction: TrendDirection,
) -> float:
    if direction == TrendDirection.RANGING:
        return 0.0

    if direction == TrendDirection.BULLISH:
        supporting = higher_highs + higher_lows
        opposing = lower_highs + lower_lows
    else:
        supporting = lower_lows + lower_highs
        opposing = higher_highs + higher_lows

    consistency = supporting / (supporting + opposing + _STRENGTH_EPSILON)
    return min(consistency * 100, 100.0)


def analyze_trend(
    candles: Sequence[Candle],
    swing_points: Sequence[SwingPoint],
) -> TrendResult:
    """
    Classify trend direction from swing sequence and collect structure breaks.

    Args:
        candles: Candle series the swings were detected on
        swing_points: Output of detect_swing_points

    Returns:
        TrendResult with direction, strength (0-100) and structure breaks
    """
    highs = [s for s in swing_points if s.type == SwingType.HIGH]
    lows = [s for s in swing_points if s.type == SwingType.LOW]

    higher_highs = _count_rising(highs)
    lower_highs = _count_falling(highs)
    higher_lows = _count_rising(lows)
    lower_lows = _count_falling(lows)

    direction = TrendDirection.RANGING
    if higher_highs >= 2 and higher_lows >= 2:
        direction = TrendDirection.BULLISH
    elif lower_lows >= 2 and lower_highs >= 2:
        direction = TrendDirection.BEARISH

    strength = _trend_strength(higher_highs, lower_lows, higher_lows, lower_highs, direction)

    return TrendResult(
        direction=direction,
        strength=strength,
        structure_breaks=detect_structure_breaks(candles, swing_points),
    )


def _most_recent_before(points: List[SwingPoint], index: int) -> Optional[SwingPoint]:
    recent = None
    for point in points:
        if point.index >= index:
            break
        recent = point
    return recent


def detect_structure_breaks(
    candles: Sequence[Candle],
    swing_points: Sequence[SwingPoint],
) -> List[StructureBreak]:
    """
    Detect break of structure events.

    - Bullish BOS: close > most recent swing high with index < bar index
    - Bearish BOS: close < most recent swing low with index < bar index

    Returns:
        List of StructureBreak in bar order
    """
    highs = sorted((s for s in swing_points if s.type == SwingType.HIGH), key=lambda s: s.index)
    lows = sorted((s for s in swing_points if s.type == SwingType.LOW), key=lambda s: s.index)

    breaks: List[StructureBreak] = []
    if not highs and not lows:
        return breaks

    for i, candle in enumerate(candles):
        recent_high = _most_recent_before(highs, i)
        if recent_high is not None and candle.close > recent_high.price:
            breaks.append(StructureBreak(
                type=StructureBreakType.BOS,
                direction=ZoneType.BULLISH,
                price=candle.close,
                time=candle.time,
            ))

        recent_low = _most_recent_before(lows, i)
        if recent_low is not None and candle.close < recent_low.price:
            breaks.append(StructureBreak(
                type=StructureBreakType.BOS,
                direction=ZoneType.BEARISH,
                price=candle.close,
                time=candle.time,
            ))

    return breaks
