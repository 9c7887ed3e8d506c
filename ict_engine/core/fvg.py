"""
Fair Value Gap detection and fill tracking.

FVG Rules (3 candles, HIGH/LOW based):
- Bullish FVG: candle[i-2].high < candle[i].low
  - Gap zone = candle[i-2].high (bottom) to candle[i].low (top)
- Bearish FVG: candle[i-2].low > candle[i].high
  - Gap zone = candle[i].high (bottom) to candle[i-2].low (top)

Fill tracking:
- Bullish gaps fill from the top down, bearish gaps from the bottom up
- fill_percentage never decreases; 100% is `filled`
- A close through the far side is `invalidated`
- filled and invalidated are terminal
"""

import logging
from dataclasses import replace
from typing import List, Optional, Sequence

from .fibonacci import PriceZone, get_price_zone
from .models import Candle, FairValueGap, FibonacciZone, FVGStatus, ZoneType

logger = logging.getLogger(__name__)

_TERMINAL = (FVGStatus.FILLED, FVGStatus.INVALIDATED)


def _classify(fvg: FairValueGap, fibonacci: Optional[FibonacciZone]) -> FairValueGap:
    """Tag the gap midpoint as premium or discount against the 0.5 level."""
    if fibonacci is None:
        return fvg

    zone = get_price_zone((fvg.top + fvg.bottom) / 2, fibonacci)
    return replace(
        fvg,
        in_premium=zone == PriceZone.PREMIUM,
        in_discount=zone == PriceZone.DISCOUNT,
    )


def _check_fvg(candles: Sequence[Candle], idx: int) -> List[FairValueGap]:
    """
    Check the triple ending at idx for gaps.

    Returns: list of FVGs (empty, or one per direction)
    """
    first = candles[idx - 2]
    third = candles[idx]
    gaps: List[FairValueGap] = []

    if first.high < third.low:
        gaps.append(FairValueGap(
            id=f"fvg-{idx}-bullish",
            type=ZoneType.BULLISH,
            top=third.low,
            bottom=first.high,
            start_time=third.time,
        ))

    if first.low > third.high:
        gaps.append(FairValueGap(
            id=f"fvg-{idx}-bearish",
            type=ZoneType.BEARISH,
            top=first.low,
            bottom=third.high,
            start_time=third.time,
        ))

    return gaps


def detect_fair_value_gaps(
    candles: Sequence[Candle],
    fibonacci: Optional[FibonacciZone] = None,
) -> List[FairValueGap]:
    """
    Find every Fair Value Gap in the series.

    Args:
        candles: Candle series, oldest first
        fibonacci: Optional zone used to tag premium/discount gaps

    Returns:
        List of unfilled FVGs in index order
    """
    n = len(candles)
    if n < 3:
        return []

    fvgs: List[FairValueGap] = []
    for i in range(2, n):
        for fvg in _check_fvg(candles, i):
            fvgs.append(_classify(fvg, fibonacci))

    logger.debug(f"[FVG Detection] bars={n}, found={len(fvgs)}")
    return fvgs


def update_fvg_status(fvg: FairValueGap, candle: Candle) -> FairValueGap:
    """
    Apply the latest candle to a gap.

    Returns a new FairValueGap; the input is left untouched.
    """
    if fvg.status in _TERMINAL:
        return fvg

    gap_size = fvg.top - fvg.bottom
    fill = fvg.fill_percentage
    status = fvg.status

    if fvg.type == ZoneType.BULLISH:
        if gap_size > 0 and candle.low <= fvg.top:
            filled = min(fvg.top - candle.low, gap_size)
            fill = max(fill, filled / gap_size * 100)
        invalidated = candle.close < fvg.bottom
    else:
        if gap_size > 0 and candle.high >= fvg.bottom:
            filled = min(candle.high - fvg.bottom, gap_size)
            fill = max(fill, filled / gap_size * 100)
        invalidated = candle.close > fvg.top

    if fill >= 100:
        fill = 100.0
        status = FVGStatus.FILLED
    elif fill > 0:
        status = FVGStatus.PARTIALLY_FILLED

    if invalidated:
        status = FVGStatus.INVALIDATED

    return replace(fvg, status=status, fill_percentage=fill)
