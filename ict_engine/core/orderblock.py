"""
Order Block detection and lifecycle.

OB Rules (displacement):
- Bullish OB: bearish candle followed by a bullish candle whose body is
  more than 2x the setup body and more than `min_displacement` of its open
  - OB zone = setup candle's full high-low range
- Bearish OB: bullish candle followed by a 2x bearish displacement
  - OB zone = setup candle's full high-low range

Lifecycle (checked against the latest candle):
- valid -> mitigated when price wicks back into the zone (retest_count += 1)
- valid|mitigated -> invalidated when price closes through the far side
- invalidated is terminal
"""

import logging
from dataclasses import replace
from typing import List, Optional, Sequence

from .models import (
    Candle,
    OrderBlock,
    OrderBlockStatus,
    TrendDirection,
    ZoneType,
)

logger = logging.getLogger(__name__)

DISPLACEMENT_BODY_MULTIPLIER = 2.0


def _is_displacement(setup: Candle, displacement: Candle, min_displacement: float) -> bool:
    """Displacement body > 2x setup body and > min_displacement of its open."""
    if displacement.open <= 0:
        return False
    return (
        displacement.body > setup.body * DISPLACEMENT_BODY_MULTIPLIER
        and displacement.body / displacement.open > min_displacement
    )


def _order_block_strength(setup: Candle, displacement: Candle) -> float:
    """
    Score 1..100. Large displacement raises it, a large setup body lowers it.

    strength = displacement% * 20 * (1 - setup_body_ratio * 0.5)
    """
    displacement_pct = displacement.body / displacement.open * 100
    setup_ratio = setup.body / setup.range if setup.range > 0 else 0.0

    strength = (displacement_pct * 20) * (1 - setup_ratio * 0.5)
    return min(max(strength, 1.0), 100.0)


def _check_ob(
    candles: Sequence[Candle],
    idx: int,
    min_displacement: float,
) -> Optional[OrderBlock]:
    """
    Check if the candle at idx is the setup candle of an order block.

    Returns: OrderBlock or None
    """
    setup = candles[idx]
    displacement = candles[idx + 1]

    if not _is_displacement(setup, displacement, min_displacement):
        return None

    if setup.is_bearish and displacement.is_bullish:
        direction = ZoneType.BULLISH
    elif setup.is_bullish and displacement.is_bearish:
        direction = ZoneType.BEARISH
    else:
        return None

    return OrderBlock(
        id=f"ob-{idx}-{direction.value}",
        type=direction,
        top=setup.high,
        bottom=setup.low,
        start_time=setup.time,
        status=OrderBlockStatus.VALID,
        strength=_order_block_strength(setup, displacement),
        retest_count=0,
    )


def find_all_order_blocks(
    candles: Sequence[Candle],
    min_displacement: float = 0.002,
    lookback: int = 50,
) -> List[OrderBlock]:
    """
    Find every order block candidate in the last `lookback` candles,
    both directions, unfiltered, in index order.
    """
    if lookback < 1:
        raise ValueError("lookback must be >= 1")

    n = len(candles)
    blocks: List[OrderBlock] = []
    if n < 2:
        return blocks

    start_idx = max(0, n - lookback)
    for i in range(start_idx, n - 1):
        ob = _check_ob(candles, i, min_displacement)
        if ob is not None:
            blocks.append(ob)

    return blocks


def filter_order_blocks(
    order_blocks: Sequence[OrderBlock],
    trend: TrendDirection,
    limit: int = 3,
) -> List[OrderBlock]:
    """
    Keep the trend-side blocks nearest to price.

    Bullish trend: the `limit` lowest-bottom valid bullish blocks (support).
    Bearish trend: the `limit` highest-top valid bearish blocks (resistance).
    Counter-trend blocks are dropped regardless of strength.
    """
    active = [ob for ob in order_blocks if ob.status == OrderBlockStatus.VALID]

    if trend == TrendDirection.BEARISH:
        bearish = [ob for ob in active if ob.type == ZoneType.BEARISH]
        bearish.sort(key=lambda ob: -ob.top)
        return bearish[:limit]

    bullish = [ob for ob in active if ob.type == ZoneType.BULLISH]
    bullish.sort(key=lambda ob: ob.bottom)
    return bullish[:limit]


def detect_order_blocks(
    candles: Sequence[Candle],
    trend: TrendDirection,
    min_displacement: float = 0.002,
    lookback: int = 50,
) -> List[OrderBlock]:
    """
    Detect order blocks and keep the most relevant ones for the trend.

    Args:
        candles: Candle series, oldest first
        trend: Directional bias (ranging is treated as bullish)
        min_displacement: Minimum displacement body as a fraction of its open
        lookback: Number of most recent candles scanned

    Returns:
        Up to 3 valid order blocks on the trend side
    """
    candidates = find_all_order_blocks(candles, min_displacement, lookback)
    kept = filter_order_blocks(candidates, trend)

    logger.debug(
        f"[OB Detection] bars={len(candles)}, lookback={lookback}, "
        f"found={len(candidates)}, kept={len(kept)}, trend={trend.value}"
    )
    return kept


def update_order_block_status(ob: OrderBlock, candle: Candle) -> OrderBlock:
    """
    Apply the latest candle to an order block.

    Returns a new OrderBlock; the input is left untouched.
    """
    if ob.status == OrderBlockStatus.INVALIDATED:
        return ob

    status = ob.status
    retest_count = ob.retest_count

    if ob.type == ZoneType.BULLISH:
        if ob.bottom <= candle.low <= ob.top:
            retest_count += 1
            status = OrderBlockStatus.MITIGATED
        if candle.close < ob.bottom:
            status = OrderBlockStatus.INVALIDATED
    else:
        if ob.bottom <= candle.high <= ob.top:
            retest_count += 1
            status = OrderBlockStatus.MITIGATED
        if candle.close > ob.top:
            status = OrderBlockStatus.INVALIDATED

    return replace(ob, status=status, retest_count=retest_count)
