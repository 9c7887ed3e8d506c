"""
Sweep-and-shift entry signals.

Pattern:
- Bullish sweep: a candle's low pierces a known swing low and it closes
  back above it (liquidity grab below)
- Bearish sweep: a candle's high pierces a known swing high and it closes
  back below it
- Shift: within the next 5 candles, a candle in the reversal direction
  whose body is more than 60% of its range

Signal (long shown, short mirrors):
- Entry: confluence zone bottom if one exists, else the shift close
- SL: confluence bottom -> nearest valid bullish OB bottom -> sweep low,
  each minus the pip buffer
- TP1: latest swing high before the sweep above entry -> 2R fallback
- TP2: next swing high above TP1, if any
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..calculations.lot_size import calculate_pips, pips_to_price
from .models import (
    Candle,
    ConfluenceZone,
    EntryDirection,
    EntrySignal,
    EntrySignalType,
    OrderBlock,
    OrderBlockStatus,
    PriceRange,
    SLSource,
    SwingPoint,
    SwingType,
    TPSource,
    TrendDirection,
    ZoneType,
)

logger = logging.getLogger(__name__)

MIN_CANDLES = 10
RECENT_WINDOW = 20
SWEEP_CANDIDATES = 5
SWING_PROXIMITY = 20
SHIFT_SEARCH = 5
SHIFT_BODY_RATIO = 0.6
FALLBACK_REWARD_RATIO = 2.0


@dataclass
class SweepShiftPattern:
    sweep_index: int
    sweep_price: float
    sweep_time: int
    swing_point: SwingPoint
    shift_index: int
    shift_candle: Candle
    direction: ZoneType
    strength: float


def _body_ratio(candle: Candle) -> float:
    if candle.range <= 0:
        return 0.0
    return candle.body / candle.range


def _find_shift_candle(
    candles: Sequence[Candle],
    start_idx: int,
    direction: ZoneType,
) -> Optional[Tuple[int, Candle]]:
    """First strong candle in the reversal direction within SHIFT_SEARCH bars."""
    for i in range(start_idx, min(start_idx + SHIFT_SEARCH, len(candles))):
        candle = candles[i]
        if _body_ratio(candle) <= SHIFT_BODY_RATIO:
            continue
        if direction == ZoneType.BULLISH and candle.is_bullish:
            return i, candle
        if direction == ZoneType.BEARISH and candle.is_bearish:
            return i, candle
    return None


def _pattern_strength(shift: Candle) -> float:
    """bodyRatio * 40 + shift size % * 10, clamped to [20, 100]."""
    shift_size_pct = shift.body / shift.open * 100 if shift.open > 0 else 0.0
    strength = _body_ratio(shift) * 40 + shift_size_pct * 10
    return min(max(strength, 20.0), 100.0)


def _sweep_direction(candle: Candle, swing: SwingPoint) -> Optional[ZoneType]:
    if swing.type == SwingType.LOW and candle.low < swing.price < candle.close:
        return ZoneType.BULLISH
    if swing.type == SwingType.HIGH and candle.high > swing.price > candle.close:
        return ZoneType.BEARISH
    return None


def detect_sweep_and_shift(
    candles: Sequence[Candle],
    swing_points: Sequence[SwingPoint],
    trend: TrendDirection = TrendDirection.BULLISH,
) -> Optional[SweepShiftPattern]:
    """
    Find the most recent liquidity sweep followed by a shift.

    Sweep candidates are the last few candles before the current one,
    scanned newest first. For each candidate, swings formed before it
    and within SWING_PROXIMITY bars are tried newest first; the first
    swept swing with a confirming shift wins.

    Args:
        candles: Candle series, oldest first
        swing_points: Swings detected on the same series
        trend: Directional bias; both directions are searched

    Returns:
        SweepShiftPattern or None
    """
    n = len(candles)
    if n < MIN_CANDLES or not swing_points:
        return None

    window_start = max(0, n - RECENT_WINDOW)
    first_candidate = max(window_start, n - SWEEP_CANDIDATES)
    swings_newest_first = sorted(swing_points, key=lambda s: -s.index)

    for idx in range(n - 2, first_candidate - 1, -1):
        candle = candles[idx]

        for swing in swings_newest_first:
            if swing.index >= idx or idx - swing.index >= SWING_PROXIMITY:
                continue

            direction = _sweep_direction(candle, swing)
            if direction is None:
                continue

            shift = _find_shift_candle(candles, idx + 1, direction)
            if shift is None:
                continue

            shift_index, shift_candle = shift
            pattern = SweepShiftPattern(
                sweep_index=idx,
                sweep_price=candle.low if direction == ZoneType.BULLISH else candle.high,
                sweep_time=candle.time,
                swing_point=swing,
                shift_index=shift_index,
                shift_candle=shift_candle,
                direction=direction,
                strength=_pattern_strength(shift_candle),
            )
            logger.debug(
                f"[Sweep] dir={direction.value}, sweep_idx={idx}, "
                f"swing_idx={swing.index}, shift_idx={shift_index}, trend={trend.value}"
            )
            return pattern

    return None


def _nearest_bullish_ob_bottom(order_blocks: Sequence[OrderBlock], current_price: float) -> Optional[float]:
    """Bottom of the highest valid bullish OB fully below price."""
    bottoms = [
        ob.bottom for ob in order_blocks
        if ob.type == ZoneType.BULLISH and ob.status == OrderBlockStatus.VALID and ob.top < current_price
    ]
    return max(bottoms) if bottoms else None


def _nearest_bearish_ob_top(order_blocks: Sequence[OrderBlock], current_price: float) -> Optional[float]:
    """Top of the lowest valid bearish OB fully above price."""
    tops = [
        ob.top for ob in order_blocks
        if ob.type == ZoneType.BEARISH and ob.status == OrderBlockStatus.VALID and ob.bottom > current_price
    ]
    return min(tops) if tops else None


def _previous_swing_beyond(
    swing_points: Sequence[SwingPoint],
    before_index: int,
    swing_type: SwingType,
    entry: float,
) -> Optional[SwingPoint]:
    """Most recent swing of `swing_type` before `before_index` on the profit side of entry."""
    candidates: List[SwingPoint] = []
    for sp in swing_points:
        if sp.type != swing_type or sp.index >= before_index:
            continue
        if swing_type == SwingType.HIGH and sp.price > entry:
            candidates.append(sp)
        elif swing_type == SwingType.LOW and sp.price < entry:
            candidates.append(sp)

    if not candidates:
        return None
    return max(candidates, key=lambda sp: sp.index)


def generate_entry_signal(
    pattern: SweepShiftPattern,
    confluence_zone: Optional[ConfluenceZone],
    current_price: float,
    swing_points: Sequence[SwingPoint] = (),
    order_blocks: Sequence[OrderBlock] = (),
    symbol: str = "XAUUSD",
    buffer_pips: float = 5,
) -> EntrySignal:
    """
    Turn a sweep-and-shift pattern into entry, stop and targets.

    Args:
        pattern: Output of detect_sweep_and_shift
        confluence_zone: Best same-direction confluence zone, if any
        current_price: Latest close, used to pick order blocks for the stop
        swing_points: Swings used for targets
        order_blocks: Valid order blocks used as the second stop source
        symbol: Instrument, for pip conversion
        buffer_pips: Distance placed beyond the stop source

    Returns:
        EntrySignal
    """
    direction = EntryDirection.LONG if pattern.direction == ZoneType.BULLISH else EntryDirection.SHORT
    buffer = pips_to_price(buffer_pips, symbol)
    shift = pattern.shift_candle

    if confluence_zone is not None:
        entry_zone = PriceRange(top=confluence_zone.overlap_top, bottom=confluence_zone.overlap_bottom)
    else:
        entry_zone = PriceRange(top=shift.high, bottom=shift.low)

    if direction == EntryDirection.LONG:
        entry = confluence_zone.overlap_bottom if confluence_zone is not None else shift.close

        ob_bottom = _nearest_bullish_ob_bottom(order_blocks, current_price)
        if confluence_zone is not None:
            stop_loss, sl_source = confluence_zone.overlap_bottom - buffer, SLSource.CONFLUENCE_ZONE
        elif ob_bottom is not None:
            stop_loss, sl_source = ob_bottom - buffer, SLSource.ORDER_BLOCK
        else:
            stop_loss, sl_source = pattern.sweep_price - buffer, SLSource.SWEEP_PRICE

        target = _previous_swing_beyond(swing_points, pattern.sweep_index, SwingType.HIGH, entry)
        if target is not None:
            tp1, tp_source = target.price, TPSource.SWING_POINT
        else:
            tp1 = entry + abs(entry - stop_loss) * FALLBACK_REWARD_RATIO
            tp_source = TPSource.FIXED_RATIO

        further = [sp.price for sp in swing_points if sp.type == SwingType.HIGH and sp.price > tp1]
        tp2 = min(further) if further else None

    else:
        entry = confluence_zone.overlap_top if confluence_zone is not None else shift.close

        ob_top = _nearest_bearish_ob_top(order_blocks, current_price)
        if confluence_zone is not None:
            stop_loss, sl_source = confluence_zone.overlap_top + buffer, SLSource.CONFLUENCE_ZONE
        elif ob_top is not None:
            stop_loss, sl_source = ob_top + buffer, SLSource.ORDER_BLOCK
        else:
            stop_loss, sl_source = pattern.sweep_price + buffer, SLSource.SWEEP_PRICE

        target = _previous_swing_beyond(swing_points, pattern.sweep_index, SwingType.LOW, entry)
        if target is not None:
            tp1, tp_source = target.price, TPSource.SWING_POINT
        else:
            tp1 = entry - abs(entry - stop_loss) * FALLBACK_REWARD_RATIO
            tp_source = TPSource.FIXED_RATIO

        further = [sp.price for sp in swing_points if sp.type == SwingType.LOW and sp.price < tp1]
        tp2 = max(further) if further else None

    risk = abs(entry - stop_loss)
    reward = abs(tp1 - entry)
    risk_reward = round(reward / risk, 2) if risk > 0 else FALLBACK_REWARD_RATIO

    confidence = pattern.strength
    if confluence_zone is not None:
        confidence += confluence_zone.strength * 0.5

    return EntrySignal(
        id=f"signal-{pattern.sweep_time}",
        type=EntrySignalType.SWEEP_AND_SHIFT,
        direction=direction,
        sweep_time=pattern.sweep_time,
        shift_time=shift.time,
        entry_zone=entry_zone,
        suggested_entry=entry,
        suggested_sl=stop_loss,
        suggested_tp1=tp1,
        suggested_tp2=tp2,
        risk_reward_ratio=risk_reward,
        confidence=min(confidence, 100.0),
        sl_source=sl_source,
        tp_source=tp_source,
        sl_distance_pips=calculate_pips(entry, stop_loss, symbol),
    )
