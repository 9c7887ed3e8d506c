"""
ICT analysis orchestrator.

One pass over multi-timeframe candles:
  1. swings + trend on the higher timeframe (4h) and primary timeframe (1h)
  2. fibonacci from primary swings
  3. order blocks and FVGs, updated against the latest candle and filtered
     to valid / unfilled-or-partially-filled
  4. confluence zones
  5. kill zones from the clock
  6. at most one sweep-and-shift entry signal

A ranging primary trend is fed to the directional detectors as bullish.
The pass keeps no state between calls.
"""

import logging
from typing import List, Mapping, Optional, Sequence

from ..config import EngineSettings
from ..data.candles import sanitize_candles
from .confluence import find_confluence_zones
from .entry import detect_sweep_and_shift, generate_entry_signal
from .fibonacci import calculate_fibonacci
from .fvg import detect_fair_value_gaps, update_fvg_status
from .killzone import Clock, to_utc, get_kill_zone_status
from .models import (
    Candle,
    EntrySignal,
    FVGStatus,
    ICTAnalysis,
    OrderBlockStatus,
    TrendAnalysis,
    TrendDirection,
)
from .orderblock import detect_order_blocks, update_order_block_status
from .structure import analyze_trend, detect_swing_points

logger = logging.getLogger(__name__)

_OPEN_FVG_STATUSES = (FVGStatus.UNFILLED, FVGStatus.PARTIALLY_FILLED)


def create_empty_analysis(symbol: str, timestamp: int, now: Clock = None) -> ICTAnalysis:
    """Zeroed snapshot; kill zones are still evaluated."""
    return ICTAnalysis(
        symbol=symbol,
        timestamp=timestamp,
        trend=TrendAnalysis(
            direction=TrendDirection.RANGING,
            strength=0.0,
            higher_timeframe=TrendDirection.RANGING,
            lower_timeframe=TrendDirection.RANGING,
            structure_breaks=[],
        ),
        swing_points=[],
        fibonacci=None,
        order_blocks=[],
        fair_value_gaps=[],
        confluence_zones=[],
        kill_zones=get_kill_zone_status(symbol, now),
        entry_signals=[],
    )


def run_ict_analysis(
    candles: Mapping[str, Sequence[Candle]],
    symbol: str,
    now: Clock = None,
    settings: Optional[EngineSettings] = None,
) -> ICTAnalysis:
    """
    Run the complete analysis on multi-timeframe candle data.

    Args:
        candles: Timeframe key ("1h", "4h", ...) -> candles, oldest first
        symbol: Instrument, used for pip conversion
        now: Clock reading for kill zones and the snapshot timestamp
        settings: Engine parameters (defaults when omitted)

    Returns:
        ICTAnalysis snapshot
    """
    settings = settings or EngineSettings()
    now = to_utc(now)
    timestamp = int(now.timestamp())

    primary = sanitize_candles(candles.get(settings.primary_timeframe) or [])
    higher = sanitize_candles(candles.get(settings.higher_timeframe) or [])

    if not primary:
        return create_empty_analysis(symbol, timestamp, now)

    swings_higher = detect_swing_points(higher, settings.swing_length)
    trend_higher = analyze_trend(higher, swings_higher)

    swing_points = detect_swing_points(primary, settings.swing_length)
    trend_primary = analyze_trend(primary, swing_points)

    trend = TrendAnalysis(
        direction=trend_primary.direction,
        strength=trend_primary.strength,
        higher_timeframe=trend_higher.direction,
        lower_timeframe=trend_primary.direction,
        structure_breaks=trend_primary.structure_breaks,
    )

    effective = trend.direction
    if effective == TrendDirection.RANGING:
        effective = TrendDirection.BULLISH

    fibonacci = calculate_fibonacci(swing_points, effective)
    current_candle = primary[-1]

    order_blocks = detect_order_blocks(
        primary,
        effective,
        min_displacement=settings.ob_min_displacement,
        lookback=settings.ob_lookback,
    )
    order_blocks = [update_order_block_status(ob, current_candle) for ob in order_blocks]
    order_blocks = [ob for ob in order_blocks if ob.status == OrderBlockStatus.VALID]

    fair_value_gaps = detect_fair_value_gaps(primary, fibonacci)
    fair_value_gaps = [update_fvg_status(fvg, current_candle) for fvg in fair_value_gaps]
    fair_value_gaps = [fvg for fvg in fair_value_gaps if fvg.status in _OPEN_FVG_STATUSES]

    confluence_zones = find_confluence_zones(order_blocks, fair_value_gaps, fibonacci)

    kill_zones = get_kill_zone_status(symbol, now)

    entry_signals: List[EntrySignal] = []
    pattern = detect_sweep_and_shift(primary, swing_points, effective)
    if pattern is not None:
        best_confluence = next(
            (cz for cz in confluence_zones if cz.type == pattern.direction),
            None,
        )
        entry_signals.append(generate_entry_signal(
            pattern,
            best_confluence,
            current_candle.close,
            swing_points,
            order_blocks,
            symbol,
            settings.sl_buffer_pips,
        ))

    logger.debug(
        f"[Analysis] {symbol} bars={len(primary)}, trend={trend.direction.value}, "
        f"obs={len(order_blocks)}, fvgs={len(fair_value_gaps)}, "
        f"confluence={len(confluence_zones)}, signals={len(entry_signals)}"
    )

    return ICTAnalysis(
        symbol=symbol,
        timestamp=timestamp,
        trend=trend,
        swing_points=swing_points,
        fibonacci=fibonacci,
        order_blocks=order_blocks,
        fair_value_gaps=fair_value_gaps,
        confluence_zones=confluence_zones,
        kill_zones=kill_zones,
        entry_signals=entry_signals,
    )
