"""Pydantic schemas for the ICTAnalysis output contract.

Field names are snake_case in Python and camelCase on the wire.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..core.models import (
    ConfluenceZone,
    EntrySignal,
    FairValueGap,
    FibonacciZone,
    ICTAnalysis,
    KillZone,
    OrderBlock,
    StructureBreak,
    SwingPoint,
    TrendAnalysis,
)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SwingPointSchema(_CamelModel):
    """Swing point schema."""
    index: int
    time: int
    price: float
    type: str  # "high" or "low"
    strength: float


class StructureBreakSchema(_CamelModel):
    type: str  # "bos" or "choch"
    direction: str  # "bullish" or "bearish"
    price: float
    time: int


class TrendSchema(_CamelModel):
    """Combined trend schema."""
    direction: str  # "bullish", "bearish", "ranging"
    strength: float
    higher_timeframe: str
    lower_timeframe: str
    structure_breaks: List[StructureBreakSchema] = []


class PriceRangeSchema(_CamelModel):
    top: float
    bottom: float


class FibonacciLevelSchema(_CamelModel):
    level: float
    price: float
    label: str


class FibonacciSchema(_CamelModel):
    """Fibonacci zone schema."""
    swing_low: SwingPointSchema
    swing_high: SwingPointSchema
    levels: List[FibonacciLevelSchema]
    premium_zone: PriceRangeSchema
    discount_zone: PriceRangeSchema


class OrderBlockSchema(_CamelModel):
    """Order Block schema."""
    id: str
    type: str  # "bullish" or "bearish"
    top: float
    bottom: float
    start_time: int
    status: str  # "valid", "mitigated", "invalidated"
    strength: float
    retest_count: int = 0


class FairValueGapSchema(_CamelModel):
    """Fair Value Gap schema."""
    id: str
    type: str
    top: float
    bottom: float
    start_time: int
    status: str  # "unfilled", "partially_filled", "filled", "invalidated"
    fill_percentage: float = 0.0
    in_premium: bool = False
    in_discount: bool = False


class ConfluenceZoneSchema(_CamelModel):
    """OB x FVG confluence schema."""
    id: str
    order_block: Optional[OrderBlockSchema] = None
    fair_value_gap: Optional[FairValueGapSchema] = None
    type: str
    overlap_top: float
    overlap_bottom: float
    in_optimal_zone: bool
    strength: float


class KillZoneSchema(_CamelModel):
    """Kill zone schema."""
    name: str
    start_utc: str  # "HH:MM"
    end_utc: str
    is_active: bool
    volatility_expected: str
    time_remaining: Optional[int] = None  # seconds


class EntrySignalSchema(_CamelModel):
    """Entry signal schema."""
    id: str
    type: str
    direction: str  # "long" or "short"
    sweep_time: Optional[int] = None
    shift_time: Optional[int] = None
    entry_zone: PriceRangeSchema
    suggested_entry: float
    suggested_sl: float
    suggested_tp1: float
    suggested_tp2: Optional[float] = None
    risk_reward_ratio: float
    confidence: float
    sl_source: str
    tp_source: str
    sl_distance_pips: float


class ICTAnalysisSchema(_CamelModel):
    """Response schema for one analysis pass."""
    symbol: str
    timestamp: int
    trend: TrendSchema
    swing_points: List[SwingPointSchema] = []
    fibonacci: Optional[FibonacciSchema] = None
    order_blocks: List[OrderBlockSchema] = []
    fair_value_gaps: List[FairValueGapSchema] = []
    confluence_zones: List[ConfluenceZoneSchema] = []
    kill_zones: List[KillZoneSchema] = []
    entry_signals: List[EntrySignalSchema] = []


def _swing_to_schema(sp: SwingPoint) -> SwingPointSchema:
    return SwingPointSchema(
        index=sp.index,
        time=sp.time,
        price=float(sp.price),
        type=sp.type.value,
        strength=float(sp.strength),
    )


def _break_to_schema(sb: StructureBreak) -> StructureBreakSchema:
    return StructureBreakSchema(
        type=sb.type.value,
        direction=sb.direction.value,
        price=float(sb.price),
        time=sb.time,
    )


def _trend_to_schema(trend: TrendAnalysis) -> TrendSchema:
    return TrendSchema(
        direction=trend.direction.value,
        strength=float(trend.strength),
        higher_timeframe=trend.higher_timeframe.value,
        lower_timeframe=trend.lower_timeframe.value,
        structure_breaks=[_break_to_schema(sb) for sb in trend.structure_breaks],
    )


def _fibonacci_to_schema(fib: FibonacciZone) -> FibonacciSchema:
    return FibonacciSchema(
        swing_low=_swing_to_schema(fib.swing_low),
        swing_high=_swing_to_schema(fib.swing_high),
        levels=[
            FibonacciLevelSchema(level=lv.level, price=float(lv.price), label=lv.label)
            for lv in fib.levels
        ],
        premium_zone=PriceRangeSchema(top=fib.premium_zone.top, bottom=fib.premium_zone.bottom),
        discount_zone=PriceRangeSchema(top=fib.discount_zone.top, bottom=fib.discount_zone.bottom),
    )


def _ob_to_schema(ob: OrderBlock) -> OrderBlockSchema:
    """Convert OrderBlock dataclass to Pydantic schema."""
    return OrderBlockSchema(
        id=ob.id,
        type=ob.type.value,
        top=float(ob.top),
        bottom=float(ob.bottom),
        start_time=ob.start_time,
        status=ob.status.value,
        strength=float(ob.strength),
        retest_count=ob.retest_count,
    )


def _fvg_to_schema(fvg: FairValueGap) -> FairValueGapSchema:
    """Convert FairValueGap dataclass to Pydantic schema."""
    return FairValueGapSchema(
        id=fvg.id,
        type=fvg.type.value,
        top=float(fvg.top),
        bottom=float(fvg.bottom),
        start_time=fvg.start_time,
        status=fvg.status.value,
        fill_percentage=float(fvg.fill_percentage),
        in_premium=fvg.in_premium,
        in_discount=fvg.in_discount,
    )


def _confluence_to_schema(cz: ConfluenceZone) -> ConfluenceZoneSchema:
    return ConfluenceZoneSchema(
        id=cz.id,
        order_block=_ob_to_schema(cz.order_block) if cz.order_block is not None else None,
        fair_value_gap=_fvg_to_schema(cz.fair_value_gap) if cz.fair_value_gap is not None else None,
        type=cz.type.value,
        overlap_top=float(cz.overlap_top),
        overlap_bottom=float(cz.overlap_bottom),
        in_optimal_zone=cz.in_optimal_zone,
        strength=float(cz.strength),
    )


def _kill_zone_to_schema(kz: KillZone) -> KillZoneSchema:
    return KillZoneSchema(
        name=kz.name.value,
        start_utc=kz.start_utc,
        end_utc=kz.end_utc,
        is_active=kz.is_active,
        volatility_expected=kz.volatility_expected.value,
        time_remaining=kz.time_remaining,
    )


def _signal_to_schema(signal: EntrySignal) -> EntrySignalSchema:
    return EntrySignalSchema(
        id=signal.id,
        type=signal.type.value,
        direction=signal.direction.value,
        sweep_time=signal.sweep_time,
        shift_time=signal.shift_time,
        entry_zone=PriceRangeSchema(top=signal.entry_zone.top, bottom=signal.entry_zone.bottom),
        suggested_entry=float(signal.suggested_entry),
        suggested_sl=float(signal.suggested_sl),
        suggested_tp1=float(signal.suggested_tp1),
        suggested_tp2=float(signal.suggested_tp2) if signal.suggested_tp2 is not None else None,
        risk_reward_ratio=float(signal.risk_reward_ratio),
        confidence=float(signal.confidence),
        sl_source=signal.sl_source.value,
        tp_source=signal.tp_source.value,
        sl_distance_pips=float(signal.sl_distance_pips),
    )


def analysis_to_schema(analysis: ICTAnalysis) -> ICTAnalysisSchema:
    """Convert an ICTAnalysis snapshot to its Pydantic schema."""
    return ICTAnalysisSchema(
        symbol=analysis.symbol,
        timestamp=analysis.timestamp,
        trend=_trend_to_schema(analysis.trend),
        swing_points=[_swing_to_schema(sp) for sp in analysis.swing_points],
        fibonacci=_fibonacci_to_schema(analysis.fibonacci) if analysis.fibonacci is not None else None,
        order_blocks=[_ob_to_schema(ob) for ob in analysis.order_blocks],
        fair_value_gaps=[_fvg_to_schema(fvg) for fvg in analysis.fair_value_gaps],
        confluence_zones=[_confluence_to_schema(cz) for cz in analysis.confluence_zones],
        kill_zones=[_kill_zone_to_schema(kz) for kz in analysis.kill_zones],
        entry_signals=[_signal_to_schema(s) for s in analysis.entry_signals],
    )


def analysis_to_json(analysis: ICTAnalysis, indent: Optional[int] = None) -> str:
    """Serialize an ICTAnalysis snapshot to camelCase JSON."""
    return analysis_to_schema(analysis).model_dump_json(by_alias=True, indent=indent)
