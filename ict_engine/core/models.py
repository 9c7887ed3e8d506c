"""
Data model for the ICT analysis engine.

All prices are floats, all times are Unix seconds. Series are ordered
oldest first. Lifecycle updates return new instances, nothing here is
mutated in place by the detectors.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple

import numpy as np


class SwingType(Enum):
    HIGH = "high"
    LOW = "low"


class ZoneType(Enum):
    """Direction of an order block, FVG or confluence zone."""
    BULLISH = "bullish"
    BEARISH = "bearish"


class TrendDirection(Enum):
    BULLISH = "bullish"
    BEARISH = "bearish"
    RANGING = "ranging"


class StructureBreakType(Enum):
    BOS = "bos"
    CHOCH = "choch"


class OrderBlockStatus(Enum):
    VALID = "valid"
    MITIGATED = "mitigated"
    INVALIDATED = "invalidated"


class FVGStatus(Enum):
    UNFILLED = "unfilled"
    PARTIALLY_FILLED = "partially_filled"
    FILLED = "filled"
    INVALIDATED = "invalidated"


class KillZoneName(Enum):
    LONDON = "london"
    NEW_YORK_AM = "new_york_am"
    NEW_YORK_PM = "new_york_pm"
    ASIAN = "asian"


class Volatility(Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class EntrySignalType(Enum):
    SWEEP_AND_SHIFT = "sweep_and_shift"
    ORDERBLOCK_RETEST = "orderblock_retest"
    FVG_FILL = "fvg_fill"


class EntryDirection(Enum):
    LONG = "long"
    SHORT = "short"


class SLSource(Enum):
    CONFLUENCE_ZONE = "confluence_zone"
    ORDER_BLOCK = "order_block"
    SWEEP_PRICE = "sweep_price"


class TPSource(Enum):
    SWING_POINT = "swing_point"
    FIXED_RATIO = "fixed_ratio"


@dataclass(frozen=True)
class Candle:
    """One OHLC bar."""
    time: int
    open: float
    high: float
    low: float
    close: float
    volume: Optional[float] = None

    @property
    def body(self) -> float:
        return abs(self.close - self.open)

    @property
    def range(self) -> float:
        return self.high - self.low

    @property
    def is_bullish(self) -> bool:
        return self.close > self.open

    @property
    def is_bearish(self) -> bool:
        return self.close < self.open


@dataclass
class SwingPoint:
    """A confirmed pivot high or low."""
    index: int
    time: int
    price: float
    type: SwingType
    strength: float  # 1..100


@dataclass
class StructureBreak:
    """Close beyond the most recent prior swing point."""
    type: StructureBreakType
    direction: ZoneType
    price: float
    time: int


@dataclass
class TrendResult:
    """Single-timeframe trend classification."""
    direction: TrendDirection
    strength: float  # 0..100
    structure_breaks: List[StructureBreak] = field(default_factory=list)


@dataclass
class TrendAnalysis:
    """Trend of the primary timeframe combined with the higher timeframe."""
    direction: TrendDirection
    strength: float
    higher_timeframe: TrendDirection
    lower_timeframe: TrendDirection
    structure_breaks: List[StructureBreak] = field(default_factory=list)


@dataclass
class PriceRange:
    top: float
    bottom: float


@dataclass
class FibonacciLevel:
    level: float
    price: float
    label: str


@dataclass
class FibonacciZone:
    swing_low: SwingPoint
    swing_high: SwingPoint
    levels: List[FibonacciLevel]
    premium_zone: PriceRange
    discount_zone: PriceRange

    def price_at(self, level: float) -> Optional[float]:
        for fib_level in self.levels:
            if fib_level.level == level:
                return fib_level.price
        return None


@dataclass
class OrderBlock:
    """Setup candle of a displacement move."""
    id: str
    type: ZoneType
    top: float
    bottom: float
    start_time: int
    status: OrderBlockStatus = OrderBlockStatus.VALID
    strength: float = 1.0
    retest_count: int = 0


@dataclass
class FairValueGap:
    """3-candle imbalance."""
    id: str
    type: ZoneType
    top: float
    bottom: float
    start_time: int
    status: FVGStatus = FVGStatus.UNFILLED
    fill_percentage: float = 0.0
    in_premium: bool = False
    in_discount: bool = False


@dataclass
class ConfluenceZone:
    """Overlap of a same-direction order block and FVG."""
    id: str
    order_block: Optional[OrderBlock]
    fair_value_gap: Optional[FairValueGap]
    type: ZoneType
    overlap_top: float
    overlap_bottom: float
    in_optimal_zone: bool
    strength: float


@dataclass
class KillZone:
    name: KillZoneName
    start_utc: str  # "HH:MM"
    end_utc: str
    is_active: bool
    volatility_expected: Volatility
    time_remaining: Optional[int] = None  # seconds, only while active


@dataclass
class EntrySignal:
    id: str
    type: EntrySignalType
    direction: EntryDirection
    sweep_time: Optional[int]
    shift_time: Optional[int]
    entry_zone: PriceRange
    suggested_entry: float
    suggested_sl: float
    suggested_tp1: float
    suggested_tp2: Optional[float]
    risk_reward_ratio: float
    confidence: float
    sl_source: SLSource
    tp_source: TPSource
    sl_distance_pips: float


@dataclass
class ICTAnalysis:
    """Snapshot produced by one analysis pass."""
    symbol: str
    timestamp: int
    trend: TrendAnalysis
    swing_points: List[SwingPoint]
    fibonacci: Optional[FibonacciZone]
    order_blocks: List[OrderBlock]
    fair_value_gaps: List[FairValueGap]
    confluence_zones: List[ConfluenceZone]
    kill_zones: List[KillZone]
    entry_signals: List[EntrySignal]


def as_arrays(candles: Sequence[Candle]) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """Split candles into (open, high, low, close) float arrays."""
    open_ = np.array([c.open for c in candles], dtype=float)
    high = np.array([c.high for c in candles], dtype=float)
    low = np.array([c.low for c in candles], dtype=float)
    close = np.array([c.close for c in candles], dtype=float)
    return open_, high, low, close
