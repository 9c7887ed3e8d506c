"""
Fibonacci retracement zone from the latest swing high and swing low.

The latest high and the latest low are picked independently, so they
need not be adjacent in time. Premium is the half above the 0.5 level,
discount the half below it.
"""

from enum import Enum
from typing import List, Optional, Sequence

from .models import (
    EntryDirection,
    FibonacciLevel,
    FibonacciZone,
    PriceRange,
    SwingPoint,
    SwingType,
    TrendDirection,
)

FIB_RATIOS = (0.0, 0.236, 0.382, 0.5, 0.618, 0.786, 1.0)

# Optimal entry bands. Long ratios are read off the level grid, short
# ratios are retracements measured down from the swing high.
LONG_OPTIMAL_BAND = (0.618, 0.786)
SHORT_OPTIMAL_BAND = (0.236, 0.382)


class PriceZone(Enum):
    PREMIUM = "premium"
    DISCOUNT = "discount"
    EQUILIBRIUM = "equilibrium"


def _label(ratio: float) -> str:
    if ratio in (0.0, 1.0):
        return f"{ratio:.1f}"
    return f"{ratio:g}"


def calculate_fibonacci(
    swing_points: Sequence[SwingPoint],
    trend: TrendDirection = TrendDirection.BULLISH,
) -> Optional[FibonacciZone]:
    """
    Build retracement levels between the most recent swing low and high.

    Levels are `low + range * ratio` for ratios 0 .. 1.0. The trend is
    accepted for interface symmetry with the other detectors; the level
    grid is the same for both directions.

    Returns:
        FibonacciZone, or None if either swing type is missing
    """
    highs = [s for s in swing_points if s.type == SwingType.HIGH]
    lows = [s for s in swing_points if s.type == SwingType.LOW]

    if not highs or not lows:
        return None

    swing_high = highs[-1]
    swing_low = lows[-1]
    price_range = swing_high.price - swing_low.price

    levels: List[FibonacciLevel] = []
    for ratio in FIB_RATIOS:
        if ratio == 1.0:
            price = swing_high.price
        else:
            price = swing_low.price + price_range * ratio
        levels.append(FibonacciLevel(level=ratio, price=price, label=_label(ratio)))

    level_50 = swing_low.price + price_range * 0.5

    return FibonacciZone(
        swing_low=swing_low,
        swing_high=swing_high,
        levels=levels,
        premium_zone=PriceRange(top=swing_high.price, bottom=level_50),
        discount_zone=PriceRange(top=level_50, bottom=swing_low.price),
    )


def is_price_in_optimal_zone(
    price: float,
    fib: FibonacciZone,
    direction: EntryDirection,
) -> bool:
    """
    Check whether price sits in the optimal entry band.

    Long: the 0.618-0.786 levels. Short: a 0.236-0.382 retracement from
    the swing high, which keeps short entries in the premium half.
    """
    if direction == EntryDirection.LONG:
        first = fib.price_at(LONG_OPTIMAL_BAND[0])
        second = fib.price_at(LONG_OPTIMAL_BAND[1])
        if first is None or second is None:
            return False
    else:
        high = fib.swing_high.price
        price_range = high - fib.swing_low.price
        first = high - price_range * SHORT_OPTIMAL_BAND[0]
        second = high - price_range * SHORT_OPTIMAL_BAND[1]

    lower, upper = min(first, second), max(first, second)
    return lower <= price <= upper


def get_price_zone(price: float, fib: FibonacciZone) -> PriceZone:
    """Classify price against the 0.5 level."""
    level_50 = fib.price_at(0.5)
    if level_50 is None:
        return PriceZone.EQUILIBRIUM

    if price > level_50:
        return PriceZone.PREMIUM
    if price < level_50:
        return PriceZone.DISCOUNT
    return PriceZone.EQUILIBRIUM
