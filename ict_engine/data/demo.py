"""
Demo candle generator for running the engine without a data vendor.

Random walk with occasional trend reversals, plus an engineered bullish
order block at 70% and a bullish FVG at 75% of the series. Pass a seed
for reproducible output.
"""

import time
from typing import Dict, List, Optional

import numpy as np

from ..core.models import Candle

SYMBOL_CONFIG = {
    "EURUSD": {"base_price": 1.0850, "volatility": 0.0015, "spread": 0.00012},
    "XAUUSD": {"base_price": 2650.0, "volatility": 8.0, "spread": 0.3},
}

TIMEFRAME_SECONDS = {
    "1m": 60,
    "5m": 5 * 60,
    "15m": 15 * 60,
    "1h": 60 * 60,
    "4h": 4 * 60 * 60,
    "1D": 24 * 60 * 60,
}


def _symbol_config(symbol: str) -> Dict[str, float]:
    if symbol not in SYMBOL_CONFIG:
        raise ValueError(f"Unsupported demo symbol: {symbol}")
    return SYMBOL_CONFIG[symbol]


def _add_ict_patterns(rows: List[List[float]], volatility: float) -> None:
    """Overwrite rows in place with an order block and a fair value gap."""
    n = len(rows)

    ob_idx = int(n * 0.7)
    if ob_idx + 2 < n:
        # Small bearish candle, then a large bullish displacement
        base = rows[ob_idx]
        base[3] = base[0] - volatility * 0.2
        base[1] = max(base[0], base[3]) + volatility * 0.1
        base[2] = min(base[0], base[3]) - volatility * 0.1

        disp = rows[ob_idx + 1]
        disp[0] = base[3]
        disp[3] = disp[0] + volatility * 2
        disp[1] = disp[3] + volatility * 0.3
        disp[2] = disp[0] - volatility * 0.1

    fvg_idx = int(n * 0.75)
    if fvg_idx + 3 < n:
        c2 = rows[fvg_idx + 1]
        c3 = rows[fvg_idx + 2]

        c2[3] = c2[0] + volatility * 1.5
        c2[1] = c2[3] + volatility * 0.2
        c2[2] = c2[0] - volatility * 0.1

        c3[0] = c2[3] + volatility * 0.5
        c3[2] = c3[0] - volatility * 0.2
        c3[3] = c3[0] + volatility * 0.3
        c3[1] = c3[3] + volatility * 0.2


def generate_demo_candles(
    symbol: str,
    timeframe: str = "1h",
    count: int = 200,
    seed: Optional[int] = None,
    end_time: Optional[int] = None,
) -> List[Candle]:
    """
    Generate `count` candles ending at `end_time` (Unix seconds, default now).

    Returns:
        Candles oldest first, aligned to the timeframe interval
    """
    config = _symbol_config(symbol)
    interval = TIMEFRAME_SECONDS.get(timeframe, TIMEFRAME_SECONDS["15m"])
    rng = np.random.default_rng(seed)

    if end_time is None:
        end_time = int(time.time())
    start_time = end_time - count * interval
    start_time -= start_time % interval

    volatility = config["volatility"]
    price = config["base_price"]
    trend = 1 if rng.random() > 0.5 else -1

    rows: List[List[float]] = []
    for _ in range(count):
        if rng.random() < 0.05:
            trend *= -1

        change = (rng.random() - 0.5 + trend * 0.3) * volatility
        open_ = price
        close = open_ + change
        high = max(open_, close) + rng.random() * volatility * 0.5
        low = min(open_, close) - rng.random() * volatility * 0.5
        volume = float(int(1000 + rng.random() * 5000))

        rows.append([open_, high, low, close, volume])
        price = close

    _add_ict_patterns(rows, volatility)

    return [
        Candle(
            time=start_time + i * interval,
            open=float(row[0]),
            high=float(max(row[:4])),
            low=float(min(row[:4])),
            close=float(row[3]),
            volume=row[4],
        )
        for i, row in enumerate(rows)
    ]


def get_demo_price(symbol: str, seed: Optional[int] = None) -> Dict[str, float]:
    """Bid/ask quote around the symbol's base price."""
    config = _symbol_config(symbol)
    rng = np.random.default_rng(seed)

    mid = config["base_price"] + (rng.random() - 0.5) * config["volatility"] * 0.1
    spread = config["spread"]

    return {
        "bid": mid - spread / 2,
        "ask": mid + spread / 2,
        "spread": spread,
    }
