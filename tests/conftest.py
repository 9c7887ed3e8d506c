"""Shared candle builders for the test suite."""

from datetime import datetime, timezone

import pytest

from ict_engine.core.models import Candle

HOUR = 3600
START_TIME = 1704067200  # 2024-01-01 00:00 UTC

# 2024-01-15 08:30 UTC, inside the London kill zone
LONDON_NOW = datetime(2024, 1, 15, 8, 30, tzinfo=timezone.utc)


def make_candle(i, open_, high, low, close, volume=None, start=START_TIME, step=HOUR):
    return Candle(time=start + i * step, open=open_, high=high, low=low, close=close, volume=volume)


def candles_from_ohlc(rows, start=START_TIME, step=HOUR):
    """Build candles from (open, high, low, close) tuples, one `step` apart."""
    return [make_candle(i, o, h, l, c, start=start, step=step) for i, (o, h, l, c) in enumerate(rows)]


def candles_from_high_low(highs, lows):
    """Candles opening at the low and closing at the high."""
    return candles_from_ohlc([(l, h, l, h) for h, l in zip(highs, lows)])


def doji(i, price, spread=0.1):
    return make_candle(i, price, price + spread, price - spread, price)


def _base_bar(i, price):
    return make_candle(i, price, price + 0.05, price - 0.05, price + 0.005)


def build_order_block_fvg_series(n=200):
    """
    1h series with a bullish order block at 140 and a bullish FVG at 150.

    - 140: small bearish setup candle with a long upper wick
    - 141: bullish displacement, body 50x the setup body
    - 148 -> 150: 3-bar bullish gap [102.51, 102.85]
    Everything else is a slow grind higher with overlapping bars.
    """
    candles = []
    for i in range(n):
        if i < 140:
            candles.append(_base_bar(i, 100 + 0.01 * i))
        elif i == 140:
            candles.append(make_candle(i, 101.42, 103.0, 101.20, 101.40))
        elif i == 141:
            candles.append(make_candle(i, 101.40, 102.45, 101.38, 102.40))
        elif i <= 148:
            candles.append(_base_bar(i, 102.40 + 0.01 * (i - 142)))
        elif i == 149:
            candles.append(make_candle(i, 102.465, 102.92, 102.45, 102.90))
        elif i == 150:
            candles.append(make_candle(i, 102.90, 102.95, 102.85, 102.91))
        else:
            candles.append(_base_bar(i, 102.90 + 0.01 * (i - 151)))
    return candles


def build_sweep_shift_series(with_gap=True):
    """
    40-bar 1h series ending in a bullish sweep and shift.

    - 10: bearish setup [98.90, 99.80], 11: bullish displacement (order block)
    - 14 -> 16: bullish gap [99.40, 99.60] inside the order block
      (left out when `with_gap` is False)
    - 28: swing low at 99.70
    - 36: sweeps it (low 99.60, close 99.98), 37: strong bullish shift
    - 38, 39: drift at 100.25, clear of both zones
    """
    candles = []
    for i in range(40):
        if i < 10:
            candles.append(_base_bar(i, 99.0))
        elif i == 10:
            candles.append(make_candle(i, 99.02, 99.80, 98.90, 99.00))
        elif i == 11:
            candles.append(make_candle(i, 99.00, 99.40, 98.99, 99.35))
        elif i <= 14:
            candles.append(_base_bar(i, 99.35))
        elif i == 15:
            candles.append(make_candle(i, 99.36, 99.70, 99.35, 99.68))
        elif i == 16:
            low = 99.60 if with_gap else 99.38
            candles.append(make_candle(i, 99.68, 100.02, low, 99.98))
        elif i == 17:
            candles.append(make_candle(i, 99.98, 100.05, 99.65, 100.0))
        elif i == 28:
            candles.append(make_candle(i, 100.0, 100.05, 99.70, 99.90))
        elif i == 36:
            candles.append(make_candle(i, 99.95, 100.05, 99.60, 99.98))
        elif i == 37:
            candles.append(make_candle(i, 99.98, 100.30, 99.96, 100.28))
        elif i >= 38:
            candles.append(_base_bar(i, 100.25))
        else:
            candles.append(_base_bar(i, 100.0))
    return candles


@pytest.fixture
def london_now():
    return LONDON_NOW


@pytest.fixture
def ob_fvg_series():
    return build_order_block_fvg_series()
