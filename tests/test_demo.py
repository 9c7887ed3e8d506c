"""Tests for the demo candle generator."""

import pytest

from ict_engine.data.candles import validate_candles
from ict_engine.data.demo import generate_demo_candles, get_demo_price

END_TIME = 1705307400


class TestDemoCandles:
    """Tests for generate_demo_candles."""

    def test_count_and_spacing(self):
        candles = generate_demo_candles("EURUSD", "1h", count=120, seed=1, end_time=END_TIME)

        assert len(candles) == 120
        assert all(b.time - a.time == 3600 for a, b in zip(candles, candles[1:]))
        assert candles[0].time % 3600 == 0

    def test_candles_are_well_formed(self):
        for symbol in ("EURUSD", "XAUUSD"):
            validate_candles(generate_demo_candles(symbol, "15m", seed=3, end_time=END_TIME))

    def test_seed_reproducible(self):
        first = generate_demo_candles("XAUUSD", seed=42, end_time=END_TIME)
        second = generate_demo_candles("XAUUSD", seed=42, end_time=END_TIME)

        assert first == second

    def test_engineered_displacement(self):
        """Test the candle after the 70% mark is a bullish displacement."""
        candles = generate_demo_candles("XAUUSD", count=100, seed=5, end_time=END_TIME)

        setup, displacement = candles[70], candles[71]
        assert setup.is_bearish
        assert displacement.is_bullish
        assert displacement.body > setup.body * 2

    def test_unsupported_symbol(self):
        with pytest.raises(ValueError):
            generate_demo_candles("BTCUSD")


class TestDemoPrice:
    def test_bid_below_ask(self):
        quote = get_demo_price("EURUSD", seed=1)

        assert quote["bid"] < quote["ask"]
        assert quote["spread"] == pytest.approx(0.00012)
