"""Tests for sweep-and-shift detection and entry signal generation."""

import pytest

from ict_engine.core.entry import detect_sweep_and_shift, generate_entry_signal
from ict_engine.core.models import (
    ConfluenceZone,
    EntryDirection,
    EntrySignalType,
    OrderBlock,
    SLSource,
    SwingPoint,
    SwingType,
    TPSource,
    ZoneType,
)

from conftest import doji, make_candle

SYMBOL = "USDJPY"  # 1 pip = 0.01


def _swing(index, price, swing_type):
    return SwingPoint(index=index, time=index * 3600, price=price, type=swing_type, strength=1.0)


def _bullish_sweep_candles():
    """
    20 candles: dojis at 100, a sweep of 99.0 at 16, a strong bullish
    shift at 17, then a quiet candle at 18 and 19.
    """
    candles = [doji(i, 100.0) for i in range(16)]
    candles.append(make_candle(16, 99.4, 99.6, 98.8, 99.5))
    candles.append(make_candle(17, 99.5, 100.6, 99.45, 100.5))
    candles.append(make_candle(18, 100.5, 100.8, 100.2, 100.6))
    candles.append(doji(19, 100.6))
    return candles


def _bearish_sweep_candles():
    candles = [doji(i, 100.0) for i in range(16)]
    candles.append(make_candle(16, 100.6, 101.2, 100.4, 100.5))
    candles.append(make_candle(17, 100.5, 100.55, 99.4, 99.5))
    candles.append(make_candle(18, 99.5, 99.8, 99.3, 99.6))
    candles.append(doji(19, 99.6))
    return candles


class TestDetectSweepAndShift:
    """Tests for liquidity sweep detection."""

    def test_bullish_sweep(self):
        """Test a wick below a swing low closing back above, then a strong bullish candle."""
        candles = _bullish_sweep_candles()
        swings = [_swing(10, 99.0, SwingType.LOW)]

        pattern = detect_sweep_and_shift(candles, swings)

        assert pattern is not None
        assert pattern.direction == ZoneType.BULLISH
        assert pattern.sweep_index == 16
        assert pattern.sweep_price == 98.8
        assert pattern.sweep_time == candles[16].time
        assert pattern.swing_point is swings[0]
        assert pattern.shift_index == 17

    def test_pattern_strength(self):
        """Test strength = body ratio * 40 + shift size % * 10."""
        pattern = detect_sweep_and_shift(_bullish_sweep_candles(), [_swing(10, 99.0, SwingType.LOW)])

        body_ratio = 1.0 / 1.15
        size_pct = 1.0 / 99.5 * 100
        assert pattern.strength == pytest.approx(body_ratio * 40 + size_pct * 10, rel=1e-6)

    def test_bearish_sweep(self):
        """Test a wick above a swing high closing back below, then a strong bearish candle."""
        candles = _bearish_sweep_candles()

        pattern = detect_sweep_and_shift(candles, [_swing(10, 101.0, SwingType.HIGH)])

        assert pattern is not None
        assert pattern.direction == ZoneType.BEARISH
        assert pattern.sweep_price == 101.2
        assert pattern.shift_index == 17

    def test_sweep_without_shift(self):
        """Test a sweep followed only by weak candles is ignored."""
        candles = _bullish_sweep_candles()
        candles[17] = doji(17, 99.5)
        candles[18] = doji(18, 99.5)
        candles[19] = doji(19, 99.5)

        assert detect_sweep_and_shift(candles, [_swing(10, 99.0, SwingType.LOW)]) is None

    def test_swing_must_precede_sweep(self):
        """Test a swing at or after the sweep candle cannot be swept."""
        candles = _bullish_sweep_candles()

        assert detect_sweep_and_shift(candles, [_swing(16, 99.0, SwingType.LOW)]) is None

    def test_swing_too_far_back(self):
        """Test swings 20 or more bars before the sweep are out of reach."""
        candles = [doji(i, 100.0) for i in range(10)] + _shifted(_bullish_sweep_candles(), 10)

        assert detect_sweep_and_shift(candles, [_swing(5, 99.0, SwingType.LOW)]) is None

    def test_most_recent_sweep_wins(self):
        """Test the newest qualifying sweep is reported."""
        candles = [doji(i, 100.0) for i in range(15)]
        candles.append(make_candle(15, 99.35, 99.4, 98.9, 99.3))
        candles.append(make_candle(16, 99.3, 100.35, 99.25, 100.3))
        candles.append(make_candle(17, 99.35, 99.45, 98.95, 99.4))
        candles.append(make_candle(18, 99.4, 100.45, 99.35, 100.4))
        candles.append(doji(19, 100.4))

        pattern = detect_sweep_and_shift(candles, [_swing(10, 99.0, SwingType.LOW)])

        assert pattern.sweep_index == 17
        assert pattern.shift_index == 18

    def test_not_enough_data(self):
        """Test short series and missing swings yield None."""
        candles = _bullish_sweep_candles()

        assert detect_sweep_and_shift(candles[:9], [_swing(2, 99.0, SwingType.LOW)]) is None
        assert detect_sweep_and_shift(candles, []) is None


def _shifted(candles, offset):
    return [
        make_candle(i + offset, c.open, c.high, c.low, c.close)
        for i, c in enumerate(candles)
    ]


@pytest.fixture
def bullish_pattern():
    return detect_sweep_and_shift(_bullish_sweep_candles(), [_swing(10, 99.0, SwingType.LOW)])


class TestGenerateEntrySignal:
    """Tests for entry, stop and target selection."""

    def test_no_confluence_uses_shift_and_sweep(self, bullish_pattern):
        """Test entry at the shift close and stop below the sweep low."""
        swings = [
            _swing(2, 103.0, SwingType.HIGH),
            _swing(5, 102.0, SwingType.HIGH),
            _swing(10, 99.0, SwingType.LOW),
        ]

        signal = generate_entry_signal(bullish_pattern, None, 100.6, swings, [], SYMBOL)

        assert signal.id == f"signal-{bullish_pattern.sweep_time}"
        assert signal.type == EntrySignalType.SWEEP_AND_SHIFT
        assert signal.direction == EntryDirection.LONG
        assert signal.suggested_entry == 100.5
        assert signal.suggested_sl == pytest.approx(98.75)
        assert signal.sl_source == SLSource.SWEEP_PRICE
        assert signal.suggested_tp1 == 102.0
        assert signal.tp_source == TPSource.SWING_POINT
        assert signal.suggested_tp2 == 103.0
        assert signal.risk_reward_ratio == pytest.approx(0.86)
        assert signal.sl_distance_pips == pytest.approx(175.0)
        assert signal.entry_zone.top == 100.6
        assert signal.entry_zone.bottom == 99.45
        assert signal.confidence == pytest.approx(bullish_pattern.strength)

    def test_confluence_zone_sets_entry_and_stop(self, bullish_pattern):
        """Test the confluence bottom is the entry and the stop sits below it."""
        zone = ConfluenceZone(
            id="confluence-x",
            order_block=None,
            fair_value_gap=None,
            type=ZoneType.BULLISH,
            overlap_top=100.0,
            overlap_bottom=99.6,
            in_optimal_zone=False,
            strength=60.0,
        )

        signal = generate_entry_signal(
            bullish_pattern, zone, 100.6, [_swing(5, 102.0, SwingType.HIGH)], [], SYMBOL,
        )

        assert signal.suggested_entry == 99.6
        assert signal.suggested_sl == pytest.approx(99.55)
        assert signal.sl_source == SLSource.CONFLUENCE_ZONE
        assert signal.entry_zone.top == 100.0
        assert signal.confidence == pytest.approx(min(bullish_pattern.strength + 30.0, 100.0))

    def test_order_block_stop(self, bullish_pattern):
        """Test the nearest valid bullish OB below price sets the stop."""
        blocks = [
            OrderBlock(id="ob-3-bullish", type=ZoneType.BULLISH, top=99.8, bottom=99.2, start_time=0),
            OrderBlock(id="ob-1-bullish", type=ZoneType.BULLISH, top=99.0, bottom=98.5, start_time=0),
        ]

        signal = generate_entry_signal(bullish_pattern, None, 100.6, [], blocks, SYMBOL)

        assert signal.suggested_sl == pytest.approx(99.15)
        assert signal.sl_source == SLSource.ORDER_BLOCK

    def test_fixed_ratio_fallback(self, bullish_pattern):
        """Test 2R target when no swing high is above entry."""
        signal = generate_entry_signal(bullish_pattern, None, 100.6, [], [], SYMBOL)

        risk = 100.5 - 98.75
        assert signal.suggested_tp1 == pytest.approx(100.5 + 2 * risk)
        assert signal.tp_source == TPSource.FIXED_RATIO
        assert signal.suggested_tp2 is None
        assert signal.risk_reward_ratio == pytest.approx(2.0)

    def test_swing_after_sweep_not_a_target(self, bullish_pattern):
        """Test only swings formed before the sweep are used for TP1."""
        swings = [_swing(17, 102.0, SwingType.HIGH)]

        signal = generate_entry_signal(bullish_pattern, None, 100.6, swings, [], SYMBOL)

        assert signal.tp_source == TPSource.FIXED_RATIO

    def test_short_signal(self):
        """Test a bearish pattern mirrors stop and targets."""
        pattern = detect_sweep_and_shift(_bearish_sweep_candles(), [_swing(10, 101.0, SwingType.HIGH)])
        swings = [_swing(3, 97.0, SwingType.LOW), _swing(6, 98.0, SwingType.LOW)]

        signal = generate_entry_signal(pattern, None, 99.6, swings, [], SYMBOL)

        assert signal.direction == EntryDirection.SHORT
        assert signal.suggested_entry == 99.5
        assert signal.suggested_sl == pytest.approx(101.25)
        assert signal.sl_source == SLSource.SWEEP_PRICE
        assert signal.suggested_tp1 == 98.0
        assert signal.suggested_tp2 == 97.0
