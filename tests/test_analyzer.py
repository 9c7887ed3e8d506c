"""Tests for the analysis orchestrator."""

import math

import pytest

from ict_engine.api.schemas import analysis_to_json
from ict_engine.config import EngineSettings
from ict_engine.core.analyzer import create_empty_analysis, run_ict_analysis
from ict_engine.core.models import (
    Candle,
    EntryDirection,
    FVGStatus,
    KillZoneName,
    OrderBlockStatus,
    SLSource,
    TPSource,
    TrendDirection,
    ZoneType,
)

from conftest import LONDON_NOW, build_sweep_shift_series

SETTINGS = EngineSettings(ob_lookback=100)


class TestEmptyInput:
    """Tests for degenerate input."""

    def test_no_primary_timeframe(self, london_now):
        """Test a missing 1h series yields the zeroed snapshot."""
        analysis = run_ict_analysis({}, "EURUSD", london_now)

        assert analysis.symbol == "EURUSD"
        assert analysis.timestamp == int(london_now.timestamp())
        assert analysis.trend.direction == TrendDirection.RANGING
        assert analysis.trend.strength == 0.0
        assert analysis.swing_points == []
        assert analysis.fibonacci is None
        assert analysis.order_blocks == []
        assert analysis.fair_value_gaps == []
        assert analysis.confluence_zones == []
        assert analysis.entry_signals == []
        assert len(analysis.kill_zones) == 4

    def test_empty_primary_only_higher(self, london_now, ob_fvg_series):
        """Test a populated 4h series alone is not enough."""
        analysis = run_ict_analysis({"1h": [], "4h": ob_fvg_series}, "EURUSD", london_now)

        assert analysis.swing_points == []
        assert analysis.trend.higher_timeframe == TrendDirection.RANGING

    def test_short_series_does_not_raise(self, london_now, ob_fvg_series):
        analysis = run_ict_analysis({"1h": ob_fvg_series[:4]}, "EURUSD", london_now)

        assert analysis.swing_points == []
        assert analysis.entry_signals == []

    def test_create_empty_analysis_evaluates_kill_zones(self, london_now):
        analysis = create_empty_analysis("XAUUSD", 0, london_now)

        active = [kz.name for kz in analysis.kill_zones if kz.is_active]
        assert active == [KillZoneName.LONDON]


class TestEndToEnd:
    """Tests for a full pass over an engineered series."""

    def test_order_block_fvg_and_confluence(self, london_now, ob_fvg_series):
        """Test the engineered OB at 140 and FVG at 150 meet in a bullish confluence."""
        analysis = run_ict_analysis({"1h": ob_fvg_series}, "EURUSD", london_now, SETTINGS)

        bullish_obs = [ob for ob in analysis.order_blocks if ob.type == ZoneType.BULLISH]
        assert len(bullish_obs) >= 1
        assert bullish_obs[0].id == "ob-140-bullish"
        assert bullish_obs[0].status == OrderBlockStatus.VALID
        assert bullish_obs[0].top == 103.0
        assert bullish_obs[0].bottom == 101.20

        unfilled = [fvg for fvg in analysis.fair_value_gaps if fvg.status == FVGStatus.UNFILLED]
        assert [fvg.id for fvg in unfilled] == ["fvg-150-bullish"]
        assert unfilled[0].bottom == pytest.approx(102.51)
        assert unfilled[0].top == 102.85

        assert len(analysis.confluence_zones) >= 1
        zone = analysis.confluence_zones[0]
        assert zone.type == ZoneType.BULLISH
        assert zone.overlap_top == 102.85
        assert zone.overlap_bottom == pytest.approx(102.51)

    def test_swings_and_fibonacci(self, london_now, ob_fvg_series):
        """Test the setup candle is both the swing high and the swing low."""
        analysis = run_ict_analysis({"1h": ob_fvg_series}, "EURUSD", london_now, SETTINGS)

        assert [(s.index, s.type.value) for s in analysis.swing_points] == [(140, "high"), (140, "low")]
        assert analysis.trend.direction == TrendDirection.RANGING
        assert analysis.fibonacci is not None
        assert analysis.fibonacci.swing_high.price == 103.0
        assert analysis.fair_value_gaps[0].in_premium

    def test_no_signal_without_sweep(self, london_now, ob_fvg_series):
        analysis = run_ict_analysis({"1h": ob_fvg_series}, "EURUSD", london_now, SETTINGS)

        assert analysis.entry_signals == []

    def test_default_lookback_misses_old_block(self, london_now, ob_fvg_series):
        """Test the 50-candle default scan does not reach index 140 of 200."""
        analysis = run_ict_analysis({"1h": ob_fvg_series}, "EURUSD", london_now)

        assert analysis.order_blocks == []
        assert analysis.confluence_zones == []

    def test_higher_timeframe_reported(self, london_now, ob_fvg_series):
        analysis = run_ict_analysis(
            {"1h": ob_fvg_series, "4h": ob_fvg_series[::4]}, "EURUSD", london_now, SETTINGS,
        )

        assert analysis.trend.lower_timeframe == analysis.trend.direction
        assert analysis.trend.higher_timeframe in tuple(TrendDirection)

    def test_kill_zones_follow_clock(self, london_now, ob_fvg_series):
        analysis = run_ict_analysis({"1h": ob_fvg_series}, "EURUSD", london_now, SETTINGS)

        active = [kz.name for kz in analysis.kill_zones if kz.is_active]
        assert active == [KillZoneName.LONDON]


class TestEntrySignals:
    """Tests for sweep-and-shift signals emitted by the full pass."""

    def test_signal_uses_best_confluence_zone(self, london_now):
        """Test entry and stop sit on the bullish confluence zone bottom."""
        candles = build_sweep_shift_series()

        analysis = run_ict_analysis({"1h": candles}, "EURUSD", london_now)

        assert [ob.id for ob in analysis.order_blocks] == ["ob-10-bullish"]
        zone = analysis.confluence_zones[0]
        assert zone.overlap_bottom == pytest.approx(99.40)
        assert zone.overlap_top == pytest.approx(99.60)

        assert len(analysis.entry_signals) == 1
        signal = analysis.entry_signals[0]
        assert signal.direction == EntryDirection.LONG
        assert signal.sweep_time == candles[36].time
        assert signal.shift_time == candles[37].time
        assert signal.sl_source == SLSource.CONFLUENCE_ZONE
        assert signal.suggested_entry == zone.overlap_bottom
        assert signal.suggested_sl == pytest.approx(zone.overlap_bottom - 0.0005)
        assert signal.entry_zone.top == zone.overlap_top
        # Swing high of the order block candle, formed before the sweep
        assert signal.tp_source == TPSource.SWING_POINT
        assert signal.suggested_tp1 == pytest.approx(99.80)

    def test_stop_buffer_from_settings(self, london_now):
        analysis = run_ict_analysis(
            {"1h": build_sweep_shift_series()}, "EURUSD", london_now, EngineSettings(sl_buffer_pips=10),
        )

        signal = analysis.entry_signals[0]
        assert signal.suggested_sl == pytest.approx(99.40 - 0.001)
        assert signal.sl_distance_pips == pytest.approx(10.0)

    def test_order_block_stop_without_confluence(self, london_now):
        """Test the stop falls back to the valid order block below the last close."""
        candles = build_sweep_shift_series(with_gap=False)

        analysis = run_ict_analysis({"1h": candles}, "EURUSD", london_now)

        assert analysis.confluence_zones == []
        signal = analysis.entry_signals[0]
        assert signal.direction == EntryDirection.LONG
        assert signal.sl_source == SLSource.ORDER_BLOCK
        assert signal.suggested_entry == candles[37].close
        assert signal.suggested_sl == pytest.approx(98.90 - 0.0005)
        assert signal.tp_source == TPSource.FIXED_RATIO


class TestPurity:
    """Tests for determinism and input handling."""

    def test_idempotent(self, ob_fvg_series):
        """Test identical input and clock produce identical JSON."""
        first = run_ict_analysis({"1h": ob_fvg_series}, "EURUSD", LONDON_NOW, SETTINGS)
        second = run_ict_analysis({"1h": list(ob_fvg_series)}, "EURUSD", LONDON_NOW, SETTINGS)

        assert analysis_to_json(first) == analysis_to_json(second)

    def test_malformed_candles_dropped(self, ob_fvg_series):
        """Test bad rows are sanitized away before detection."""
        last = ob_fvg_series[-1]
        dirty = list(ob_fvg_series) + [
            Candle(time=last.time + 3600, open=math.nan, high=1.0, low=1.0, close=1.0),
            Candle(time=last.time + 7200, open=103.4, high=103.0, low=104.0, close=103.5),
        ]

        clean = run_ict_analysis({"1h": ob_fvg_series}, "EURUSD", LONDON_NOW, SETTINGS)
        sanitized = run_ict_analysis({"1h": dirty}, "EURUSD", LONDON_NOW, SETTINGS)

        assert analysis_to_json(clean) == analysis_to_json(sanitized)

    def test_input_not_mutated(self, ob_fvg_series):
        before = list(ob_fvg_series)

        run_ict_analysis({"1h": ob_fvg_series}, "EURUSD", LONDON_NOW, SETTINGS)

        assert ob_fvg_series == before
