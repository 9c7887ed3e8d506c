"""Core engine modules for ICT market structure analysis."""

from .analyzer import create_empty_analysis, run_ict_analysis
from .confluence import calculate_overlap, find_confluence_zones
from .entry import SweepShiftPattern, detect_sweep_and_shift, generate_entry_signal
from .fibonacci import PriceZone, calculate_fibonacci, get_price_zone, is_price_in_optimal_zone
from .fvg import detect_fair_value_gaps, update_fvg_status
from .killzone import (
    KILL_ZONE_CONFIGS,
    KillZoneConfig,
    NextKillZone,
    get_kill_zone_status,
    get_time_until_next_kill_zone,
    should_trade_now,
)
from .models import (
    Candle,
    ConfluenceZone,
    EntrySignal,
    FairValueGap,
    FibonacciZone,
    ICTAnalysis,
    KillZone,
    OrderBlock,
    SwingPoint,
    TrendAnalysis,
)
from .orderblock import detect_order_blocks, update_order_block_status
from .structure import analyze_trend, detect_structure_breaks, detect_swing_points

__all__ = [
    "create_empty_analysis",
    "run_ict_analysis",
    "calculate_overlap",
    "find_confluence_zones",
    "SweepShiftPattern",
    "detect_sweep_and_shift",
    "generate_entry_signal",
    "PriceZone",
    "calculate_fibonacci",
    "get_price_zone",
    "is_price_in_optimal_zone",
    "detect_fair_value_gaps",
    "update_fvg_status",
    "KILL_ZONE_CONFIGS",
    "KillZoneConfig",
    "NextKillZone",
    "get_kill_zone_status",
    "get_time_until_next_kill_zone",
    "should_trade_now",
    "Candle",
    "ConfluenceZone",
    "EntrySignal",
    "FairValueGap",
    "FibonacciZone",
    "ICTAnalysis",
    "KillZone",
    "OrderBlock",
    "SwingPoint",
    "TrendAnalysis",
    "detect_order_blocks",
    "update_order_block_status",
    "analyze_trend",
    "detect_structure_breaks",
    "detect_swing_points",
]
