"""Pip, lot size and risk-reward calculations."""

from .lot_size import (
    LotSizeResult,
    calculate_lot_size,
    calculate_pips,
    calculate_position_value,
    get_pip_value,
    normalize_symbol,
    pips_to_price,
)
from .risk_reward import calculate_breakeven, calculate_risk_reward, calculate_take_profit

__all__ = [
    "LotSizeResult",
    "calculate_lot_size",
    "calculate_pips",
    "calculate_position_value",
    "get_pip_value",
    "normalize_symbol",
    "pips_to_price",
    "calculate_breakeven",
    "calculate_risk_reward",
    "calculate_take_profit",
]
