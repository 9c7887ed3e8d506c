"""
Pip conversion and position sizing.

Pip conventions:
- XAUUSD: 1 pip = 0.1
- JPY pairs: 1 pip = 0.01
- everything else: 1 pip = 0.0001
"""

import re
from dataclasses import dataclass

MIN_LOT = 0.01

# Account-currency value of one pip for one standard lot
PIP_VALUES = {
    "EURUSD": 10.0,
    "XAUUSD": 10.0,
    "GBPUSD": 10.0,
    "USDJPY": 10.0,
    "USDCHF": 10.0,
    "AUDUSD": 10.0,
    "NZDUSD": 10.0,
}
DEFAULT_PIP_VALUE = 10.0


@dataclass
class LotSizeResult:
    lot_size: float
    risk_amount: float
    pip_value: float
    max_loss: float


def normalize_symbol(symbol: str) -> str:
    """'xau/usd' -> 'XAUUSD'."""
    return re.sub(r"[^A-Z]", "", symbol.upper())


def pip_multiplier(symbol: str) -> float:
    """Number of pips in one unit of price."""
    normalized = normalize_symbol(symbol)
    if normalized == "XAUUSD":
        return 10.0
    if "JPY" in normalized:
        return 100.0
    return 10000.0


def calculate_pips(entry_price: float, stop_loss_price: float, symbol: str) -> float:
    """Absolute distance between two prices in pips, one decimal."""
    return round(abs(entry_price - stop_loss_price) * pip_multiplier(symbol), 1)


def pips_to_price(pips: float, symbol: str) -> float:
    """Price distance covered by `pips`."""
    return pips / pip_multiplier(symbol)


def get_pip_value(symbol: str) -> float:
    return PIP_VALUES.get(normalize_symbol(symbol), DEFAULT_PIP_VALUE)


def calculate_lot_size(
    account_balance: float,
    risk_percentage: float,
    stop_loss_pips: float,
    symbol: str,
) -> LotSizeResult:
    """
    Size a position so that hitting the stop loses `risk_percentage` of balance.

    Lots are rounded to 0.01 and never below the 0.01 minimum.
    Non-positive inputs return the minimum lot with zero risk.
    """
    pip_value = get_pip_value(symbol)

    if stop_loss_pips <= 0 or account_balance <= 0 or risk_percentage <= 0:
        return LotSizeResult(lot_size=MIN_LOT, risk_amount=0.0, pip_value=pip_value, max_loss=0.0)

    risk_amount = account_balance * risk_percentage / 100
    lot_size = max(MIN_LOT, round(risk_amount / (stop_loss_pips * pip_value), 2))

    return LotSizeResult(
        lot_size=lot_size,
        risk_amount=risk_amount,
        pip_value=pip_value,
        max_loss=lot_size * stop_loss_pips * pip_value,
    )


def calculate_position_value(lot_size: float, symbol: str, current_price: float) -> float:
    """Notional value: 100 oz per lot for gold, 100k units otherwise."""
    if normalize_symbol(symbol) == "XAUUSD":
        return lot_size * 100 * current_price
    return lot_size * 100000
