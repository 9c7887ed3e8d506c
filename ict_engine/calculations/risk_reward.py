"""Risk-reward helpers."""

from ..core.models import EntryDirection
from .lot_size import pips_to_price


def calculate_risk_reward(entry_price: float, stop_loss: float, take_profit: float) -> float:
    """Reward / risk, two decimals. 0 when there is no risk."""
    risk = abs(entry_price - stop_loss)
    reward = abs(take_profit - entry_price)

    if risk == 0:
        return 0.0

    return round(reward / risk, 2)


def calculate_take_profit(entry_price: float, stop_loss: float, ratio: float) -> float:
    """Target at `ratio` x risk, on the side opposite the stop."""
    reward = abs(entry_price - stop_loss) * ratio

    if entry_price > stop_loss:
        return round(entry_price + reward, 5)
    return round(entry_price - reward, 5)


def calculate_breakeven(
    entry_price: float,
    direction: EntryDirection,
    spread_pips: float,
    symbol: str = "EURUSD",
) -> float:
    """Entry shifted by the spread in the trade's direction."""
    spread = pips_to_price(spread_pips, symbol)

    if direction == EntryDirection.LONG:
        return round(entry_price + spread, 5)
    return round(entry_price - spread, 5)
