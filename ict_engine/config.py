"""
Engine settings loaded from the environment (.env supported).

Variables:
    ICT_SWING_LENGTH         pivot bars on each side (5)
    ICT_OB_MIN_DISPLACEMENT  displacement body / open threshold (0.002)
    ICT_OB_LOOKBACK          candles scanned for order blocks (50)
    ICT_SL_BUFFER_PIPS       stop loss buffer in pips (5)
    ICT_PRIMARY_TIMEFRAME    analysis timeframe ("1h")
    ICT_HIGHER_TIMEFRAME     bias timeframe ("4h")
    ICT_DEFAULT_RISK_PCT     risk per trade in percent (1.0)
    ICT_LOG_LEVEL            logging level for scripts ("INFO")
"""

import logging
import os
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

SYMBOLS = ("EURUSD", "XAUUSD")
TIMEFRAMES = ("1m", "5m", "15m", "1h", "4h", "1D")

T = TypeVar("T")


@dataclass
class EngineSettings:
    """Tunable parameters of one analysis pass."""
    swing_length: int = 5
    ob_min_displacement: float = 0.002
    ob_lookback: int = 50
    sl_buffer_pips: float = 5.0
    primary_timeframe: str = "1h"
    higher_timeframe: str = "4h"
    default_risk_percentage: float = 1.0
    log_level: str = "INFO"


def _env(
    name: str,
    default: T,
    cast: Callable[[str], T],
    valid: Optional[Callable[[T], bool]] = None,
) -> T:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = cast(raw.strip())
    except ValueError:
        logger.warning(f"Invalid value for {name}: {raw!r}, using default {default!r}")
        return default

    if valid is not None and not valid(value):
        logger.warning(f"Out of range value for {name}: {raw!r}, using default {default!r}")
        return default
    return value


def _positive(value) -> bool:
    return value > 0


def _non_negative(value) -> bool:
    return value >= 0


def _known_timeframe(value: str) -> bool:
    return value in TIMEFRAMES


def load_settings(env_file: Optional[str] = None) -> EngineSettings:
    """
    Read EngineSettings from the environment after loading .env.

    Unparsable or out of range values (non-positive bar counts, negative
    thresholds, unknown timeframes, risk outside 0-100%) keep the default.
    """
    load_dotenv(env_file)

    defaults = EngineSettings()
    return EngineSettings(
        swing_length=_env("ICT_SWING_LENGTH", defaults.swing_length, int, _positive),
        ob_min_displacement=_env("ICT_OB_MIN_DISPLACEMENT", defaults.ob_min_displacement, float, _non_negative),
        ob_lookback=_env("ICT_OB_LOOKBACK", defaults.ob_lookback, int, _positive),
        sl_buffer_pips=_env("ICT_SL_BUFFER_PIPS", defaults.sl_buffer_pips, float, _non_negative),
        primary_timeframe=_env("ICT_PRIMARY_TIMEFRAME", defaults.primary_timeframe, str, _known_timeframe),
        higher_timeframe=_env("ICT_HIGHER_TIMEFRAME", defaults.higher_timeframe, str, _known_timeframe),
        default_risk_percentage=_env(
            "ICT_DEFAULT_RISK_PCT", defaults.default_risk_percentage, float, lambda v: 0 < v <= 100,
        ),
        log_level=_env("ICT_LOG_LEVEL", defaults.log_level, str).upper(),
    )
