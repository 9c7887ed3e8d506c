"""
Analysis Service

Orchestrates one analysis request: input checks, result caching, the ICT
pass itself, and alert evaluation. Collaborators are injected so callers
and tests own their lifetime; nothing is shared between service instances.
"""

import logging
from typing import List, Mapping, Optional, Sequence, Tuple

from ..alerts.alert_engine import AlertEngine
from ..calculations.lot_size import LotSizeResult, calculate_lot_size
from ..config import EngineSettings
from ..core.analyzer import run_ict_analysis
from ..core.killzone import Clock, to_utc
from ..core.models import Candle, EntrySignal, ICTAnalysis
from ..data.candles import OHLCVData, sanitize_candles, validate_candles
from .cache import TTLCache

logger = logging.getLogger(__name__)


def _fingerprint(
    candles_by_timeframe: Mapping[str, Sequence[Candle]],
    minute: int,
) -> Tuple:
    """Cheap identity of the input: per timeframe (length, last time, last close)."""
    parts = []
    for timeframe in sorted(candles_by_timeframe):
        candles = candles_by_timeframe[timeframe]
        if candles:
            last = candles[-1]
            parts.append((timeframe, len(candles), last.time, last.close))
        else:
            parts.append((timeframe, 0, None, None))
    return tuple(parts) + (minute,)


class AnalysisService:
    """
    Runs the ICT analysis with optional caching and alerting.

    Args:
        settings: Engine parameters (defaults when omitted)
        cache: Result cache; no caching when omitted
        alert_engine: Receives every freshly computed analysis
        strict: Raise InvalidCandleError on bad input instead of dropping rows
    """

    def __init__(
        self,
        settings: Optional[EngineSettings] = None,
        cache: Optional[TTLCache] = None,
        alert_engine: Optional[AlertEngine] = None,
        strict: bool = False,
    ):
        self.settings = settings or EngineSettings()
        self.cache = cache
        self.alert_engine = alert_engine
        self.strict = strict

    def _prepare(self, candles_by_timeframe: Mapping[str, Sequence[Candle]]) -> dict:
        prepared = {}
        for timeframe, candles in candles_by_timeframe.items():
            if self.strict:
                validate_candles(candles)
                prepared[timeframe] = list(candles)
            else:
                prepared[timeframe] = sanitize_candles(candles)
        return prepared

    def analyze(
        self,
        candles_by_timeframe: Mapping[str, Sequence[Candle]],
        symbol: str,
        now: Clock = None,
    ) -> ICTAnalysis:
        """
        Analyze one symbol.

        Args:
            candles_by_timeframe: Timeframe key -> candles, oldest first
            symbol: Instrument
            now: Clock reading; defaults to the current time

        Returns:
            ICTAnalysis snapshot (a cached one when the input is unchanged)
        """
        current = to_utc(now)
        candles = self._prepare(candles_by_timeframe)

        key = None
        if self.cache is not None:
            minute = int(current.timestamp()) // 60
            key = (symbol, _fingerprint(candles, minute))
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug(f"[AnalysisService] Cache hit: {symbol}")
                return cached
            logger.debug(f"[AnalysisService] Cache miss: {symbol}")

        analysis = run_ict_analysis(candles, symbol, current, self.settings)

        if key is not None:
            self.cache.set(key, analysis)

        primary = candles.get(self.settings.primary_timeframe) or []
        if self.alert_engine is not None and primary:
            alerts = self.alert_engine.process(analysis, primary[-1].close)
            if alerts:
                logger.info(f"[AnalysisService] {symbol}: {len(alerts)} new alerts")

        logger.info(
            f"[AnalysisService] {symbol}: trend={analysis.trend.direction.value}, "
            f"confluence={len(analysis.confluence_zones)}, signals={len(analysis.entry_signals)}"
        )
        return analysis

    def analyze_ohlcv(
        self,
        data_by_timeframe: Mapping[str, OHLCVData],
        symbol: str,
        now: Clock = None,
    ) -> ICTAnalysis:
        """Same as analyze, for column-oriented provider data."""
        candles = {tf: data.to_candles() for tf, data in data_by_timeframe.items()}
        return self.analyze(candles, symbol, now)

    def analyze_many(
        self,
        requests: Mapping[str, Mapping[str, Sequence[Candle]]],
        now: Clock = None,
    ) -> List[ICTAnalysis]:
        """Analyze several symbols against the same clock reading."""
        current = to_utc(now)
        return [self.analyze(candles, symbol, current) for symbol, candles in requests.items()]

    def position_size(
        self,
        signal: EntrySignal,
        account_balance: float,
        symbol: str,
        risk_percentage: Optional[float] = None,
    ) -> LotSizeResult:
        """Lot size for a signal's stop distance, risking the configured percentage by default."""
        if risk_percentage is None:
            risk_percentage = self.settings.default_risk_percentage
        return calculate_lot_size(account_balance, risk_percentage, signal.sl_distance_pips, symbol)
