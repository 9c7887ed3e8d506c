#!/usr/bin/env python3
"""
Run one ICT analysis pass and print the snapshot as JSON.

Run: python scripts/run_analysis.py --symbol XAUUSD --seed 7
     python scripts/run_analysis.py --symbol EURUSD --csv data/EURUSD_1h.csv
     python scripts/run_analysis.py --symbol XAUUSD --balance 10000

Without --csv, seeded demo candles are generated for the primary and
higher timeframes.
"""
import argparse
import logging
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from ict_engine.alerts import AlertEngine
from ict_engine.api.schemas import analysis_to_json
from ict_engine.config import SYMBOLS, load_settings
from ict_engine.data import generate_demo_candles, load_csv
from ict_engine.services import AnalysisService

logger = logging.getLogger("run_analysis")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="ICT market structure analysis")
    parser.add_argument("--symbol", default="XAUUSD", choices=SYMBOLS)
    parser.add_argument("--count", type=int, default=200, help="demo candles per timeframe")
    parser.add_argument("--seed", type=int, default=None, help="demo data seed")
    parser.add_argument("--csv", default=None, help="primary timeframe CSV")
    parser.add_argument("--htf-csv", default=None, help="higher timeframe CSV")
    parser.add_argument("--balance", type=float, default=None, help="account balance for lot sizing")
    parser.add_argument("--env-file", default=None)
    parser.add_argument("--indent", type=int, default=2)
    return parser.parse_args(argv)


def _load_candles(args, settings):
    if args.csv:
        candles = {settings.primary_timeframe: load_csv(args.csv).to_candles()}
        if args.htf_csv:
            candles[settings.higher_timeframe] = load_csv(args.htf_csv).to_candles()
        return candles

    return {
        tf: generate_demo_candles(args.symbol, tf, args.count, args.seed)
        for tf in (settings.primary_timeframe, settings.higher_timeframe)
    }


def main(argv=None) -> int:
    args = parse_args(argv)
    settings = load_settings(args.env_file)

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    alert_engine = AlertEngine()
    service = AnalysisService(settings=settings, alert_engine=alert_engine)

    try:
        candles = _load_candles(args, settings)
        analysis = service.analyze(candles, args.symbol)
    except (OSError, ValueError) as e:
        logger.error(f"Analysis failed: {e}")
        return 1

    for alert in alert_engine.store.all():
        logger.info(f"[{alert.priority.value}] {alert.title}: {alert.message}")

    if args.balance is not None:
        for signal in analysis.entry_signals:
            sized = service.position_size(signal, args.balance, args.symbol)
            logger.info(
                f"[Sizing] {signal.id}: {sized.lot_size:.2f} lots, "
                f"risk {sized.risk_amount:.2f} at {settings.default_risk_percentage}%"
            )

    print(analysis_to_json(analysis, indent=args.indent))
    return 0


if __name__ == "__main__":
    sys.exit(main())
