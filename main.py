#!/usr/bin/env python3
"""
Trend bot CLI: backtest | live
Usage:
  python main.py backtest [--config config.yaml] [--csv candles.csv] [--json report.json]
  python main.py live [--config config.yaml]
"""

from __future__ import annotations
import argparse
import json
import logging
import sys
from pathlib import Path

# Project root
ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from trend_bot.core.config import load_config
from trend_bot.core.logger import setup_logging
from trend_bot.backtesting.engine import BacktestEngine
from trend_bot.data.feed import BinanceCandleFeed, load_candles_csv
from trend_bot.data.frames import candles_to_frame
from trend_bot.live.trader import LiveTrader
from trend_bot.persistence.repository import JsonStateRepository
from trend_bot.pipeline import TradingPipeline
from trend_bot.utils.telegram import LogNotifier, TelegramNotifier

logger = logging.getLogger("trend_bot")


def run_backtest(config_path: Path | None, csv_path: Path | None, json_path: Path | None) -> int:
    """Run backtest on a CSV file or on klines fetched from Binance."""
    config = load_config(config_path, ROOT)
    setup_logging(config.log_level, config.log_dir, config.log_file, config.json_logs)
    if csv_path is not None:
        df = load_candles_csv(csv_path)
    else:
        feed = BinanceCandleFeed(config.binance_api_key, config.binance_api_secret, config.use_testnet)
        df = candles_to_frame(feed.get_candles(config.symbol, config.timeframe, config.history_limit))
    pipeline = TradingPipeline.from_config(config)
    if len(df) <= pipeline.warmup:
        logger.error("Need more than %d candles for a backtest, got %d", pipeline.warmup, len(df))
        return 1
    result = BacktestEngine(pipeline, config.initial_capital).run(df)

    m = result.metrics
    print("\n--- Backtest Results ---")
    print(f"Symbol: {config.symbol} {config.timeframe} | candles: {len(df)}")
    print(f"Final balance: {result.final_balance:.2f} (start {result.initial_balance:.2f})")
    print(f"Trades: {len(result.trades)} (wins: {result.win_count}, losses: {result.loss_count})")
    if m:
        print(f"Total return: {m.total_return_pct:.2f}%")
        print(f"Max drawdown: {m.max_drawdown_pct:.2f}%")
        print(f"Win rate: {m.win_rate*100:.1f}%")
        print(f"Profit factor: {m.profit_factor:.2f}")
        print(f"Expectancy: {m.expectancy:.2f} per trade")
    if result.open_at_end:
        p = result.open_at_end
        print(f"Open at end: {p.direction.value} @ {p.entry_price:.2f} (not counted)")
    if json_path is not None:
        json_path.write_text(json.dumps(result.to_dict(), indent=2), encoding="utf-8")
        print(f"Report written to {json_path}")
    return 0


def run_live(config_path: Path | None) -> int:
    """Run the live evaluation loop (signals and paper position tracking; no orders are sent)."""
    config = load_config(config_path, ROOT)
    setup_logging(config.log_level, config.log_dir, config.log_file, config.json_logs)
    if config.telegram_bot_token and config.telegram_chat_id:
        notifier = TelegramNotifier(config.telegram_bot_token, config.telegram_chat_id, config.symbol)
    else:
        notifier = LogNotifier(config.symbol)
    trader = LiveTrader(
        pipeline=TradingPipeline.from_config(config),
        feed=BinanceCandleFeed(config.binance_api_key, config.binance_api_secret, config.use_testnet),
        repository=JsonStateRepository(ROOT / config.state_path),
        notifier=notifier,
        symbol=config.symbol,
        timeframe=config.timeframe,
        initial_capital=config.initial_capital,
        history_limit=config.history_limit,
    )
    logger.info("Live loop starting | %s %s | poll every %ss", config.symbol, config.timeframe, config.poll_seconds)
    trader.run_forever(config.poll_seconds)
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Trend bot CLI")
    parser.add_argument("mode", choices=["backtest", "live"], help="Run backtest or live")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.yaml")
    parser.add_argument("--csv", type=Path, default=None, help="Backtest on candles from a CSV file")
    parser.add_argument("--json", type=Path, default=None, help="Write the backtest report as JSON")
    args = parser.parse_args()
    if args.mode == "backtest":
        return run_backtest(args.config, args.csv, args.json)
    return run_live(args.config)


if __name__ == "__main__":
    sys.exit(main())
