"""Backtesting engine: candle-by-candle replay without lookahead."""

from trend_bot.backtesting.engine import BacktestEngine, BacktestResult

__all__ = ["BacktestEngine", "BacktestResult"]
