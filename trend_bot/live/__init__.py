"""Live polling loop around the evaluation pipeline."""

from trend_bot.live.trader import LiveTrader

__all__ = ["LiveTrader"]
