"""Strategies: base interface, filter stages and the trend/MACD implementation."""

from trend_bot.strategies.base import BaseStrategy
from trend_bot.strategies.filters import (
    FastTrendFilter,
    FilterStage,
    Gate,
    MacdCrossTrigger,
    MomentumFilter,
    SessionBlackout,
    StageContext,
    StrengthFilter,
    TrendFilter,
)
from trend_bot.strategies.trend_macd import TrendMacdStrategy, build_stages

__all__ = [
    "BaseStrategy",
    "FastTrendFilter",
    "FilterStage",
    "Gate",
    "MacdCrossTrigger",
    "MomentumFilter",
    "SessionBlackout",
    "StageContext",
    "StrengthFilter",
    "TrendFilter",
    "TrendMacdStrategy",
    "build_stages",
]
