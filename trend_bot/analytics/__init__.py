"""Analytics: performance metrics over closed trades."""

from trend_bot.analytics.metrics import (
    PerformanceMetrics,
    compute_metrics,
    equity_curve,
    expectancy,
    max_drawdown,
    profit_factor,
    win_rate,
)

__all__ = [
    "PerformanceMetrics",
    "compute_metrics",
    "equity_curve",
    "expectancy",
    "max_drawdown",
    "profit_factor",
    "win_rate",
]
