"""
Performance metrics over closed trades: return, win rate, profit factor,
expectancy, average win/loss, max drawdown of the trade-by-trade equity curve.
"""

from __future__ import annotations
from dataclasses import asdict, dataclass
from typing import List, Sequence

import numpy as np

from trend_bot.core.types import TradeRecord


@dataclass
class PerformanceMetrics:
    """Aggregate performance metrics."""
    total_return_pct: float
    max_drawdown_pct: float
    win_rate: float
    profit_factor: float
    expectancy: float
    total_trades: int
    winning_trades: int
    losing_trades: int
    avg_win: float
    avg_loss: float

    def to_dict(self) -> dict:
        return asdict(self)


def max_drawdown(equity: Sequence[float]) -> float:
    """Max drawdown in percent of the running peak (negative, e.g. -16.7)."""
    if len(equity) == 0:
        return 0.0
    arr = np.asarray(equity, dtype=float)
    peak = np.maximum.accumulate(arr)
    dd = (arr - peak) / np.where(peak != 0, peak, 1)
    return float(np.min(dd)) * 100.0


def win_rate(pnls: Sequence[float]) -> float:
    """Fraction of trades with positive PnL."""
    if not pnls:
        return 0.0
    return sum(1 for p in pnls if p > 0) / len(pnls)


def profit_factor(pnls: Sequence[float]) -> float:
    """Gross profit / gross loss. inf with no losses, 0 with no wins."""
    wins = sum(p for p in pnls if p > 0)
    losses = sum(-p for p in pnls if p < 0)
    if losses <= 0:
        return float("inf") if wins > 0 else 0.0
    return wins / losses


def expectancy(pnls: Sequence[float]) -> float:
    """Average PnL per trade."""
    if not pnls:
        return 0.0
    return sum(pnls) / len(pnls)


def equity_curve(trades: Sequence[TradeRecord], initial_balance: float) -> List[float]:
    curve = [initial_balance]
    for t in trades:
        curve.append(curve[-1] + t.pnl)
    return curve


def compute_metrics(trades: Sequence[TradeRecord], initial_balance: float) -> PerformanceMetrics:
    pnls = [t.pnl for t in trades]
    wins = [p for p in pnls if p > 0]
    losses = [p for p in pnls if p <= 0]
    curve = equity_curve(trades, initial_balance)
    total_return_pct = (curve[-1] - initial_balance) / initial_balance * 100.0 if initial_balance else 0.0
    return PerformanceMetrics(
        total_return_pct=total_return_pct,
        max_drawdown_pct=max_drawdown(curve),
        win_rate=win_rate(pnls),
        profit_factor=profit_factor(pnls),
        expectancy=expectancy(pnls),
        total_trades=len(pnls),
        winning_trades=len(wins),
        losing_trades=len(losses),
        avg_win=sum(wins) / len(wins) if wins else 0.0,
        avg_loss=sum(losses) / len(losses) if losses else 0.0,
    )
