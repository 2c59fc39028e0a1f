"""
Backtest engine: no lookahead. The decision for candle i sees candles up to
i-1 only; exits are tested against candle i.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Union

import pandas as pd

from trend_bot.analytics.metrics import PerformanceMetrics, compute_metrics
from trend_bot.core.types import BotState, Candle, Event, Position, TradeRecord
from trend_bot.core.validation import validate_frame
from trend_bot.data.frames import candles_to_frame, frame_to_candles, normalize_frame
from trend_bot.pipeline import TradingPipeline

logger = logging.getLogger("trend_bot.backtest")


@dataclass
class BacktestResult:
    """Backtest output: closed trades, balances and counts. A position still open at the end is not a trade."""
    trades: List[TradeRecord] = field(default_factory=list)
    initial_balance: float = 0.0
    final_balance: float = 0.0
    win_count: int = 0
    loss_count: int = 0
    open_at_end: Optional[Position] = None
    equity_curve: List[float] = field(default_factory=list)
    events: List[Event] = field(default_factory=list)
    metrics: Optional[PerformanceMetrics] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "initial_balance": self.initial_balance,
            "final_balance": self.final_balance,
            "win_count": self.win_count,
            "loss_count": self.loss_count,
            "trades": [t.to_dict() for t in self.trades],
            "open_at_end": self.open_at_end.to_dict() if self.open_at_end else None,
            "events": [e.to_dict() for e in self.events],
            "metrics": self.metrics.to_dict() if self.metrics else None,
        }


class BacktestEngine:
    """
    Replays candles through a TradingPipeline. Indicators are computed once over
    the whole series; each value only depends on earlier candles, so slicing
    the frame at i gives exactly what a live run would have seen.
    """

    def __init__(self, pipeline: TradingPipeline, initial_capital: float = 10000.0):
        self.pipeline = pipeline
        self.initial_capital = initial_capital

    def run(self, data: Union[pd.DataFrame, Iterable[Candle]]) -> BacktestResult:
        """Run on a candle DataFrame (timestamp, open, high, low, close) or a Candle sequence."""
        if isinstance(data, pd.DataFrame):
            df = normalize_frame(data)
        else:
            df = candles_to_frame(data)
        validate_frame(df)

        frame = self.pipeline.strategy.compute_indicators(df)
        candles = frame_to_candles(df)
        closes = df["close"].to_numpy()

        state = BotState.initial(self.initial_capital)
        trades: List[TradeRecord] = []
        events: List[Event] = []
        equity_curve = [state.balance]
        start = max(self.pipeline.warmup, 1)

        for i in range(start, len(candles)):
            result = self.pipeline.step(
                state,
                history=frame.iloc[:i],
                candle=candles[i],
                index=i,
                entry_price=float(closes[i - 1]),
            )
            state = result.state
            if result.trade is not None:
                trades.append(result.trade)
            events.extend(result.events)
            equity_curve.append(state.balance)

        wins = sum(1 for t in trades if t.pnl > 0)
        open_at_end = state.position if state.position.is_open else None
        if open_at_end is not None:
            logger.info("Position opened at %d still open at end of data", open_at_end.entry_index)
        logger.info(
            "Backtest done: %d candles, %d trades, balance %.2f -> %.2f",
            len(candles), len(trades), self.initial_capital, state.balance,
        )
        return BacktestResult(
            trades=trades,
            initial_balance=self.initial_capital,
            final_balance=state.balance,
            win_count=wins,
            loss_count=len(trades) - wins,
            open_at_end=open_at_end,
            equity_curve=equity_curve,
            events=events,
            metrics=compute_metrics(trades, self.initial_capital),
        )
