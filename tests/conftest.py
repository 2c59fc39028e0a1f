"""Shared test helpers: candle builders, a strategy that signals on cue, pipeline wiring."""

from __future__ import annotations
from typing import Dict, Optional

import numpy as np
import pandas as pd

from trend_bot.core.types import Candle, Direction, Signal
from trend_bot.position.machine import PositionStateMachine
from trend_bot.risk.governor import DailyRiskGovernor
from trend_bot.risk.manager import RiskManager
from trend_bot.pipeline import TradingPipeline
from trend_bot.strategies.base import BaseStrategy

HOUR_MS = 3_600_000
# 2024-01-01 00:00:00 UTC
T0 = 1_704_067_200_000


class ScriptedStrategy(BaseStrategy):
    """Emits a signal when the closed history has a given length; stop 5 and target 10 away from entry."""

    def __init__(self, script: Dict[int, Direction], stop_distance: float = 5.0, target_distance: float = 10.0):
        self.script = script
        self.stop_distance = stop_distance
        self.target_distance = target_distance

    @property
    def warmup(self) -> int:
        return 2

    def compute_indicators(self, df: pd.DataFrame) -> pd.DataFrame:
        return df.copy()

    def get_signal(self, history, entry_price, index=None, now_ms=None) -> Signal:
        direction = self.script.get(len(history), Direction.NONE)
        if direction is Direction.NONE:
            return Signal.none(len(history) - 1, "no setup")
        sign = direction.sign
        return Signal(
            direction=direction,
            entry_price=entry_price,
            stop_loss=entry_price - sign * self.stop_distance,
            take_profit=entry_price + sign * self.target_distance,
            computed_at=len(history) - 1,
        )


def candle(i: int, low: float = 99.5, high: float = 100.5, close: Optional[float] = None) -> Candle:
    close = 100.0 if close is None else close
    close = min(max(close, low), high)
    return Candle(timestamp=T0 + i * HOUR_MS, open=close, high=high, low=low, close=close)


def flat_candles(n: int) -> list:
    return [candle(i) for i in range(n)]


def random_walk_frame(n: int = 600, seed: int = 42) -> pd.DataFrame:
    rng = np.random.default_rng(seed)
    close = 100.0 * np.exp(np.cumsum(rng.normal(0.0, 0.01, n)))
    open_ = np.concatenate([[100.0], close[:-1]])
    wick = np.abs(rng.normal(0.0, 0.004, (2, n)))
    high = np.maximum(open_, close) * (1 + wick[0])
    low = np.minimum(open_, close) * (1 - wick[1])
    return pd.DataFrame({
        "timestamp": T0 + np.arange(n, dtype=np.int64) * HOUR_MS,
        "open": open_,
        "high": high,
        "low": low,
        "close": close,
    })


def make_pipeline(strategy: BaseStrategy, risk_pct: float = 1.0, daily_limit_pct: float = 4.0,
                  break_even: float = 0.5) -> TradingPipeline:
    return TradingPipeline(
        strategy=strategy,
        risk_manager=RiskManager(risk_pct),
        governor=DailyRiskGovernor(daily_limit_pct, "UTC"),
        position_machine=PositionStateMachine(break_even),
    )
