"""
SMA trend + RSI + MACD cross + ADX strategy.
Decides on the last closed candle; enters at the caller's price.
"""

from __future__ import annotations
import logging
from typing import Any, List, Optional, Sequence

import pandas as pd

from trend_bot.core.types import Direction, Signal
from trend_bot.strategies.base import BaseStrategy
from trend_bot.strategies.filters import (
    FastTrendFilter,
    FilterStage,
    MacdCrossTrigger,
    MomentumFilter,
    SessionBlackout,
    StageContext,
    StrengthFilter,
    TrendFilter,
)

logger = logging.getLogger("trend_bot.strategy")


def build_stages(
    trend_period: int = 200,
    fast_ema_period: int = 0,
    rsi_period: int = 14,
    rsi_overbought: float = 70.0,
    rsi_oversold: float = 30.0,
    macd_fast: int = 12,
    macd_slow: int = 26,
    macd_signal: int = 9,
    adx_period: int = 14,
    adx_threshold: float = 25.0,
    blackout_hours: Sequence[int] = (),
    timezone: str = "UTC",
) -> List[FilterStage]:
    """Default stage order: trend, fast trend (optional), momentum, trigger, strength, session (optional)."""
    stages: List[FilterStage] = [TrendFilter(trend_period)]
    if fast_ema_period > 0:
        stages.append(FastTrendFilter(fast_ema_period))
    stages.append(MomentumFilter(rsi_period, rsi_overbought, rsi_oversold))
    stages.append(MacdCrossTrigger(macd_fast, macd_slow, macd_signal))
    stages.append(StrengthFilter(adx_period, adx_threshold))
    if blackout_hours:
        stages.append(SessionBlackout(blackout_hours, timezone))
    return stages


class TrendMacdStrategy(BaseStrategy):
    """
    Long: close > SMA(trend), RSI < overbought, bullish MACD cross, ADX >= threshold.
    Short: close < SMA(trend), RSI > oversold, bearish MACD cross, ADX >= threshold.
    Stop at the extreme of the last `stop_lookback` closed candles; target at
    `reward_multiple` times the stop distance.
    """

    def __init__(
        self,
        stop_lookback: int = 10,
        reward_multiple: float = 2.0,
        stages: Optional[List[FilterStage]] = None,
        **stage_params: Any,
    ):
        self.stop_lookback = stop_lookback
        self.reward_multiple = reward_multiple
        self.stages = stages if stages is not None else build_stages(**stage_params)

    @classmethod
    def from_config(cls, config: Any) -> "TrendMacdStrategy":
        return cls(
            stop_lookback=config.stop_lookback,
            reward_multiple=config.reward_multiple,
            trend_period=config.trend_period,
            fast_ema_period=config.fast_ema_period,
            rsi_period=config.rsi_period,
            rsi_overbought=config.rsi_overbought,
            rsi_oversold=config.rsi_oversold,
            macd_fast=config.macd_fast,
            macd_slow=config.macd_slow,
            macd_signal=config.macd_signal,
            adx_period=config.adx_period,
            adx_threshold=config.adx_threshold,
            blackout_hours=config.blackout_hours,
            timezone=config.timezone,
        )

    @property
    def warmup(self) -> int:
        return max([self.stop_lookback, 2] + [s.warmup for s in self.stages])

    def compute_indicators(self, df: pd.DataFrame) -> pd.DataFrame:
        df = df.copy()
        for stage in self.stages:
            df = stage.compute_indicators(df)
        return df

    def get_signal(
        self,
        history: pd.DataFrame,
        entry_price: float,
        index: Optional[int] = None,
        now_ms: Optional[int] = None,
    ) -> Signal:
        computed_at = index if index is not None else len(history) - 1
        if len(history) < self.warmup:
            return Signal.none(computed_at, "insufficient data")

        last = history.iloc[-1]
        ctx = StageContext(
            last=last,
            prev=history.iloc[-2],
            closed_price=float(last["close"]),
            now_ms=now_ms,
        )
        gates = []
        for stage in self.stages:
            gate = stage.evaluate(ctx)
            if gate is None:
                logger.debug("Stage %s has no data yet at %d", stage.name, computed_at)
                return Signal.none(computed_at, "insufficient data")
            gates.append((stage.name, gate))

        long_ok = all(g.long for _, g in gates)
        short_ok = all(g.short for _, g in gates)
        if not (long_ok or short_ok):
            blocked = next((name for name, g in gates if not (g.long or g.short)), "no setup")
            return Signal.none(computed_at, blocked)

        window = history.iloc[-self.stop_lookback:]
        if long_ok:
            direction = Direction.LONG
            stop = float(window["low"].min())
            target = entry_price + (entry_price - stop) * self.reward_multiple
            valid = stop < entry_price
        else:
            direction = Direction.SHORT
            stop = float(window["high"].max())
            target = entry_price - (stop - entry_price) * self.reward_multiple
            valid = stop > entry_price
        if not valid:
            logger.debug("%s stop %.4f on wrong side of entry %.4f, skipping", direction.value, stop, entry_price)
            return Signal.none(computed_at, "stop beyond entry")

        metadata = {
            col: float(last[col])
            for col in ("sma_trend", "ema_fast", "rsi", "macd", "macd_signal", "adx")
            if col in last.index
        }
        metadata["closed_price"] = ctx.closed_price
        return Signal(
            direction=direction,
            entry_price=entry_price,
            stop_loss=stop,
            take_profit=target,
            computed_at=computed_at,
            reason="+".join(name for name, _ in gates),
            metadata=metadata,
        )
