"""
Filter stages composed by TrendMacdStrategy.

A stage adds its indicator columns to the candle frame and, at decision time,
returns a Gate saying whether it lets a LONG and/or a SHORT through. A stage
returns None when its indicator is not available yet.
"""

from __future__ import annotations
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, NamedTuple, Optional
from zoneinfo import ZoneInfo

import pandas as pd

from trend_bot.indicators import library as ind


class Gate(NamedTuple):
    long: bool
    short: bool


ALLOW_BOTH = Gate(True, True)
BLOCK_BOTH = Gate(False, False)


@dataclass
class StageContext:
    last: pd.Series
    prev: pd.Series
    closed_price: float
    now_ms: Optional[int] = None


def column_value(row: pd.Series, column: str) -> Optional[float]:
    """Indicator value from a row, or None if absent or still warming up."""
    value = row.get(column)
    if value is None:
        return None
    value = float(value)
    if math.isnan(value):
        return None
    return value


class FilterStage(ABC):
    name = "stage"

    @property
    def warmup(self) -> int:
        return 0

    def compute_indicators(self, df: pd.DataFrame) -> pd.DataFrame:
        return df

    @abstractmethod
    def evaluate(self, ctx: StageContext) -> Optional[Gate]:
        ...


class TrendFilter(FilterStage):
    """LONG only above the trend SMA, SHORT only below it."""
    name = "trend"
    column = "sma_trend"

    def __init__(self, period: int = 200):
        self.period = period

    @property
    def warmup(self) -> int:
        return ind.sma_warmup(self.period)

    def compute_indicators(self, df: pd.DataFrame) -> pd.DataFrame:
        df[self.column] = ind.pad(ind.sma(df["close"].to_numpy(), self.period), len(df))
        return df

    def evaluate(self, ctx: StageContext) -> Optional[Gate]:
        level = column_value(ctx.last, self.column)
        if level is None:
            return None
        return Gate(ctx.closed_price > level, ctx.closed_price < level)


class FastTrendFilter(TrendFilter):
    """Same rule against a short EMA (e.g. EMA 9) for a second trend confirmation."""
    name = "fast_trend"
    column = "ema_fast"

    def __init__(self, period: int = 9):
        super().__init__(period)

    @property
    def warmup(self) -> int:
        return ind.ema_warmup(self.period)

    def compute_indicators(self, df: pd.DataFrame) -> pd.DataFrame:
        df[self.column] = ind.pad(ind.ema(df["close"].to_numpy(), self.period), len(df))
        return df


class MomentumFilter(FilterStage):
    """RSI: no LONG when overbought, no SHORT when oversold."""
    name = "momentum"

    def __init__(self, period: int = 14, overbought: float = 70.0, oversold: float = 30.0):
        self.period = period
        self.overbought = overbought
        self.oversold = oversold

    @property
    def warmup(self) -> int:
        return ind.rsi_warmup(self.period)

    def compute_indicators(self, df: pd.DataFrame) -> pd.DataFrame:
        df["rsi"] = ind.pad(ind.rsi(df["close"].to_numpy(), self.period), len(df))
        return df

    def evaluate(self, ctx: StageContext) -> Optional[Gate]:
        value = column_value(ctx.last, "rsi")
        if value is None:
            return None
        return Gate(value < self.overbought, value > self.oversold)


class MacdCrossTrigger(FilterStage):
    """MACD line crossing its signal line between the last two closed candles."""
    name = "trigger"

    def __init__(self, fast: int = 12, slow: int = 26, signal: int = 9):
        self.fast = fast
        self.slow = slow
        self.signal = signal

    @property
    def warmup(self) -> int:
        # two MACD points are needed to see a cross
        return ind.macd_warmup(self.slow, self.signal) + 1

    def compute_indicators(self, df: pd.DataFrame) -> pd.DataFrame:
        series = ind.macd(df["close"].to_numpy(), self.fast, self.slow, self.signal)
        df["macd"] = ind.pad(series.macd, len(df))
        df["macd_signal"] = ind.pad(series.signal, len(df))
        return df

    def evaluate(self, ctx: StageContext) -> Optional[Gate]:
        values = (
            column_value(ctx.prev, "macd"),
            column_value(ctx.prev, "macd_signal"),
            column_value(ctx.last, "macd"),
            column_value(ctx.last, "macd_signal"),
        )
        if any(v is None for v in values):
            return None
        prev_macd, prev_signal, cur_macd, cur_signal = values
        bullish = prev_macd < prev_signal and cur_macd > cur_signal
        bearish = prev_macd > prev_signal and cur_macd < cur_signal
        return Gate(bullish, bearish)


class StrengthFilter(FilterStage):
    """ADX quality filter: below the threshold the market is ranging, no entries."""
    name = "strength"

    def __init__(self, period: int = 14, threshold: float = 25.0):
        self.period = period
        self.threshold = threshold

    @property
    def warmup(self) -> int:
        return ind.adx_warmup(self.period)

    def compute_indicators(self, df: pd.DataFrame) -> pd.DataFrame:
        values = ind.adx(df["high"].to_numpy(), df["low"].to_numpy(), df["close"].to_numpy(), self.period)
        df["adx"] = ind.pad(values, len(df))
        return df

    def evaluate(self, ctx: StageContext) -> Optional[Gate]:
        value = column_value(ctx.last, "adx")
        if value is None:
            return None
        if value < self.threshold:
            return BLOCK_BOTH
        return ALLOW_BOTH


class SessionBlackout(FilterStage):
    """No new entries during the given hours of day (e.g. around scheduled news)."""
    name = "session"

    def __init__(self, hours: Iterable[int] = (), tz: str = "UTC"):
        self.hours = frozenset(int(h) for h in hours)
        self.tz = ZoneInfo(tz)

    def evaluate(self, ctx: StageContext) -> Optional[Gate]:
        if ctx.now_ms is None or not self.hours:
            return ALLOW_BOTH
        hour = datetime.fromtimestamp(ctx.now_ms / 1000.0, tz=timezone.utc).astimezone(self.tz).hour
        if hour in self.hours:
            return BLOCK_BOTH
        return ALLOW_BOTH
