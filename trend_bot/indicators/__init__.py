"""Indicator library: SMA, EMA, RSI, MACD, ADX."""

from trend_bot.indicators.library import (
    MacdSeries,
    adx,
    adx_warmup,
    ema,
    ema_warmup,
    macd,
    macd_warmup,
    pad,
    rsi,
    rsi_warmup,
    sma,
    sma_warmup,
)

__all__ = [
    "MacdSeries",
    "adx",
    "adx_warmup",
    "ema",
    "ema_warmup",
    "macd",
    "macd_warmup",
    "pad",
    "rsi",
    "rsi_warmup",
    "sma",
    "sma_warmup",
]
