"""
Technical indicators over plain price sequences.

Every function returns a numpy array that is shorter than its input by the
indicator's warmup minus one: element ``i`` of the output belongs to input
index ``i + warmup - 1``. Too little input gives an empty array, never an
error. Outputs only ever depend on inputs up to their own index, so the value
at index t is the same whether computed on ``values[:t + 1]`` or on the full
series.
"""

from __future__ import annotations
from typing import NamedTuple, Sequence, Union

import numpy as np
import pandas as pd

ArrayLike = Union[Sequence[float], np.ndarray]

_EMPTY = np.empty(0, dtype=float)


class MacdSeries(NamedTuple):
    """MACD line and signal line, aligned element for element."""
    macd: np.ndarray
    signal: np.ndarray


def _as_array(values: ArrayLike) -> np.ndarray:
    return np.asarray(values, dtype=float)


def _check_period(period: int) -> None:
    if period < 1:
        raise ValueError(f"period must be >= 1, got {period}")


def sma_warmup(period: int) -> int:
    return period


def ema_warmup(period: int) -> int:
    return period


def rsi_warmup(period: int) -> int:
    return period + 1


def macd_warmup(slow: int, signal: int) -> int:
    return slow + signal - 1


def adx_warmup(period: int) -> int:
    return 2 * period


def sma(values: ArrayLike, period: int) -> np.ndarray:
    """Arithmetic mean of the trailing `period` values."""
    _check_period(period)
    arr = _as_array(values)
    if len(arr) < period:
        return _EMPTY.copy()
    return pd.Series(arr).rolling(period).mean().to_numpy()[period - 1:]


def ema(values: ArrayLike, period: int) -> np.ndarray:
    """EMA seeded with the SMA of the first `period` values, k = 2 / (period + 1)."""
    _check_period(period)
    arr = _as_array(values)
    if len(arr) < period:
        return _EMPTY.copy()
    k = 2.0 / (period + 1)
    out = np.empty(len(arr) - period + 1, dtype=float)
    out[0] = arr[:period].sum() / period
    for i in range(1, len(out)):
        out[i] = arr[period - 1 + i] * k + out[i - 1] * (1 - k)
    return out


def rsi(closes: ArrayLike, period: int = 14) -> np.ndarray:
    """
    Wilder RSI. The first averages are simple means of the first `period`
    gains/losses; later ones use avg = (prev * (period - 1) + x) / period.
    RSI is 100 when the average loss is zero.
    """
    _check_period(period)
    arr = _as_array(closes)
    if len(arr) < period + 1:
        return _EMPTY.copy()
    delta = np.diff(arr)
    gains = np.where(delta > 0, delta, 0.0)
    losses = np.where(delta < 0, -delta, 0.0)
    out = np.empty(len(delta) - period + 1, dtype=float)
    avg_gain = gains[:period].sum() / period
    avg_loss = losses[:period].sum() / period
    out[0] = _rsi_value(avg_gain, avg_loss)
    for i in range(1, len(out)):
        j = period - 1 + i
        avg_gain = (avg_gain * (period - 1) + gains[j]) / period
        avg_loss = (avg_loss * (period - 1) + losses[j]) / period
        out[i] = _rsi_value(avg_gain, avg_loss)
    return out


def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100.0 - 100.0 / (1.0 + rs)


def macd(closes: ArrayLike, fast: int = 12, slow: int = 26, signal: int = 9) -> MacdSeries:
    """MACD = EMA(fast) - EMA(slow); signal = EMA(signal) of the MACD line."""
    for p in (fast, slow, signal):
        _check_period(p)
    if fast >= slow:
        raise ValueError(f"fast period ({fast}) must be shorter than slow period ({slow})")
    arr = _as_array(closes)
    slow_ema = ema(arr, slow)
    if len(slow_ema) < signal:
        return MacdSeries(_EMPTY.copy(), _EMPTY.copy())
    fast_ema = ema(arr, fast)
    # Drop the fast EMA values that precede the first slow EMA value
    line = fast_ema[slow - fast:] - slow_ema
    sig = ema(line, signal)
    return MacdSeries(line[signal - 1:], sig)


def adx(highs: ArrayLike, lows: ArrayLike, closes: ArrayLike, period: int = 14) -> np.ndarray:
    """
    Wilder's Average Directional Index.

    +DM/-DM and true range start at the second candle. Each is smoothed with
    Wilder's running sum (first value is the plain sum of `period` values, then
    s = s - s / period + x). DX = 100 * |+DI - -DI| / (+DI + -DI), zero when both
    DIs are zero. ADX starts as the mean of the first `period` DX values and then
    follows adx = (prev * (period - 1) + dx) / period.
    """
    _check_period(period)
    h, l, c = _as_array(highs), _as_array(lows), _as_array(closes)
    if not (len(h) == len(l) == len(c)):
        raise ValueError("highs, lows and closes must have the same length")
    n = len(c)
    if n < adx_warmup(period):
        return _EMPTY.copy()

    up = h[1:] - h[:-1]
    down = l[:-1] - l[1:]
    plus_dm = np.where((up > down) & (up > 0), up, 0.0)
    minus_dm = np.where((down > up) & (down > 0), down, 0.0)
    tr = np.maximum.reduce([h[1:] - l[1:], np.abs(h[1:] - c[:-1]), np.abs(l[1:] - c[:-1])])

    sm_tr = tr[:period].sum()
    sm_plus = plus_dm[:period].sum()
    sm_minus = minus_dm[:period].sum()
    dx = np.empty(len(tr) - period + 1, dtype=float)
    dx[0] = _dx_value(sm_plus, sm_minus, sm_tr)
    for i in range(1, len(dx)):
        j = period - 1 + i
        sm_tr = sm_tr - sm_tr / period + tr[j]
        sm_plus = sm_plus - sm_plus / period + plus_dm[j]
        sm_minus = sm_minus - sm_minus / period + minus_dm[j]
        dx[i] = _dx_value(sm_plus, sm_minus, sm_tr)

    out = np.empty(len(dx) - period + 1, dtype=float)
    out[0] = dx[:period].sum() / period
    for i in range(1, len(out)):
        out[i] = (out[i - 1] * (period - 1) + dx[period - 1 + i]) / period
    return out


def _dx_value(sm_plus: float, sm_minus: float, sm_tr: float) -> float:
    if sm_tr <= 0:
        return 0.0
    plus_di = 100.0 * sm_plus / sm_tr
    minus_di = 100.0 * sm_minus / sm_tr
    total = plus_di + minus_di
    if total == 0:
        return 0.0
    return 100.0 * abs(plus_di - minus_di) / total


def pad(series: np.ndarray, length: int) -> np.ndarray:
    """Left-pad an indicator series with NaN so it lines up with `length` inputs."""
    out = np.full(length, np.nan, dtype=float)
    if len(series):
        out[length - len(series):] = series
    return out
