"""Tests for trend_bot.indicators.library."""

import numpy as np
import pandas as pd
import pytest

from trend_bot.indicators.library import adx, ema, macd, pad, rsi, sma

# Closing prices from the StockCharts RSI worksheet
RSI_CLOSES = [
    44.34, 44.09, 44.15, 43.61, 44.33, 44.83, 45.10, 45.42, 45.84, 46.08,
    45.89, 46.03, 45.61, 46.28, 46.28, 46.00, 46.03, 46.41, 46.22, 45.64,
]

# Closing prices from the StockCharts 10-day EMA worksheet
EMA_CLOSES = [
    22.27, 22.19, 22.08, 22.17, 22.18, 22.13, 22.23, 22.43, 22.24, 22.29,
    22.15, 22.39, 22.38, 22.61, 23.36, 24.05, 23.75, 23.83, 23.95, 23.63,
]
EMA_10 = [22.22, 22.21, 22.24, 22.27, 22.33, 22.52, 22.80, 22.97, 23.13, 23.28, 23.34]

# (high, low, close) worked through Wilder's ADX table by hand with period 2:
# DX = 100, 33.33, 55.56, 44.00 and ADX = 66.67, 61.11, 52.56
ADX_CANDLES = [
    (10.0, 8.0, 9.0),
    (11.0, 9.0, 10.5),
    (12.0, 10.0, 11.0),
    (11.5, 9.5, 10.0),
    (11.0, 8.0, 8.5),
    (13.0, 10.0, 12.5),
]


def pandas_ema(values, period):
    """EMA via pandas ewm, seeded with the SMA of the first `period` values."""
    values = np.asarray(values, dtype=float)
    seeded = np.concatenate([[values[:period].mean()], values[period:]])
    return pd.Series(seeded).ewm(span=period, adjust=False).mean().to_numpy()


def test_sma_single_window():
    assert sma([1, 2, 3, 4, 5], 5).tolist() == [3.0]


def test_sma_rolling():
    assert sma([1, 2, 3, 4, 5], 3).tolist() == [2.0, 3.0, 4.0]


def test_sma_short_input_is_empty():
    assert len(sma([1, 2, 3], 5)) == 0


def test_ema_seeded_with_sma():
    assert ema([1, 2, 3, 4, 5, 6], 3).tolist() == pytest.approx([2.0, 3.0, 4.0, 5.0])


def test_ema_period_one_is_identity():
    assert ema([3.0, 1.0, 4.0], 1).tolist() == [3.0, 1.0, 4.0]


def test_ema_reference_values():
    out = ema(EMA_CLOSES, 10)
    assert len(out) == len(EMA_CLOSES) - 9
    assert out.tolist() == pytest.approx(EMA_10, abs=0.01)


def test_ema_matches_pandas_ewm():
    rng = np.random.default_rng(5)
    closes = 100 + np.cumsum(rng.normal(0, 1, 200))
    for period in (3, 12, 26, 50):
        assert ema(closes, period).tolist() == pytest.approx(pandas_ema(closes, period).tolist())


def test_invalid_period_raises():
    with pytest.raises(ValueError):
        sma([1, 2, 3], 0)
    with pytest.raises(ValueError):
        ema([1, 2, 3], -1)


def test_rsi_reference_values():
    out = rsi(RSI_CLOSES, 14)
    assert len(out) == len(RSI_CLOSES) - 14
    assert out[0] == pytest.approx(70.46, abs=0.01)
    assert out[1] == pytest.approx(66.25, abs=0.01)


def test_rsi_needs_period_plus_one_closes():
    assert len(rsi(RSI_CLOSES[:14], 14)) == 0
    assert len(rsi(RSI_CLOSES[:15], 14)) == 1


def test_rsi_no_losses_is_100():
    out = rsi(list(range(1, 21)), 14)
    assert np.all(out == 100.0)


def test_rsi_stays_in_range():
    rng = np.random.default_rng(3)
    closes = 100 + np.cumsum(rng.normal(0, 1, 300))
    out = rsi(closes, 14)
    assert np.all((out >= 0) & (out <= 100))


def test_macd_linear_series():
    series = macd([1, 2, 3, 4, 5, 6, 7], fast=2, slow=3, signal=2)
    assert len(series.macd) == len(series.signal) == 4
    assert series.macd.tolist() == pytest.approx([0.5] * 4)
    assert series.signal.tolist() == pytest.approx([0.5] * 4)


def test_macd_short_input_is_empty():
    series = macd(list(range(30)), 12, 26, 9)
    assert len(series.macd) == 0 and len(series.signal) == 0
    assert len(macd(list(range(34)), 12, 26, 9).macd) == 1


def test_macd_fast_must_be_shorter():
    with pytest.raises(ValueError):
        macd(list(range(50)), 26, 12, 9)


def test_macd_matches_pandas_ewm():
    rng = np.random.default_rng(9)
    closes = 100 + np.cumsum(rng.normal(0, 1, 150))
    series = macd(closes, 12, 26, 9)

    line = pandas_ema(closes, 12)[26 - 12:] - pandas_ema(closes, 26)
    signal = pandas_ema(line, 9)
    assert len(series.macd) == len(closes) - (26 + 9 - 1) + 1
    assert series.macd.tolist() == pytest.approx(line[9 - 1:].tolist())
    assert series.signal.tolist() == pytest.approx(signal.tolist())


def test_adx_steady_uptrend_is_100():
    n, period = 12, 3
    t = np.arange(n, dtype=float)
    out = adx(t + 1, t, t + 0.5, period)
    assert len(out) == n - 2 * period + 1
    assert out.tolist() == pytest.approx([100.0] * len(out))


def test_adx_wilder_worksheet():
    highs, lows, closes = zip(*ADX_CANDLES)
    out = adx(highs, lows, closes, 2)
    assert out.tolist() == pytest.approx([66.667, 61.111, 52.556], abs=0.01)


def test_adx_flat_market_is_zero():
    flat = np.full(10, 50.0)
    out = adx(flat, flat, flat, 3)
    assert out.tolist() == [0.0] * (10 - 6 + 1)


def test_adx_short_input_is_empty():
    t = np.arange(5, dtype=float)
    assert len(adx(t + 1, t, t + 0.5, 3)) == 0


def test_adx_length_mismatch_raises():
    with pytest.raises(ValueError):
        adx([1, 2, 3], [1, 2], [1, 2, 3], 2)


def test_values_only_depend_on_prefix():
    rng = np.random.default_rng(11)
    close = 100 + np.cumsum(rng.normal(0, 1, 120))
    high = close + rng.uniform(0.1, 1.0, 120)
    low = close - rng.uniform(0.1, 1.0, 120)

    full_rsi = pad(rsi(close, 14), 120)
    full_macd = pad(macd(close, 12, 26, 9).macd, 120)
    full_adx = pad(adx(high, low, close, 14), 120)
    for t in (40, 77, 119):
        assert rsi(close[:t + 1], 14)[-1] == pytest.approx(full_rsi[t])
        assert macd(close[:t + 1], 12, 26, 9).macd[-1] == pytest.approx(full_macd[t])
        assert adx(high[:t + 1], low[:t + 1], close[:t + 1], 14)[-1] == pytest.approx(full_adx[t])


def test_pad_aligns_right():
    out = pad(np.array([1.0, 2.0]), 4)
    assert np.isnan(out[0]) and np.isnan(out[1])
    assert out[2:].tolist() == [1.0, 2.0]
    assert np.isnan(pad(np.empty(0), 3)).all()
