"""Tests for candle integrity checks."""

import math

import pandas as pd
import pytest

from trend_bot.core.errors import DataIntegrityError
from trend_bot.core.types import Candle
from trend_bot.core.validation import validate_candle, validate_candles, validate_frame


def c(ts=0, o=10.0, h=11.0, l=9.0, cl=10.5):
    return Candle(timestamp=ts, open=o, high=h, low=l, close=cl)


def test_valid_candles_pass():
    validate_candles([c(0), c(1), c(1), c(2)])


@pytest.mark.parametrize("bad", [
    c(h=8.0),
    c(o=math.nan),
    c(cl=math.inf),
    c(l=-1.0),
    c(o=12.0),
    c(cl=8.5),
])
def test_malformed_candle_rejected(bad):
    with pytest.raises(DataIntegrityError):
        validate_candle(bad)


def test_backwards_timestamp_rejected():
    with pytest.raises(DataIntegrityError):
        validate_candles([c(5), c(4)])


def test_data_integrity_error_is_value_error():
    with pytest.raises(ValueError):
        validate_candle(c(h=8.0))


def test_validate_frame():
    df = pd.DataFrame({
        "timestamp": [0, 1, 2],
        "open": [10.0, 10.0, 10.0],
        "high": [11.0, 11.0, 11.0],
        "low": [9.0, 9.0, 9.0],
        "close": [10.0, 10.0, 10.0],
    })
    validate_frame(df)
    validate_frame(df.iloc[0:0])

    bad = df.copy()
    bad.loc[1, "close"] = float("nan")
    with pytest.raises(DataIntegrityError):
        validate_frame(bad)

    bad = df.copy()
    bad["timestamp"] = [0, 2, 1]
    with pytest.raises(DataIntegrityError, match="row 2"):
        validate_frame(bad)

    with pytest.raises(DataIntegrityError):
        validate_frame(df.drop(columns=["low"]))
