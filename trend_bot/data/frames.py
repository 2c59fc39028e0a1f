"""Conversions between Candle lists and candle DataFrames."""

from __future__ import annotations
from typing import Iterable, List

import pandas as pd

from trend_bot.core.errors import DataIntegrityError
from trend_bot.core.types import Candle

CANDLE_COLUMNS = ["timestamp", "open", "high", "low", "close"]


def candles_to_frame(candles: Iterable[Candle]) -> pd.DataFrame:
    rows = [(c.timestamp, c.open, c.high, c.low, c.close) for c in candles]
    df = pd.DataFrame(rows, columns=CANDLE_COLUMNS)
    return normalize_frame(df)


def normalize_frame(df: pd.DataFrame) -> pd.DataFrame:
    """Keep the candle columns with fixed dtypes and a 0..n-1 index."""
    missing = [c for c in CANDLE_COLUMNS if c not in df.columns]
    if missing:
        raise DataIntegrityError(f"missing candle columns: {missing}")
    out = df[CANDLE_COLUMNS].reset_index(drop=True).copy()
    out["timestamp"] = out["timestamp"].astype("int64")
    for col in CANDLE_COLUMNS[1:]:
        out[col] = out[col].astype(float)
    return out


def frame_to_candles(df: pd.DataFrame) -> List[Candle]:
    return [
        Candle(timestamp=int(ts), open=float(o), high=float(h), low=float(l), close=float(c))
        for ts, o, h, l, c in df[CANDLE_COLUMNS].itertuples(index=False, name=None)
    ]
