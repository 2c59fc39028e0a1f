"""
Candle integrity checks. Corrupt data fails loudly instead of flowing into indicators.
"""

from __future__ import annotations
import math
from typing import Iterable, Optional

import numpy as np
import pandas as pd

from trend_bot.core.errors import DataIntegrityError
from trend_bot.core.types import Candle

OHLC_COLUMNS = ("open", "high", "low", "close")


def validate_candle(candle: Candle, prev_timestamp: Optional[int] = None) -> None:
    """Raise DataIntegrityError if a single candle is malformed or out of order."""
    prices = (candle.open, candle.high, candle.low, candle.close)
    for p in prices:
        if p is None or not math.isfinite(p):
            raise DataIntegrityError(f"non-finite price in candle at {candle.timestamp}")
        if p < 0:
            raise DataIntegrityError(f"negative price {p} in candle at {candle.timestamp}")
    if candle.low > candle.high:
        raise DataIntegrityError(f"low {candle.low} > high {candle.high} at {candle.timestamp}")
    for p in (candle.open, candle.close):
        if p < candle.low or p > candle.high:
            raise DataIntegrityError(f"open/close {p} outside [{candle.low}, {candle.high}] at {candle.timestamp}")
    if prev_timestamp is not None and candle.timestamp < prev_timestamp:
        raise DataIntegrityError(f"timestamp {candle.timestamp} before previous {prev_timestamp}")


def validate_candles(candles: Iterable[Candle]) -> None:
    prev: Optional[int] = None
    for c in candles:
        validate_candle(c, prev)
        prev = c.timestamp


def validate_frame(df: pd.DataFrame) -> None:
    """Vectorized equivalent of validate_candles for a candle DataFrame."""
    if df.empty:
        return
    missing = [c for c in ("timestamp",) + OHLC_COLUMNS if c not in df.columns]
    if missing:
        raise DataIntegrityError(f"missing candle columns: {missing}")
    prices = df[list(OHLC_COLUMNS)].to_numpy(dtype=float)
    if not np.isfinite(prices).all():
        raise DataIntegrityError("non-finite price in candle data")
    if (prices < 0).any():
        raise DataIntegrityError("negative price in candle data")
    o, h, l, c = prices.T
    if (l > h).any():
        raise DataIntegrityError(f"low > high at row {int(np.argmax(l > h))}")
    outside = (o < l) | (o > h) | (c < l) | (c > h)
    if outside.any():
        raise DataIntegrityError(f"open/close outside range at row {int(np.argmax(outside))}")
    ts = df["timestamp"].to_numpy(dtype=np.int64)
    backwards = np.diff(ts) < 0
    if backwards.any():
        raise DataIntegrityError(f"non-monotonic timestamp at row {int(np.argmax(backwards)) + 1}")
