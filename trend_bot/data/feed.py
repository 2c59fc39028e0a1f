"""
Candle sources: Binance klines (with retry and paging) and CSV files.
Rows with missing fields are dropped here, before anything reaches the engine.
"""

from __future__ import annotations
import logging
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, List, Optional, Sequence

import pandas as pd
from binance.client import Client
from binance.exceptions import BinanceAPIException

from trend_bot.core.types import Candle
from trend_bot.data.frames import CANDLE_COLUMNS, normalize_frame

logger = logging.getLogger("trend_bot.data.feed")

# Binance caps a single klines request at 1000 rows
MAX_KLINES_PER_REQUEST = 1000


def retry_on_rate_limit(max_retries: int = 3, base_delay: float = 1.0):
    """Decorator: retry on 429 or 418 (rate limit)."""
    def decorator(f):
        def wrapped(*args, **kwargs):
            last_exc = None
            for attempt in range(max_retries):
                try:
                    return f(*args, **kwargs)
                except BinanceAPIException as e:
                    last_exc = e
                    if e.status_code in (429, 418) and attempt < max_retries - 1:
                        delay = base_delay * (2 ** attempt)
                        logger.warning("Rate limited, retry in %.1fs (attempt %d)", delay, attempt + 1)
                        time.sleep(delay)
                    else:
                        raise
            raise last_exc
        return wrapped
    return decorator


def parse_klines(raw: Sequence[Sequence[Any]]) -> List[Candle]:
    """Binance kline rows -> Candles. Rows with a missing or non-numeric OHLC field are skipped."""
    candles: List[Candle] = []
    dropped = 0
    for row in raw:
        try:
            if row is None or len(row) < 5 or any(v is None or v == "" for v in row[:5]):
                raise ValueError("missing field")
            candles.append(Candle(
                timestamp=int(row[0]),
                open=float(row[1]),
                high=float(row[2]),
                low=float(row[3]),
                close=float(row[4]),
            ))
        except (TypeError, ValueError):
            dropped += 1
    if dropped:
        logger.warning("Dropped %d malformed kline rows", dropped)
    return candles


class CandleFeed(ABC):
    """Source of candles, oldest first. The last candle may still be forming."""

    @abstractmethod
    def get_candles(self, symbol: str, interval: str, limit: int = 300) -> List[Candle]:
        pass


class BinanceCandleFeed(CandleFeed):
    """Spot klines from Binance. Public data, so keys are optional."""

    def __init__(self, api_key: str = "", api_secret: str = "", testnet: bool = False):
        self._client = Client(api_key or None, api_secret or None, testnet=testnet)
        if testnet:
            logger.info("Binance: using TESTNET")

    @retry_on_rate_limit(max_retries=3, base_delay=1.0)
    def _fetch_page(self, symbol: str, interval: str, limit: int, end_time: Optional[int]) -> list:
        kwargs: dict[str, Any] = {"symbol": symbol, "interval": interval, "limit": limit}
        if end_time is not None:
            kwargs["endTime"] = end_time
        return self._client.get_klines(**kwargs)

    def get_candles(self, symbol: str, interval: str, limit: int = 300) -> List[Candle]:
        """Most recent `limit` candles, paging backwards past the per-request cap."""
        pages: List[List[Candle]] = []
        total = 0
        end_time: Optional[int] = None
        while total < limit:
            size = min(MAX_KLINES_PER_REQUEST, limit - total)
            page = parse_klines(self._fetch_page(symbol, interval, size, end_time))
            if not page:
                break
            pages.append(page)
            total += len(page)
            if len(page) < size:
                break
            end_time = page[0].timestamp - 1
        candles = [c for page in reversed(pages) for c in page]
        logger.info("Fetched %d %s %s candles", len(candles), symbol, interval)
        return candles[-limit:]


def load_candles_csv(path: Path) -> pd.DataFrame:
    """
    Read a candle CSV with columns timestamp (epoch ms or a date string),
    open, high, low, close. `time` or `open_time` is accepted for timestamp.
    """
    df = pd.read_csv(path)
    if "timestamp" not in df.columns:
        for alias in ("open_time", "time"):
            if alias in df.columns:
                df = df.rename(columns={alias: "timestamp"})
                break
    if "timestamp" in df.columns and not pd.api.types.is_numeric_dtype(df["timestamp"]):
        parsed = pd.to_datetime(df["timestamp"], utc=True, errors="coerce")
        df["timestamp"] = (parsed - pd.Timestamp("1970-01-01", tz="UTC")) // pd.Timedelta(milliseconds=1)
    before = len(df)
    df = df.dropna(subset=[c for c in CANDLE_COLUMNS if c in df.columns])
    if len(df) < before:
        logger.warning("Dropped %d incomplete rows from %s", before - len(df), path)
    return normalize_frame(df)
