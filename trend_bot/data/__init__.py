"""Market data: candle feeds and frame conversions."""

from trend_bot.data.feed import BinanceCandleFeed, CandleFeed, load_candles_csv, parse_klines
from trend_bot.data.frames import candles_to_frame, frame_to_candles, normalize_frame

__all__ = [
    "BinanceCandleFeed",
    "CandleFeed",
    "candles_to_frame",
    "frame_to_candles",
    "load_candles_csv",
    "normalize_frame",
    "parse_klines",
]
