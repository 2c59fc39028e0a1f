"""Timeframe strings and trading-day calendar helpers."""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo


def timeframe_minutes(tf: str) -> int:
    """Convert Binance-style timeframe (e.g. '5m', '1h', '1d') to minutes."""
    tf = tf.strip().lower()
    if tf.endswith("m"):
        minutes = int(tf[:-1])
    elif tf.endswith("h"):
        minutes = int(tf[:-1]) * 60
    elif tf.endswith("d"):
        minutes = int(tf[:-1]) * 60 * 24
    else:
        raise ValueError(f"Unsupported timeframe: {tf}")
    if minutes <= 0:
        raise ValueError(f"Unsupported timeframe: {tf}")
    return minutes


def trading_day(timestamp_ms: int, tz: str = "UTC") -> date:
    """Calendar date of an epoch-ms timestamp in the given IANA timezone."""
    utc = datetime.fromtimestamp(timestamp_ms / 1000.0, tz=timezone.utc)
    return utc.astimezone(ZoneInfo(tz)).date()
