"""Utils: Telegram notifications, timeframes and trading-day calendar."""

from trend_bot.utils.telegram import LogNotifier, Notifier, TelegramNotifier, format_event, send_telegram
from trend_bot.utils.timeframes import timeframe_minutes, trading_day

__all__ = [
    "LogNotifier",
    "Notifier",
    "TelegramNotifier",
    "format_event",
    "send_telegram",
    "timeframe_minutes",
    "trading_day",
]
