"""Telegram notifications. Never log token or chat_id."""

from __future__ import annotations
import logging
from abc import ABC, abstractmethod

import requests

from trend_bot.core.types import Event, EventKind

logger = logging.getLogger("trend_bot.utils.telegram")


def send_telegram(text: str, bot_token: str = "", chat_id: str = "") -> bool:
    """Send message to Telegram. Returns True on success. Uses empty strings if not configured."""
    if not bot_token or not chat_id:
        logger.debug("Telegram not configured, skipping message (len=%d)", len(text))
        return False
    try:
        url = f"https://api.telegram.org/bot{bot_token}/sendMessage"
        payload = {"chat_id": chat_id, "text": text}
        r = requests.post(url, json=payload, timeout=10)
        if r.status_code != 200:
            logger.warning("Telegram send failed: %s %s", r.status_code, r.text[:200])
            return False
        return True
    except requests.RequestException as e:
        logger.exception("Telegram error: %s", e)
        return False


def format_event(event: Event, symbol: str = "") -> str:
    prefix = f"{symbol} " if symbol else ""
    if event.kind is EventKind.OPENED:
        return (
            f"{prefix}OPEN {event.direction.value} @ {event.entry_price:.2f}\n"
            f"SL {event.stop_loss:.2f} | TP {event.take_profit:.2f} | qty {event.quantity:.6f}\n"
            f"Balance {event.balance:.2f}"
        )
    if event.kind is EventKind.BREAK_EVEN:
        return (
            f"{prefix}BREAK-EVEN {event.direction.value}: stop moved to {event.stop_loss:.2f} "
            f"(price {event.price:.2f})\nBalance {event.balance:.2f}"
        )
    reason = event.exit_reason.value if event.exit_reason else ""
    return (
        f"{prefix}CLOSE {event.direction.value} @ {event.price:.2f} ({reason})\n"
        f"PnL {event.pnl or 0.0:+.2f} | Balance {event.balance:.2f}"
    )


class Notifier(ABC):
    @abstractmethod
    def notify(self, event: Event) -> None:
        pass


class LogNotifier(Notifier):
    def __init__(self, symbol: str = ""):
        self.symbol = symbol

    def notify(self, event: Event) -> None:
        logger.info(format_event(event, self.symbol).replace("\n", " | "))


class TelegramNotifier(Notifier):
    """Delivery failures are logged and dropped; they never fail the evaluation step."""

    def __init__(self, bot_token: str, chat_id: str, symbol: str = ""):
        self.bot_token = bot_token
        self.chat_id = chat_id
        self.symbol = symbol

    def notify(self, event: Event) -> None:
        send_telegram(format_event(event, self.symbol), self.bot_token, self.chat_id)
