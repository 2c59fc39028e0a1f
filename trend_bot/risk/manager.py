"""
Risk manager: turns a signal into an allowed quantity.
Position size = risk budget / stop distance (lose risk_per_trade_pct of balance if stop hit).
"""

from __future__ import annotations
import logging
from dataclasses import dataclass

from trend_bot.core.types import Direction, Signal
from trend_bot.risk.sizing import size_position

logger = logging.getLogger("trend_bot.risk")


@dataclass
class RiskResult:
    """Result of risk check: allowed or rejected + reason."""
    allowed: bool
    quantity: float = 0.0
    reason: str = ""


class RiskManager:
    """Sizes entries from a fixed percentage of the current balance."""

    def __init__(self, risk_per_trade_pct: float = 1.0):
        self.risk_per_trade_pct = risk_per_trade_pct

    def risk_amount(self, balance: float) -> float:
        return balance * (self.risk_per_trade_pct / 100.0)

    def validate_signal(self, signal: Signal, balance: float) -> RiskResult:
        """Quantity for an entry signal; a zero stop distance is a skipped signal, not a fault."""
        if signal.direction is Direction.NONE:
            return RiskResult(allowed=False, reason="no signal")
        if self.risk_amount(balance) <= 0:
            logger.debug("Skipped %s signal at %d: no risk budget", signal.direction.value, signal.computed_at)
            return RiskResult(allowed=False, reason="no risk budget")
        qty = size_position(balance, self.risk_per_trade_pct, signal.entry_price, signal.stop_loss)
        if qty <= 0:
            reason = "zero stop distance" if signal.entry_price == signal.stop_loss else "no risk budget"
            logger.debug("Skipped %s signal at %d: %s", signal.direction.value, signal.computed_at, reason)
            return RiskResult(allowed=False, reason=reason)
        return RiskResult(allowed=True, quantity=qty)
