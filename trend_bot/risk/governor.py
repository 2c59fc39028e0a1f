"""
Daily loss governor (kill switch).

Tracks the balance at the start of each trading day and refuses new entries
for the rest of the day once the realized loss reaches the configured share of
that starting balance. Open positions are left to their stop and target.
"""

from __future__ import annotations
import logging
from dataclasses import replace
from datetime import date

from trend_bot.core.types import DailyRiskState
from trend_bot.utils.timeframes import trading_day

logger = logging.getLogger("trend_bot.risk.governor")


class DailyRiskGovernor:
    """Stateless rules over a DailyRiskState; every method returns a new state."""

    def __init__(self, daily_loss_limit_pct: float = 4.0, timezone: str = "UTC"):
        self.daily_loss_limit_pct = daily_loss_limit_pct
        self.timezone = timezone

    def day_of(self, timestamp_ms: int) -> date:
        return trading_day(timestamp_ms, self.timezone)

    def roll(self, risk: DailyRiskState, timestamp_ms: int, balance: float) -> DailyRiskState:
        """Start a new trading day if `timestamp_ms` falls on a later day than the stored one."""
        day = self.day_of(timestamp_ms)
        if risk.trading_day == day:
            return replace(risk, current_balance=balance)
        if risk.trading_day is not None:
            logger.debug("New trading day %s, starting balance %.2f", day, balance)
        return DailyRiskState(
            trading_day=day,
            starting_balance=balance,
            current_balance=balance,
            halted_today=False,
        )

    def loss_limit(self, risk: DailyRiskState) -> float:
        return risk.starting_balance * (self.daily_loss_limit_pct / 100.0)

    def loss_today(self, risk: DailyRiskState) -> float:
        return risk.starting_balance - risk.current_balance

    def check(self, risk: DailyRiskState, balance: float) -> DailyRiskState:
        """Update the balance and latch the halt flag once today's loss reaches the limit."""
        risk = replace(risk, current_balance=balance)
        if risk.halted_today:
            return risk
        loss = self.loss_today(risk)
        limit = self.loss_limit(risk)
        if loss >= limit:
            logger.warning(
                "Daily loss limit reached on %s: %.2f >= %.2f, no new entries today",
                risk.trading_day, loss, limit,
            )
            return replace(risk, halted_today=True)
        return risk

    def can_open(self, risk: DailyRiskState) -> bool:
        return not risk.halted_today
