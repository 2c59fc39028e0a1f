"""
One evaluation step: governor -> open-position management or signal -> sizing -> open.

The step reads a BotState and returns a new one; nothing is mutated in place,
so a step that fails half way (or whose result is never persisted) can simply
be run again.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field, replace
from typing import Any, List, Optional

import pandas as pd

from trend_bot.core.types import BotState, Candle, Event, Signal, TradeRecord
from trend_bot.position.machine import PositionStateMachine
from trend_bot.risk.governor import DailyRiskGovernor
from trend_bot.risk.manager import RiskManager
from trend_bot.strategies.base import BaseStrategy
from trend_bot.strategies.trend_macd import TrendMacdStrategy

logger = logging.getLogger("trend_bot.pipeline")


@dataclass
class StepResult:
    state: BotState
    signal: Optional[Signal] = None
    trade: Optional[TradeRecord] = None
    events: List[Event] = field(default_factory=list)
    skipped: str = ""

    @property
    def changed(self) -> bool:
        """True when the step opened, closed, or moved a stop."""
        return bool(self.events)


class TradingPipeline:
    """Strategy, sizing, governor and position machine wired into a single step."""

    def __init__(
        self,
        strategy: BaseStrategy,
        risk_manager: RiskManager,
        governor: DailyRiskGovernor,
        position_machine: PositionStateMachine,
    ):
        self.strategy = strategy
        self.risk_manager = risk_manager
        self.governor = governor
        self.position_machine = position_machine

    @classmethod
    def from_config(cls, config: Any, strategy: Optional[BaseStrategy] = None) -> "TradingPipeline":
        return cls(
            strategy=strategy or TrendMacdStrategy.from_config(config),
            risk_manager=RiskManager(config.risk_per_trade_pct),
            governor=DailyRiskGovernor(config.daily_loss_limit_pct, config.timezone),
            position_machine=PositionStateMachine(config.break_even_trigger_fraction),
        )

    @property
    def warmup(self) -> int:
        return self.strategy.warmup

    def step(
        self,
        state: BotState,
        history: pd.DataFrame,
        candle: Candle,
        index: int,
        entry_price: float,
    ) -> StepResult:
        """
        history: closed candles with indicator columns, ending just before `candle`.
        candle: the candle exits are tested against and entries are dated to.
        entry_price: price a new position would be opened at.
        """
        risk = self.governor.roll(state.risk, candle.timestamp, state.balance)

        if state.position.is_open:
            update = self.position_machine.update(state.position, candle, index, state.balance)
            balance = state.balance
            if update.trade is not None:
                balance += update.trade.pnl
            return StepResult(
                state=state.evolve(position=update.position, risk=replace(risk, current_balance=balance),
                                   balance=balance),
                trade=update.trade,
                events=update.events,
            )

        risk = self.governor.check(risk, state.balance)
        if not self.governor.can_open(risk):
            return StepResult(state=state.evolve(risk=risk), skipped="daily loss limit")

        signal = self.strategy.get_signal(history, entry_price, now_ms=candle.timestamp)
        if not signal.is_entry:
            return StepResult(state=state.evolve(risk=risk), signal=signal, skipped=signal.reason)

        sized = self.risk_manager.validate_signal(signal, state.balance)
        if not sized.allowed:
            return StepResult(state=state.evolve(risk=risk), signal=signal, skipped=sized.reason)

        position, event = self.position_machine.open(
            state.position, signal, sized.quantity, index, candle.timestamp, state.balance,
        )
        return StepResult(
            state=state.evolve(position=position, risk=risk),
            signal=signal,
            events=[event],
        )
