"""
Position lifecycle: NONE -> OPEN -> NONE.

Exits are tested against one candle at a time. Stop-loss is checked first and
wins when a single candle touches both stop and target. Break-even migration
runs after the exit check, not before it: a candle that reaches the trigger
and then trades back through the entry leaves the trade open with the stop
moved to entry, rather than closing it flat on the same candle.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field, replace
from typing import List, Optional

from trend_bot.core.errors import StateConflictError
from trend_bot.core.types import (
    Candle,
    Direction,
    Event,
    EventKind,
    ExitReason,
    Position,
    PositionStatus,
    Signal,
    TradeRecord,
)

logger = logging.getLogger("trend_bot.position")


@dataclass
class PositionUpdate:
    """Outcome of testing an open position against one candle."""
    position: Position
    trade: Optional[TradeRecord] = None
    events: List[Event] = field(default_factory=list)


def realized_pnl(direction: Direction, entry_price: float, exit_price: float, quantity: float) -> float:
    return (exit_price - entry_price) * quantity * direction.sign


class PositionStateMachine:
    """Owns every transition of the single position slot."""

    def __init__(self, break_even_trigger_fraction: float = 0.5):
        self.break_even_trigger_fraction = break_even_trigger_fraction

    def open(
        self,
        position: Position,
        signal: Signal,
        quantity: float,
        index: int,
        timestamp: Optional[int] = None,
        balance: float = 0.0,
    ) -> tuple[Position, Event]:
        """Open from a LONG/SHORT signal. Opening on top of an open position is a caller bug."""
        if position.is_open:
            raise StateConflictError(
                f"cannot open {signal.direction.value} at {index}: "
                f"{position.direction.value} position from {position.entry_index} still open"
            )
        if not signal.is_entry:
            raise ValueError("cannot open a position from a NONE signal")
        if quantity <= 0:
            raise ValueError(f"quantity must be > 0, got {quantity}")
        opened = Position(
            status=PositionStatus.OPEN,
            direction=signal.direction,
            entry_price=signal.entry_price,
            stop_loss=signal.stop_loss,
            take_profit=signal.take_profit,
            quantity=quantity,
            break_even_activated=False,
            entry_index=index,
            entry_time=timestamp,
        )
        logger.info(
            "Opened %s qty=%.6f entry=%.4f SL=%.4f TP=%.4f",
            opened.direction.value, quantity, opened.entry_price, opened.stop_loss, opened.take_profit,
        )
        event = Event(
            kind=EventKind.OPENED,
            direction=opened.direction,
            entry_price=opened.entry_price,
            stop_loss=opened.stop_loss,
            take_profit=opened.take_profit,
            price=opened.entry_price,
            balance=balance,
            quantity=quantity,
            index=index,
            timestamp=timestamp,
        )
        return opened, event

    def update(self, position: Position, candle: Candle, index: int, balance: float = 0.0) -> PositionUpdate:
        """
        Test an open position against `candle`: close at stop or target, or
        arm break-even. `balance` is the balance before this candle; close
        events report the balance after realizing the trade.
        """
        if not position.is_open:
            return PositionUpdate(position=position)

        exit_price, reason = self._exit_level(position, candle)
        if exit_price is not None:
            pnl = realized_pnl(position.direction, position.entry_price, exit_price, position.quantity)
            trade = TradeRecord(
                entry_index=position.entry_index,
                exit_index=index,
                direction=position.direction,
                entry_price=position.entry_price,
                exit_price=exit_price,
                quantity=position.quantity,
                pnl=pnl,
                exit_reason=reason,
                entry_time=position.entry_time,
                exit_time=candle.timestamp,
            )
            logger.info(
                "Closed %s at %.4f (%s) pnl=%.2f",
                position.direction.value, exit_price, reason.value, pnl,
            )
            event = Event(
                kind=EventKind.CLOSED,
                direction=position.direction,
                entry_price=position.entry_price,
                stop_loss=position.stop_loss,
                take_profit=position.take_profit,
                price=exit_price,
                balance=balance + pnl,
                quantity=position.quantity,
                index=index,
                timestamp=candle.timestamp,
                pnl=pnl,
                exit_reason=reason,
            )
            return PositionUpdate(position=Position(), trade=trade, events=[event])

        if not position.break_even_activated and self._break_even_reached(position, candle):
            moved = self._move_stop_to_entry(position)
            logger.info("Break-even armed for %s: stop %.4f -> %.4f",
                        position.direction.value, position.stop_loss, moved.stop_loss)
            event = Event(
                kind=EventKind.BREAK_EVEN,
                direction=moved.direction,
                entry_price=moved.entry_price,
                stop_loss=moved.stop_loss,
                take_profit=moved.take_profit,
                price=self._favorable_extreme(position, candle),
                balance=balance,
                quantity=moved.quantity,
                index=index,
                timestamp=candle.timestamp,
            )
            return PositionUpdate(position=moved, events=[event])

        return PositionUpdate(position=position)

    @staticmethod
    def _exit_level(position: Position, candle: Candle) -> tuple[Optional[float], Optional[ExitReason]]:
        if position.direction is Direction.LONG:
            if candle.low <= position.stop_loss:
                return position.stop_loss, ExitReason.STOP_LOSS
            if candle.high >= position.take_profit:
                return position.take_profit, ExitReason.TAKE_PROFIT
        else:
            if candle.high >= position.stop_loss:
                return position.stop_loss, ExitReason.STOP_LOSS
            if candle.low <= position.take_profit:
                return position.take_profit, ExitReason.TAKE_PROFIT
        return None, None

    @staticmethod
    def _favorable_extreme(position: Position, candle: Candle) -> float:
        return candle.high if position.direction is Direction.LONG else candle.low

    def _break_even_reached(self, position: Position, candle: Candle) -> bool:
        target_distance = abs(position.take_profit - position.entry_price)
        if target_distance == 0:
            return False
        excursion = (self._favorable_extreme(position, candle) - position.entry_price) * position.direction.sign
        return excursion >= self.break_even_trigger_fraction * target_distance

    @staticmethod
    def _move_stop_to_entry(position: Position) -> Position:
        # tighten only: a LONG stop never goes down, a SHORT stop never goes up
        if position.direction is Direction.LONG:
            stop = max(position.stop_loss, position.entry_price)
        else:
            stop = min(position.stop_loss, position.entry_price)
        return replace(position, stop_loss=stop, break_even_activated=True)
