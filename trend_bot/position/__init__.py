"""Position state machine: open, break-even, stop/target exits."""

from trend_bot.position.machine import PositionStateMachine, PositionUpdate, realized_pnl

__all__ = ["PositionStateMachine", "PositionUpdate", "realized_pnl"]
