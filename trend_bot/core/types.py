"""
Core data types for candles, signals, positions, risk state, trades, and events.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Any, Optional


class Direction(str, Enum):
    LONG = "LONG"
    SHORT = "SHORT"
    NONE = "NONE"

    @property
    def sign(self) -> int:
        if self is Direction.LONG:
            return 1
        if self is Direction.SHORT:
            return -1
        return 0


class PositionStatus(str, Enum):
    NONE = "NONE"
    OPEN = "OPEN"


class ExitReason(str, Enum):
    STOP_LOSS = "STOP_LOSS"
    TAKE_PROFIT = "TAKE_PROFIT"


class EventKind(str, Enum):
    OPENED = "OPENED"
    BREAK_EVEN = "BREAK_EVEN"
    CLOSED = "CLOSED"


@dataclass(frozen=True)
class Candle:
    """OHLC candle. timestamp is the open time in epoch milliseconds."""
    timestamp: int
    open: float
    high: float
    low: float
    close: float


@dataclass
class Signal:
    """Entry decision with stop and target. NONE signals carry no levels."""
    direction: Direction
    entry_price: float = 0.0
    stop_loss: float = 0.0
    take_profit: float = 0.0
    computed_at: int = -1
    reason: str = ""
    metadata: dict = field(default_factory=dict)

    @classmethod
    def none(cls, computed_at: int = -1, reason: str = "") -> "Signal":
        return cls(direction=Direction.NONE, computed_at=computed_at, reason=reason)

    @property
    def is_entry(self) -> bool:
        return self.direction is not Direction.NONE


@dataclass(frozen=True)
class Position:
    """Single position slot. status NONE means flat."""
    status: PositionStatus = PositionStatus.NONE
    direction: Direction = Direction.NONE
    entry_price: float = 0.0
    stop_loss: float = 0.0
    take_profit: float = 0.0
    quantity: float = 0.0
    break_even_activated: bool = False
    entry_index: int = -1
    entry_time: Optional[int] = None

    @property
    def is_open(self) -> bool:
        return self.status is PositionStatus.OPEN

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "direction": self.direction.value,
            "entry_price": self.entry_price,
            "stop_loss": self.stop_loss,
            "take_profit": self.take_profit,
            "quantity": self.quantity,
            "break_even_activated": self.break_even_activated,
            "entry_index": self.entry_index,
            "entry_time": self.entry_time,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Position":
        return cls(
            status=PositionStatus(data.get("status", "NONE")),
            direction=Direction(data.get("direction", "NONE")),
            entry_price=float(data.get("entry_price", 0.0)),
            stop_loss=float(data.get("stop_loss", 0.0)),
            take_profit=float(data.get("take_profit", 0.0)),
            quantity=float(data.get("quantity", 0.0)),
            break_even_activated=bool(data.get("break_even_activated", False)),
            entry_index=int(data.get("entry_index", -1)),
            entry_time=data.get("entry_time"),
        )


@dataclass(frozen=True)
class DailyRiskState:
    """Per-day loss tracking. trading_day is None until the first candle is seen."""
    trading_day: Optional[date] = None
    starting_balance: float = 0.0
    current_balance: float = 0.0
    halted_today: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "trading_day": self.trading_day.isoformat() if self.trading_day else None,
            "starting_balance": self.starting_balance,
            "current_balance": self.current_balance,
            "halted_today": self.halted_today,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DailyRiskState":
        day = data.get("trading_day")
        return cls(
            trading_day=date.fromisoformat(day) if day else None,
            starting_balance=float(data.get("starting_balance", 0.0)),
            current_balance=float(data.get("current_balance", data.get("starting_balance", 0.0))),
            halted_today=bool(data.get("halted_today", False)),
        )


@dataclass(frozen=True)
class TradeRecord:
    """Closed trade. Immutable once created."""
    entry_index: int
    exit_index: int
    direction: Direction
    entry_price: float
    exit_price: float
    quantity: float
    pnl: float
    exit_reason: ExitReason
    entry_time: Optional[int] = None
    exit_time: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "entry_index": self.entry_index,
            "exit_index": self.exit_index,
            "direction": self.direction.value,
            "entry_price": self.entry_price,
            "exit_price": self.exit_price,
            "quantity": self.quantity,
            "pnl": self.pnl,
            "exit_reason": self.exit_reason.value,
            "entry_time": self.entry_time,
            "exit_time": self.exit_time,
        }


@dataclass(frozen=True)
class Event:
    """Notification event emitted on open, break-even activation, and close."""
    kind: EventKind
    direction: Direction
    entry_price: float
    stop_loss: float
    take_profit: float
    price: float
    balance: float
    quantity: float = 0.0
    index: int = -1
    timestamp: Optional[int] = None
    pnl: Optional[float] = None
    exit_reason: Optional[ExitReason] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "direction": self.direction.value,
            "entry_price": self.entry_price,
            "stop_loss": self.stop_loss,
            "take_profit": self.take_profit,
            "price": self.price,
            "balance": self.balance,
            "quantity": self.quantity,
            "index": self.index,
            "timestamp": self.timestamp,
            "pnl": self.pnl,
            "exit_reason": self.exit_reason.value if self.exit_reason else None,
        }


@dataclass(frozen=True)
class BotState:
    """Everything one evaluation step reads and writes; also the persisted record."""
    position: Position = field(default_factory=Position)
    risk: DailyRiskState = field(default_factory=DailyRiskState)
    balance: float = 0.0

    @classmethod
    def initial(cls, balance: float) -> "BotState":
        return cls(
            position=Position(),
            risk=DailyRiskState(starting_balance=balance, current_balance=balance),
            balance=balance,
        )

    def evolve(self, **changes: Any) -> "BotState":
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "position": self.position.to_dict(),
            "risk": self.risk.to_dict(),
            "balance": self.balance,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BotState":
        return cls(
            position=Position.from_dict(data.get("position", {})),
            risk=DailyRiskState.from_dict(data.get("risk", {})),
            balance=float(data.get("balance", 0.0)),
        )
