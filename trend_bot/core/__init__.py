"""Core: config, types, errors, validation, logging."""

from trend_bot.core.config import load_config, Config
from trend_bot.core.errors import TrendBotError, DataIntegrityError, StateConflictError, ConfigError
from trend_bot.core.types import (
    BotState,
    Candle,
    DailyRiskState,
    Direction,
    Event,
    EventKind,
    ExitReason,
    Position,
    PositionStatus,
    Signal,
    TradeRecord,
)
from trend_bot.core.logger import setup_logging

__all__ = [
    "load_config",
    "Config",
    "TrendBotError",
    "DataIntegrityError",
    "StateConflictError",
    "ConfigError",
    "BotState",
    "Candle",
    "DailyRiskState",
    "Direction",
    "Event",
    "EventKind",
    "ExitReason",
    "Position",
    "PositionStatus",
    "Signal",
    "TradeRecord",
    "setup_logging",
]
