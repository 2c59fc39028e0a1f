"""Exception types raised by the evaluation engine and its adapters."""


class TrendBotError(Exception):
    """Base class for trend_bot errors."""


class DataIntegrityError(TrendBotError, ValueError):
    """Candle data is corrupt (non-monotonic time, NaN or negative price, low > high)."""


class StateConflictError(TrendBotError, RuntimeError):
    """A transition would break the single-position invariant."""


class ConfigError(TrendBotError, ValueError):
    """Configuration value out of range."""
