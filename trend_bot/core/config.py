"""
Load configuration from config.yaml and .env. API keys only from env.
"""

from __future__ import annotations
import os
from pathlib import Path
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from dotenv import load_dotenv

from trend_bot.core.errors import ConfigError
from trend_bot.utils.timeframes import timeframe_minutes


def _env_path(project_root: Optional[Path] = None) -> Path:
    root = project_root or Path(__file__).resolve().parents[2]
    return root / ".env"


def load_dotenv_if_exists(project_root: Optional[Path] = None) -> None:
    """Load .env from project root if present."""
    path = _env_path(project_root)
    if path.exists():
        load_dotenv(path)


def _parse_hours(raw: Any) -> tuple[int, ...]:
    if raw is None or raw == "":
        return ()
    if isinstance(raw, str):
        raw = [p for p in raw.split(",") if p.strip()]
    return tuple(sorted({int(h) for h in raw}))


def load_config(config_path: Optional[Path] = None, project_root: Optional[Path] = None) -> "Config":
    """Load config.yaml and overlay with env. Returns a validated Config."""
    load_dotenv_if_exists(project_root)
    root = project_root or Path(__file__).resolve().parents[2]
    path = config_path or root / "config.yaml"
    data: dict[str, Any] = {}
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

    # Env overrides (for secrets and overrides)
    def env(key: str, default: str = "") -> str:
        return os.getenv(key, default).strip()

    def env_bool(key: str, default: bool = False) -> bool:
        return os.getenv(key, str(default)).lower() in ("true", "1", "yes")

    def env_int(key: str, default: int = 0) -> int:
        try:
            return int(os.getenv(key, str(default)))
        except ValueError:
            return default

    def env_float(key: str, default: float = 0.0) -> float:
        try:
            return float(os.getenv(key, str(default)))
        except ValueError:
            return default

    market = data.get("market", {})
    strategy = data.get("strategy", {})
    risk = data.get("risk", {})
    live = data.get("live", {})
    logging_cfg = data.get("logging", {})

    config = Config(
        # Market data (keys from env only)
        binance_api_key=env("BINANCE_API_KEY"),
        binance_api_secret=env("BINANCE_API_SECRET"),
        use_testnet=env_bool("USE_TESTNET", market.get("use_testnet", False)),
        symbol=env("SYMBOL", market.get("symbol", "BTCUSDT")).upper(),
        timeframe=env("TIMEFRAME", market.get("timeframe", "1h")),
        history_limit=env_int("HISTORY_LIMIT", market.get("history_limit", 1000)),
        timezone=env("TRADING_TIMEZONE", market.get("timezone", "UTC")),
        # Strategy
        trend_period=env_int("TREND_PERIOD", strategy.get("trend_period", 200)),
        fast_ema_period=env_int("FAST_EMA_PERIOD", strategy.get("fast_ema_period", 0)),
        rsi_period=env_int("RSI_PERIOD", strategy.get("rsi_period", 14)),
        rsi_overbought=env_float("RSI_OVERBOUGHT", strategy.get("rsi_overbought", 70.0)),
        rsi_oversold=env_float("RSI_OVERSOLD", strategy.get("rsi_oversold", 30.0)),
        macd_fast=env_int("MACD_FAST", strategy.get("macd_fast", 12)),
        macd_slow=env_int("MACD_SLOW", strategy.get("macd_slow", 26)),
        macd_signal=env_int("MACD_SIGNAL", strategy.get("macd_signal", 9)),
        adx_period=env_int("ADX_PERIOD", strategy.get("adx_period", 14)),
        adx_threshold=env_float("ADX_THRESHOLD", strategy.get("adx_threshold", 25.0)),
        stop_lookback=env_int("STOP_LOOKBACK", strategy.get("stop_lookback", 10)),
        reward_multiple=env_float("REWARD_MULTIPLE", strategy.get("reward_multiple", 2.0)),
        blackout_hours=_parse_hours(os.getenv("BLACKOUT_HOURS", strategy.get("blackout_hours"))),
        # Risk
        initial_capital=env_float("INITIAL_CAPITAL", risk.get("initial_capital", 10000.0)),
        risk_per_trade_pct=env_float("RISK_PER_TRADE_PCT", risk.get("risk_per_trade_pct", 1.0)),
        daily_loss_limit_pct=env_float("DAILY_LOSS_LIMIT_PCT", risk.get("daily_loss_limit_pct", 4.0)),
        break_even_trigger_fraction=env_float(
            "BREAK_EVEN_TRIGGER_FRACTION", risk.get("break_even_trigger_fraction", 0.5)
        ),
        # Live loop
        poll_seconds=env_int("POLL_SECONDS", live.get("poll_seconds", 60)),
        state_path=Path(env("STATE_PATH", live.get("state_path", "state/bot_state.json"))),
        # Telegram
        telegram_bot_token=env("TELEGRAM_BOT_TOKEN"),
        telegram_chat_id=env("TELEGRAM_CHAT_ID"),
        # Logging
        log_level=env("LOG_LEVEL", logging_cfg.get("level", "INFO")),
        log_dir=Path(logging_cfg.get("log_dir", "logs")),
        log_file=logging_cfg.get("log_file", "trend_bot.log"),
        json_logs=bool(logging_cfg.get("json", False)),
    )
    config.validate()
    return config


class Config:
    """Unified configuration. Immutable after load."""

    __slots__ = (
        "binance_api_key", "binance_api_secret", "use_testnet", "symbol", "timeframe",
        "history_limit", "timezone",
        "trend_period", "fast_ema_period", "rsi_period", "rsi_overbought", "rsi_oversold",
        "macd_fast", "macd_slow", "macd_signal", "adx_period", "adx_threshold",
        "stop_lookback", "reward_multiple", "blackout_hours",
        "initial_capital", "risk_per_trade_pct", "daily_loss_limit_pct", "break_even_trigger_fraction",
        "poll_seconds", "state_path",
        "telegram_bot_token", "telegram_chat_id",
        "log_level", "log_dir", "log_file", "json_logs",
    )

    def __init__(
        self,
        binance_api_key: str = "",
        binance_api_secret: str = "",
        use_testnet: bool = False,
        symbol: str = "BTCUSDT",
        timeframe: str = "1h",
        history_limit: int = 1000,
        timezone: str = "UTC",
        trend_period: int = 200,
        fast_ema_period: int = 0,
        rsi_period: int = 14,
        rsi_overbought: float = 70.0,
        rsi_oversold: float = 30.0,
        macd_fast: int = 12,
        macd_slow: int = 26,
        macd_signal: int = 9,
        adx_period: int = 14,
        adx_threshold: float = 25.0,
        stop_lookback: int = 10,
        reward_multiple: float = 2.0,
        blackout_hours: tuple[int, ...] = (),
        initial_capital: float = 10000.0,
        risk_per_trade_pct: float = 1.0,
        daily_loss_limit_pct: float = 4.0,
        break_even_trigger_fraction: float = 0.5,
        poll_seconds: int = 60,
        state_path: Optional[Path] = None,
        telegram_bot_token: str = "",
        telegram_chat_id: str = "",
        log_level: str = "INFO",
        log_dir: Optional[Path] = None,
        log_file: str = "trend_bot.log",
        json_logs: bool = False,
    ):
        self.binance_api_key = binance_api_key
        self.binance_api_secret = binance_api_secret
        self.use_testnet = use_testnet
        self.symbol = symbol
        self.timeframe = timeframe
        self.history_limit = history_limit
        self.timezone = timezone
        self.trend_period = trend_period
        self.fast_ema_period = fast_ema_period
        self.rsi_period = rsi_period
        self.rsi_overbought = rsi_overbought
        self.rsi_oversold = rsi_oversold
        self.macd_fast = macd_fast
        self.macd_slow = macd_slow
        self.macd_signal = macd_signal
        self.adx_period = adx_period
        self.adx_threshold = adx_threshold
        self.stop_lookback = stop_lookback
        self.reward_multiple = reward_multiple
        self.blackout_hours = tuple(blackout_hours)
        self.initial_capital = initial_capital
        self.risk_per_trade_pct = risk_per_trade_pct
        self.daily_loss_limit_pct = daily_loss_limit_pct
        self.break_even_trigger_fraction = break_even_trigger_fraction
        self.poll_seconds = poll_seconds
        self.state_path = Path(state_path) if state_path else Path("state/bot_state.json")
        self.telegram_bot_token = telegram_bot_token
        self.telegram_chat_id = telegram_chat_id
        self.log_level = log_level
        self.log_dir = Path(log_dir) if log_dir else Path("logs")
        self.log_file = log_file
        self.json_logs = json_logs

    def validate(self) -> None:
        """Raise ConfigError on values the engine cannot work with."""
        for name in ("trend_period", "rsi_period", "macd_fast", "macd_slow", "macd_signal",
                     "adx_period", "stop_lookback"):
            if getattr(self, name) < 1:
                raise ConfigError(f"{name} must be >= 1, got {getattr(self, name)}")
        if self.fast_ema_period < 0:
            raise ConfigError("fast_ema_period must be >= 0 (0 disables the filter)")
        if self.macd_fast >= self.macd_slow:
            raise ConfigError(f"macd_fast ({self.macd_fast}) must be < macd_slow ({self.macd_slow})")
        if self.initial_capital <= 0:
            raise ConfigError("initial_capital must be > 0")
        if not 0 < self.risk_per_trade_pct <= 100:
            raise ConfigError("risk_per_trade_pct must be in (0, 100]")
        if not 0 < self.daily_loss_limit_pct <= 100:
            raise ConfigError("daily_loss_limit_pct must be in (0, 100]")
        if not 0 < self.break_even_trigger_fraction <= 1:
            raise ConfigError("break_even_trigger_fraction must be in (0, 1]")
        if self.reward_multiple <= 0:
            raise ConfigError("reward_multiple must be > 0")
        if not self.rsi_oversold < self.rsi_overbought:
            raise ConfigError("rsi_oversold must be below rsi_overbought")
        if any(h < 0 or h > 23 for h in self.blackout_hours):
            raise ConfigError(f"blackout_hours must be within 0..23, got {self.blackout_hours}")
        try:
            timeframe_minutes(self.timeframe)
        except ValueError as e:
            raise ConfigError(str(e)) from e
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ConfigError(f"unknown timezone {self.timezone!r}") from e
