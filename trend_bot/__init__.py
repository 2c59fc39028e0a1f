"""Rule-based trend strategy engine: indicators, signals, sizing, position lifecycle, daily governor, backtests."""

__version__ = "0.1.0"
