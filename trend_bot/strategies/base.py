"""Abstract strategy: indicators + signal generation."""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Optional

import pandas as pd

from trend_bot.core.types import Signal


class BaseStrategy(ABC):
    """Strategy computes indicators and returns a Signal from closed candles only."""

    @property
    @abstractmethod
    def warmup(self) -> int:
        """Number of closed candles needed before a signal can be anything but NONE."""

    @abstractmethod
    def compute_indicators(self, df: pd.DataFrame) -> pd.DataFrame:
        """Add indicator columns to a candle DataFrame. No lookahead."""

    @abstractmethod
    def get_signal(
        self,
        history: pd.DataFrame,
        entry_price: float,
        index: Optional[int] = None,
        now_ms: Optional[int] = None,
    ) -> Signal:
        """
        Decide on the closed history (last row = last closed candle).
        entry_price is the price the position would be opened at.
        """
