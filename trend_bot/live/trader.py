"""
Live loop: one pipeline step per poll on the latest candles.

Each cycle loads the saved state, decides on the closed candles, tests exits
against the forming candle, saves the new state and only then sends
notifications. On the candle a position was opened on, exits are tested
against the live price only: the range printed before the entry is not
tradable.
"""

from __future__ import annotations
import logging
import time
from dataclasses import replace
from typing import Optional

from trend_bot.core.errors import DataIntegrityError, StateConflictError
from trend_bot.core.types import Candle, EventKind, Position
from trend_bot.core.validation import validate_candles
from trend_bot.data.feed import CandleFeed
from trend_bot.data.frames import candles_to_frame
from trend_bot.persistence.repository import StateRepository
from trend_bot.pipeline import StepResult, TradingPipeline
from trend_bot.utils.telegram import Notifier

logger = logging.getLogger("trend_bot.live")


class LiveTrader:
    def __init__(
        self,
        pipeline: TradingPipeline,
        feed: CandleFeed,
        repository: StateRepository,
        notifier: Notifier,
        symbol: str,
        timeframe: str,
        initial_capital: float,
        history_limit: int = 500,
    ):
        self.pipeline = pipeline
        self.feed = feed
        self.repository = repository
        self.notifier = notifier
        self.symbol = symbol
        self.timeframe = timeframe
        self.initial_capital = initial_capital
        self.history_limit = max(history_limit, pipeline.warmup + 1)
        # forming candle an entry was last taken on; one entry per candle
        self._last_entry_time: Optional[int] = None

    def run_once(self) -> StepResult:
        state = self.repository.load_or_init(self.initial_capital)
        candles = self.feed.get_candles(self.symbol, self.timeframe, self.history_limit)
        validate_candles(candles)
        if len(candles) < 2:
            logger.warning("Only %d candles received, skipping cycle", len(candles))
            return StepResult(state=state, skipped="no data")

        closed, forming = candles[:-1], candles[-1]
        if not state.position.is_open and self._last_entry_time == forming.timestamp:
            return StepResult(state=state, skipped="already entered on this candle")

        history = self.pipeline.strategy.compute_indicators(candles_to_frame(closed))
        result = self.pipeline.step(
            state,
            history=history,
            candle=self._exit_candle(state.position, forming),
            index=len(candles) - 1,
            entry_price=forming.close,
        )
        if result.state != state:
            self.repository.save(result.state)
        for event in result.events:
            if event.kind is EventKind.OPENED:
                self._last_entry_time = forming.timestamp
            self.notifier.notify(event)
        if result.skipped:
            logger.debug("No entry: %s", result.skipped)
        return result

    @staticmethod
    def _exit_candle(position: Position, forming: Candle) -> Candle:
        """The forming candle, collapsed to its close while it is the entry candle."""
        if position.is_open and position.entry_time == forming.timestamp:
            price = forming.close
            return replace(forming, open=price, high=price, low=price)
        return forming

    def run_forever(self, poll_seconds: int = 60, max_cycles: Optional[int] = None) -> None:
        """Poll until interrupted. Corrupt data skips a cycle; state conflicts stop the loop."""
        cycles = 0
        while max_cycles is None or cycles < max_cycles:
            cycles += 1
            try:
                self.run_once()
            except KeyboardInterrupt:
                logger.info("Shutdown by user")
                break
            except DataIntegrityError as e:
                logger.error("Rejected candle data, cycle skipped: %s", e)
            except StateConflictError:
                logger.exception("State conflict, stopping live loop")
                raise
            except Exception as e:
                logger.exception("Live loop error: %s", e)
            if max_cycles is None or cycles < max_cycles:
                time.sleep(poll_seconds)
