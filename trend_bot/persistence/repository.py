"""
State repositories: load() -> BotState, save(BotState).
The engine only sees the interface; storage details stay here.
"""

from __future__ import annotations
import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from trend_bot.core.types import BotState

logger = logging.getLogger("trend_bot.persistence")


class StateRepository(ABC):
    """Durable home of the BotState between evaluation steps."""

    @abstractmethod
    def load(self) -> Optional[BotState]:
        """Last saved state, or None if nothing was saved yet."""

    @abstractmethod
    def save(self, state: BotState) -> None:
        """Persist `state`; must be complete before the step's effects are considered final."""

    def load_or_init(self, initial_balance: float) -> BotState:
        state = self.load()
        if state is None:
            logger.info("No saved state, starting flat with balance %.2f", initial_balance)
            return BotState.initial(initial_balance)
        return state


class InMemoryStateRepository(StateRepository):
    def __init__(self, state: Optional[BotState] = None):
        self._state = state
        self.saves = 0

    def load(self) -> Optional[BotState]:
        return self._state

    def save(self, state: BotState) -> None:
        self._state = state
        self.saves += 1


class JsonStateRepository(StateRepository):
    """State as a JSON document; written to a temp file and renamed over the old one."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> Optional[BotState]:
        if not self.path.exists():
            return None
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return BotState.from_dict(data)

    def save(self, state: BotState) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(state.to_dict(), f, indent=2, sort_keys=True)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, self.path)
        logger.debug("State saved to %s", self.path)
