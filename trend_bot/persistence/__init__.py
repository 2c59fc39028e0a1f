"""Persistence: state repositories."""

from trend_bot.persistence.repository import InMemoryStateRepository, JsonStateRepository, StateRepository

__all__ = ["InMemoryStateRepository", "JsonStateRepository", "StateRepository"]
