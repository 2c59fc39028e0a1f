"""Risk management: position sizing and the daily loss governor."""

from trend_bot.risk.governor import DailyRiskGovernor
from trend_bot.risk.manager import RiskManager, RiskResult
from trend_bot.risk.sizing import size_position

__all__ = ["DailyRiskGovernor", "RiskManager", "RiskResult", "size_position"]
