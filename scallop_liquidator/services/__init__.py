"""Service modules"""
from .liquidator import Liquidator, Mode, RunOutcome
from .position_service import PositionQueryService

__all__ = ["Liquidator", "Mode", "PositionQueryService", "RunOutcome"]
