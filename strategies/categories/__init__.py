"""
Strategy Categories

- PositionStrategy: template for strategies that open/close basket
  positions on a fixed cycle, with persisted state and trade history
"""

from .position_config import PositionStrategyConfig
from .position_strategy import PositionStrategy

__all__ = [
    'PositionStrategy',
    'PositionStrategyConfig',
]
