"""
Liquidity Imbalance Strategy Implementation

Trades against the crowded side of the open interest.
"""

from .config import LiquidityImbalanceConfig
from .strategy import LiquidityImbalanceStrategy

__all__ = [
    'LiquidityImbalanceStrategy',
    'LiquidityImbalanceConfig',
]
