"""
Rapid Market Momentum Strategy Implementation

High-frequency two-leg trades on the latest price move, always in the market.
"""

from .config import RapidMarketMomentumConfig
from .strategy import RapidMarketMomentumStrategy

__all__ = [
    'RapidMarketMomentumStrategy',
    'RapidMarketMomentumConfig',
]
