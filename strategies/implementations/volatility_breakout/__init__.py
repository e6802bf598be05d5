"""
Volatility Breakout Strategy Implementation

Enters confirmed range breakouts during volatility expansions and protects
gains with a trailing stop.
"""

from .config import VolatilityBreakoutConfig
from .strategy import VolatilityBreakoutStrategy

__all__ = [
    'VolatilityBreakoutStrategy',
    'VolatilityBreakoutConfig',
]
