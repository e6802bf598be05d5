"""
Momentum Breakout Strategy Implementation

Follows time-weighted price momentum, optionally hedged with an asset moving
the other way.
"""

from .config import MomentumBreakoutConfig
from .strategy import MomentumBreakoutStrategy

__all__ = [
    'MomentumBreakoutStrategy',
    'MomentumBreakoutConfig',
]
