"""
Funding Skew Reversal Strategy Implementation

Bets on the spread between price moves and funding rate changes reverting to
its historical mean.
"""

from .config import FundingSkewReversalConfig
from .strategy import FundingSkewReversalStrategy

__all__ = [
    'FundingSkewReversalStrategy',
    'FundingSkewReversalConfig',
]
