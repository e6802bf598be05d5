"""
Funding Rate Arbitrage Strategy Implementation

Captures assets with extreme funding rates: long on negative funding
(shorts pay longs), short on positive funding (longs pay shorts).
"""

from .config import FundingRateArbitrageConfig
from .strategy import FundingRateArbitrageStrategy

__all__ = [
    'FundingRateArbitrageStrategy',
    'FundingRateArbitrageConfig',
]
