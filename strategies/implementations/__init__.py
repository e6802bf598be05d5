"""
Strategy Implementations

Concrete position strategies, each with its own config and scoring rules:
- funding_rate_arbitrage (fra): extreme funding, side that gets paid
- funding_skew_reversal (fsr): price/funding spread mean reversion
- liquidity_imbalance (lit): fade the crowded open interest side
- momentum_breakout (mbf): time-weighted momentum
- volatility_breakout (vbh): confirmed range breakouts in volatility expansions
- yield_harvester (yield): funding collection on liquid perps
- rapid_market_momentum (rmm): fast two-leg momentum trades
"""

from .funding_rate_arbitrage import FundingRateArbitrageConfig, FundingRateArbitrageStrategy
from .funding_skew_reversal import FundingSkewReversalConfig, FundingSkewReversalStrategy
from .liquidity_imbalance import LiquidityImbalanceConfig, LiquidityImbalanceStrategy
from .momentum_breakout import MomentumBreakoutConfig, MomentumBreakoutStrategy
from .rapid_market_momentum import RapidMarketMomentumConfig, RapidMarketMomentumStrategy
from .volatility_breakout import VolatilityBreakoutConfig, VolatilityBreakoutStrategy
from .yield_harvester import YieldHarvesterConfig, YieldHarvesterStrategy

__all__ = [
    'FundingRateArbitrageStrategy',
    'FundingRateArbitrageConfig',
    'FundingSkewReversalStrategy',
    'FundingSkewReversalConfig',
    'LiquidityImbalanceStrategy',
    'LiquidityImbalanceConfig',
    'MomentumBreakoutStrategy',
    'MomentumBreakoutConfig',
    'VolatilityBreakoutStrategy',
    'VolatilityBreakoutConfig',
    'YieldHarvesterStrategy',
    'YieldHarvesterConfig',
    'RapidMarketMomentumStrategy',
    'RapidMarketMomentumConfig',
]
