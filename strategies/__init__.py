"""
Trading Strategies Module
Provides the strategy abstraction and the BullBear position strategies.

Architecture:
- BaseStrategy: Minimal abstract interface that all strategies implement
- PositionStrategy: shared cycle (balance check, state, exits, entries)
- Concrete Strategies: FRA, FSR, LIT, MBF, VBH, YIELD, RMM
  - Each supplies its scoring and exit rules plus a pydantic config
"""

from .base_strategy import BaseStrategy
from .categories import PositionStrategy, PositionStrategyConfig
from .factory import StrategyFactory

# Strategy implementations
from .implementations import (
    FundingRateArbitrageConfig,
    FundingRateArbitrageStrategy,
    FundingSkewReversalConfig,
    FundingSkewReversalStrategy,
    LiquidityImbalanceConfig,
    LiquidityImbalanceStrategy,
    MomentumBreakoutConfig,
    MomentumBreakoutStrategy,
    RapidMarketMomentumConfig,
    RapidMarketMomentumStrategy,
    VolatilityBreakoutConfig,
    VolatilityBreakoutStrategy,
    YieldHarvesterConfig,
    YieldHarvesterStrategy,
)

__all__ = [
    # Core classes
    'BaseStrategy',
    'PositionStrategy',
    'PositionStrategyConfig',
    'StrategyFactory',

    # Strategies
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
