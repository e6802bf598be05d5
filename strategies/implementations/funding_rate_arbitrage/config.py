"""
Funding Rate Arbitrage Configuration
"""

from typing import Optional

from pydantic import Field

from strategies.categories.position_config import PositionStrategyConfig


class FundingRateArbitrageConfig(PositionStrategyConfig):
    """Entry on extreme funding with a lopsided open interest."""

    # Entry conditions
    min_funding_rate_entry: float = Field(
        default=15,
        description="Minimum absolute funding rate (annualized %) to enter",
        ge=0,
    )
    min_oi_imbalance: float = Field(
        default=1.2,
        description="Minimum OI imbalance ratio (higher side / lower side)",
        ge=1,
    )

    # Exit conditions
    min_funding_rate_exit: float = Field(
        default=5,
        description="Exit when the absolute funding rate falls below this",
        ge=0,
    )
    take_profit_percent: Optional[float] = Field(default=0.05, ge=0)
    stop_loss_percent: Optional[float] = Field(default=0.03, ge=0)
    max_position_hours: Optional[float] = Field(default=48, gt=0)
    blacklist_hours: float = Field(default=6, ge=0)
