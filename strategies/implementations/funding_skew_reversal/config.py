"""
Funding Skew Reversal Configuration
"""

from decimal import Decimal
from typing import Optional

from pydantic import Field

from strategies.categories.position_config import PositionStrategyConfig


class FundingSkewReversalConfig(PositionStrategyConfig):
    """Z-score of the price/funding spread against its rolling distribution."""

    leverage: Decimal = Field(default=Decimal("2.5"), gt=0)

    # History
    price_history_length: int = Field(default=24, description="Price samples kept per asset", ge=3)
    funding_history_length: int = Field(default=24, description="Funding samples kept per asset", ge=3)
    min_history_for_correlation: int = Field(
        default=3,
        description="Price/funding spreads needed before spread statistics are computed",
        ge=2,
    )
    price_change_periods: int = Field(default=2, description="Lookback for the recent price change", ge=1)

    # Entry
    min_funding_rate_for_skew: float = Field(
        default=15,
        description="Minimum absolute funding rate (annualized %) to consider a skew",
        ge=0,
    )
    skew_threshold: float = Field(default=2.0, description="Absolute z-score that counts as a skew", gt=0)

    # Exit
    funding_reversal_exit: bool = Field(default=True, description="Exit when funding normalizes or the skew reverses")
    funding_normalized_ratio: float = Field(
        default=0.3,
        description="Funding counts as normalized below this fraction of the entry rate",
        ge=0,
        le=1,
    )
    take_profit_percent: Optional[float] = Field(default=0.08, ge=0)
    stop_loss_percent: Optional[float] = Field(default=0.05, ge=0)
    max_position_hours: Optional[float] = Field(default=72, gt=0)
    blacklist_hours: float = Field(default=6, ge=0)
