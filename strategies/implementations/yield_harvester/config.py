"""
Yield Harvester Configuration
"""

from decimal import Decimal
from typing import Optional

from pydantic import Field

from strategies.categories.position_config import PositionStrategyConfig


class YieldHarvesterConfig(PositionStrategyConfig):
    """Funding thresholds, liquidity weighting and volatility-aware leverage."""

    leverage: Decimal = Field(default=Decimal("2"), description="Leverage in calm markets", gt=0)
    high_volatility_leverage: Decimal = Field(default=Decimal("1.5"), gt=0)
    volatility_threshold: float = Field(
        default=5,
        description="Absolute 24h change (%) above which the lower leverage is used",
        ge=0,
    )

    # Entry
    min_funding_rate_entry: float = Field(default=15, description="Minimum absolute funding rate (annualized %)", ge=0)
    min_oi_imbalance: float = Field(default=1.3, ge=1)
    contrarian_bonus: float = Field(default=1.2, description="Score multiplier when the crowd is on the other side", ge=1)
    prioritize_high_liquidity: bool = Field(default=True)

    # Exit (PnL is leveraged here)
    min_funding_rate_exit: float = Field(default=5, ge=0)
    default_pnl_leverage: Decimal = Field(
        default=Decimal("2"),
        description="Leverage applied to the PnL estimate when the position does not report one",
        gt=0,
    )
    take_profit_percent: Optional[float] = Field(default=0.03, ge=0)
    stop_loss_percent: Optional[float] = Field(default=0.02, ge=0)
    max_position_hours: Optional[float] = Field(default=72, gt=0)
    blacklist_hours: float = Field(default=6, ge=0)
