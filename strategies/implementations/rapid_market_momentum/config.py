"""
Rapid Market Momentum Configuration
"""

from decimal import Decimal
from typing import Optional

from pydantic import Field

from strategies.categories.position_config import PositionStrategyConfig


class RapidMarketMomentumConfig(PositionStrategyConfig):
    """Short lookback, forced trades and a rotating blacklist."""

    collateral: Decimal = Field(default=Decimal("11"), gt=0)
    price_history_length: int = Field(default=2, description="Price samples kept per asset", ge=2)
    min_price_change: float = Field(default=0.0001, description="Move needed for a momentum signal", ge=0)
    force_trade: bool = Field(default=True, description="Trade on funding or a coin flip when nothing moves")
    forced_trade_strength: float = Field(default=0.1, ge=0)

    rotation_minutes: float = Field(default=5, description="Blacklist is cleared this often", gt=0)
    ignore_blacklist: bool = Field(default=True, description="Enter blacklisted assets anyway")

    take_profit_percent: Optional[float] = Field(default=0.05, ge=0)
    stop_loss_percent: Optional[float] = Field(default=0.03, ge=0)
    max_position_hours: Optional[float] = Field(default=12, gt=0)
    blacklist_hours: float = Field(default=6, ge=0)
