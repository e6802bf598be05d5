"""
Volatility Breakout Configuration
"""

from decimal import Decimal
from typing import Optional

from pydantic import Field

from strategies.categories.position_config import PositionStrategyConfig


class VolatilityBreakoutConfig(PositionStrategyConfig):
    """Volatility, breakout and trailing stop settings."""

    leverage: Decimal = Field(default=Decimal("2"), description="Leverage at the minimum volatility", gt=0)
    max_leverage: Decimal = Field(default=Decimal("3"), description="Leverage ceiling", gt=0)

    # Sampling
    price_history_length: int = Field(default=72, description="Price samples kept per asset", ge=2)
    sampling_interval_minutes: float = Field(default=10, description="Minimum spacing between samples", ge=0)

    # Volatility
    volatility_window: int = Field(default=24, description="Samples used for each volatility reading", ge=2)
    min_volatility: float = Field(default=0.03, description="Minimum volatility to trade", ge=0)
    volatility_breakout_factor: float = Field(
        default=1.5,
        description="Current volatility over its recent average needed to trade",
        gt=0,
    )

    # Breakout
    price_range_periods: int = Field(default=24, description="Samples forming the reference range", ge=2)
    breakout_threshold: float = Field(default=0.02, description="Minimum breakout strength (fraction of range)", ge=0)
    confirmation_candles: int = Field(default=2, description="Consecutive samples confirming a breakout", ge=1)

    # Exit
    trailing_stop_distance: float = Field(default=0.04, description="Allowed giveback from the peak PnL", ge=0)
    profit_lock_threshold: float = Field(default=0.06, description="Peak PnL that arms the trailing stop", ge=0)
    take_profit_percent: Optional[float] = Field(default=None, ge=0)
    stop_loss_percent: Optional[float] = Field(default=0.05, ge=0)
    max_position_hours: Optional[float] = Field(default=48, gt=0)
    blacklist_hours: float = Field(default=6, ge=0)
