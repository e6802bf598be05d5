"""
Momentum Breakout Configuration
"""

from typing import Literal, Optional

from pydantic import Field

from strategies.categories.position_config import PositionStrategyConfig


class MomentumBreakoutConfig(PositionStrategyConfig):
    """Momentum thresholds, sampling cadence and basket shape."""

    # Sampling
    price_history_length: int = Field(default=10, description="Price samples kept per asset", ge=2)
    sample_interval_minutes: float = Field(default=60, description="Minimum spacing between samples", ge=0)
    significant_move: float = Field(
        default=0.005,
        description="A move larger than this fraction is sampled regardless of spacing",
        ge=0,
    )
    momentum_window: int = Field(default=3, description="Samples needed before momentum is scored", ge=2)

    # Entry
    breakout_threshold: float = Field(default=0.015, description="Momentum needed for a breakout", gt=0)
    long_bias_factor: float = Field(
        default=0.8,
        description="Multiplier on the threshold for long entries (lower = easier longs)",
        gt=0,
    )
    priority_denom: Optional[str] = Field(default="uinit", description="Substring of denoms preferred for longs")
    priority_bonus: float = Field(default=0.5, ge=0)

    # Basket
    position_mode: Literal["single", "balanced"] = Field(
        default="single",
        description="'single' = one full leg, 'balanced' = two half legs in opposite directions",
    )
    default_pair_asset: str = Field(default="perps/uusdc", description="Hedge leg when nothing moves the other way")

    # Exit
    take_profit_percent: Optional[float] = Field(default=0.05, ge=0)
    stop_loss_percent: Optional[float] = Field(default=0.03, ge=0)
    max_position_hours: Optional[float] = Field(default=24, gt=0)
    blacklist_hours: float = Field(default=8, ge=0)
