"""
Liquidity Imbalance Configuration
"""

from decimal import Decimal
from typing import Optional

from pydantic import Field

from strategies.categories.position_config import PositionStrategyConfig


class LiquidityImbalanceConfig(PositionStrategyConfig):
    """Contrarian entries on lopsided open interest, scaled leverage."""

    leverage: Decimal = Field(default=Decimal("2.5"), description="Base leverage before scaling", gt=0)
    max_leverage_cap: Decimal = Field(default=Decimal("5"), description="Hard leverage ceiling", gt=0)
    max_new_positions_per_cycle: Optional[int] = Field(default=1, ge=1)
    min_balance: Optional[Decimal] = Field(default=Decimal("15"), ge=0)

    # Entry
    min_oi_ratio: float = Field(default=2.0, description="Minimum larger/smaller OI ratio", ge=1)
    min_funding_rate_threshold: float = Field(
        default=15,
        description="Funding rate (annualized %) that overrides or boosts the OI signal",
        ge=0,
    )

    # Leverage scaling
    boost_imbalance: float = Field(default=3, description="OI ratio above which leverage is boosted")
    boost_funding: float = Field(default=25, description="Funding rate above which leverage is boosted")
    boost_factor: Decimal = Field(default=Decimal("1.2"), gt=0)
    strong_imbalance: float = Field(default=5, description="OI ratio above which leverage is boosted more")
    strong_funding: float = Field(default=40, description="Funding rate above which leverage is boosted more")
    strong_factor: Decimal = Field(default=Decimal("1.5"), gt=0)

    # Exit
    take_profit_percent: Optional[float] = Field(default=0.03, ge=0)
    stop_loss_percent: Optional[float] = Field(default=0.04, ge=0)
    max_position_hours: Optional[float] = Field(default=24, gt=0)
    blacklist_hours: float = Field(default=6, ge=0)

    # Execution
    open_retry_attempts: int = Field(default=3, ge=1)
    close_retry_attempts: int = Field(default=3, ge=1)
    empty_result_retry_delay_seconds: float = Field(default=20, ge=0)
    recover_position_id: bool = Field(default=True)
