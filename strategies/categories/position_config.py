"""
Configuration shared by all position strategies.

Pydantic models for type-safe configuration with automatic validation.
Each strategy subclasses PositionStrategyConfig and overrides defaults or
adds its own thresholds.
"""

import os
from decimal import Decimal
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _default_cache_dir() -> str:
    return os.getenv("BULLBEAR_CACHE_DIR", "./cache")


class PositionStrategyConfig(BaseModel):
    """Common settings: sizing, exits, persistence and execution."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    exchange: str = Field(default="bullbear", description="Platform client name")

    # Sizing
    collateral: Decimal = Field(
        default=Decimal("10.1"),
        description="USDC collateral per position (slightly above the $10 minimum to cover gas)",
        gt=0,
    )
    leverage: Decimal = Field(default=Decimal("2"), description="Target leverage", gt=0)
    max_positions: int = Field(default=3, description="Maximum concurrent positions", ge=1)
    max_new_positions_per_cycle: Optional[int] = Field(
        default=None,
        description="Cap on opens per cycle (None = fill every free slot)",
        ge=1,
    )
    min_balance: Optional[Decimal] = Field(
        default=None,
        description="USDC balance required to run a cycle (defaults to collateral)",
        ge=0,
    )

    # Exits (fractions, 0.05 = 5%)
    take_profit_percent: Optional[float] = Field(default=0.05, ge=0)
    stop_loss_percent: Optional[float] = Field(default=0.03, ge=0)
    max_position_hours: Optional[float] = Field(default=48, gt=0)

    # Cooldown
    blacklist_hours: float = Field(default=6, description="Hours an asset is skipped after a close", ge=0)

    # Persistence
    cache_dir: str = Field(default_factory=_default_cache_dir, description="Directory for state, history and query caches")
    state_file: Optional[str] = Field(default=None, description="State file name (default <code>-state.json)")
    history_file: Optional[str] = Field(default=None, description="Trade history file name (default <code>-history.json)")

    # Execution
    dry_run: bool = Field(default=False, description="Simulate opens/closes without broadcasting")
    debug: bool = Field(default=True, description="Log per-asset scoring details")
    retry_delay_seconds: float = Field(default=10, description="Delay before retrying a sequence mismatch", ge=0)
    max_tx_attempts: int = Field(default=3, description="Attempts per transaction on sequence mismatch", ge=1)
    open_delay_seconds: float = Field(default=20, description="Delay between opens in one cycle", ge=0)
    open_retry_attempts: int = Field(default=1, description="Attempts when an open returns no result", ge=1)
    close_retry_attempts: int = Field(default=1, description="Attempts when a close returns no result", ge=1)
    empty_result_retry_delay_seconds: float = Field(default=20, ge=0)
    recover_position_id: bool = Field(
        default=False,
        description="When the open tx carries no position id, track the newest untracked on-chain position",
    )
    rest_url: Optional[str] = Field(default=None, description="REST endpoint override")

    @field_validator("exchange")
    @classmethod
    def validate_exchange(cls, v: str) -> str:
        return v.lower()

    def required_balance(self) -> Decimal:
        return self.min_balance if self.min_balance is not None else self.collateral

    def resolve_path(self, filename: str) -> Path:
        path = Path(filename)
        return path if path.is_absolute() or path.parent != Path(".") else Path(self.cache_dir) / path

    def state_path(self, code: str) -> Path:
        return self.resolve_path(self.state_file or f"{code}-state.json")

    def history_path(self, code: str) -> Path:
        return self.resolve_path(self.history_file or f"{code}-history.json")
