"""
Shared components for the position strategies.

These components are reusable across the strategy implementations.
"""

from .blacklist import AssetBlacklist
from .market_history import MarketHistory
from .models import (
    CycleSummary,
    ExitDecision,
    MarketSnapshot,
    Opportunity,
    TrackedPosition,
)
from .position_executor import PositionExecutor
from .state_store import JsonStateStore
from .trade_history import TradeHistory

__all__ = [
    # Persistence
    'JsonStateStore',
    'TradeHistory',
    'AssetBlacklist',
    'MarketHistory',

    # Execution
    'PositionExecutor',

    # Models
    'CycleSummary',
    'ExitDecision',
    'MarketSnapshot',
    'Opportunity',
    'TrackedPosition',
]
