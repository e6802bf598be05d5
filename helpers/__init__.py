"""
Helper modules for the BullBear strategy bots.
"""

from .unified_logger import (
    get_core_logger,
    get_exchange_logger,
    get_logger,
    get_strategy_logger,
    log_stage,
)

__all__ = [
    'get_logger',
    'get_exchange_logger',
    'get_strategy_logger',
    'get_core_logger',
    'log_stage',
]
