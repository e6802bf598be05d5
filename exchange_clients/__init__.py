"""
Shared Platform Clients Library

Provides the interface strategies use to read market data and open/close
basket positions, plus the BullBear implementation.

Modules:
    - base_client: Platform interface (BasePerpsClient)
    - base_models: Shared dataclasses/utilities
    - cache: JSON file cache for slow-changing queries
"""

from .base_client import BasePerpsClient
from .base_models import (
    FundingRateInfo,
    Market,
    MissingCredentialsError,
    Position,
    PositionAsset,
    SequenceMismatchError,
    TransactionError,
    TxResult,
    query_retry,
    validate_credentials,
)
from .cache import JsonFileCache

__all__ = [
    "BasePerpsClient",
    "FundingRateInfo",
    "Market",
    "MissingCredentialsError",
    "Position",
    "PositionAsset",
    "SequenceMismatchError",
    "TransactionError",
    "TxResult",
    "query_retry",
    "validate_credentials",
    "JsonFileCache",
]

__version__ = "1.0.0"
