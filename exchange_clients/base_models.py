"""
Shared data structures, exceptions, and utilities for platform clients.
"""

from __future__ import annotations

import json
import re
from dataclasses import asdict, dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Tuple, Type, Union

from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from helpers.unified_logger import get_core_logger


SEQUENCE_MISMATCH_MARKER = "account sequence mismatch"
POSITION_ID_PATTERN = re.compile(r"position_id[\"']?:\s*[\"']?(\d+)")

_logger = get_core_logger("client_utils")


class MissingCredentialsError(Exception):
    """Raised when wallet credentials are missing or still placeholders."""
    pass


class TransactionError(Exception):
    """A broadcast or execution failure reported by the chain."""
    pass


class SequenceMismatchError(TransactionError):
    """The account sequence went stale; refreshing the session and retrying usually fixes it."""
    pass


def is_sequence_mismatch(error: BaseException) -> bool:
    return SEQUENCE_MISMATCH_MARKER in str(error).lower()


def validate_credentials(
    credential_name: str,
    credential_value: Optional[str],
    placeholder_values: Optional[List[str]] = None,
) -> None:
    """
    Validate a credential loaded from the environment.

    Args:
        credential_name: Name of the credential (e.g., 'SEED')
        credential_value: Value of the credential from environment
        placeholder_values: List of placeholder values to reject

    Raises:
        MissingCredentialsError: If credential is missing or is a placeholder
    """
    if placeholder_values is None:
        placeholder_values = [
            "your_seed_phrase_here",
            "your mnemonic here",
            "PLACEHOLDER",
            "placeholder",
            "",
        ]

    if not credential_value:
        raise MissingCredentialsError(f"Missing {credential_name} environment variable")

    if credential_value.strip() in placeholder_values:
        raise MissingCredentialsError(f"{credential_name} is not configured (placeholder or empty)")


def query_retry(
    default_return: Any = None,
    exception_type: Union[Type[Exception], Tuple[Type[Exception], ...]] = (Exception,),
    max_attempts: int = 3,
    min_wait: float = 1,
    max_wait: float = 10,
    reraise: bool = False,
):
    """
    Retry decorator for read-only queries with exponential backoff.

    Args:
        default_return: Value to return if all retries fail
        exception_type: Exception types to retry on
        max_attempts: Maximum number of attempts
        min_wait: Minimum wait time between retries
        max_wait: Maximum wait time between retries
        reraise: Whether to reraise the exception after retries
    """

    def retry_error_callback(retry_state: RetryCallState):
        _logger.warning(
            f"Query [{retry_state.fn.__name__}] failed after {retry_state.attempt_number} attempts: "
            f"{retry_state.outcome.exception()}"
        )
        return default_return

    return retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=1, min=min_wait, max=max_wait),
        retry=retry_if_exception_type(exception_type),
        retry_error_callback=None if reraise else retry_error_callback,
        reraise=reraise,
    )


def to_decimal(value: Any, default: Optional[Decimal] = None) -> Optional[Decimal]:
    """Convert strings/numbers to Decimal, returning ``default`` for junk."""
    if value in (None, "", "null"):
        return default
    try:
        return Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        return default


def format_leverage(leverage: Union[Decimal, float, int, str]) -> str:
    """Render leverage the way the contract expects it: ``"2"``, ``"2.5"``."""
    value = to_decimal(leverage)
    if value is None:
        raise ValueError(f"Invalid leverage: {leverage!r}")
    return format(value.normalize(), "f")


@dataclass
class Market:
    """An enabled BullBear market."""

    denom: str
    display: str
    day_change: Optional[Decimal] = None
    total_open_interest: Optional[Decimal] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Market":
        return cls(
            denom=data["denom"],
            display=data.get("display") or data["denom"],
            day_change=to_decimal(data.get("day_change")),
            total_open_interest=to_decimal(data.get("total_open_interest")),
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"denom": self.denom, "display": self.display}
        if self.day_change is not None:
            payload["day_change"] = str(self.day_change)
        if self.total_open_interest is not None:
            payload["total_open_interest"] = str(self.total_open_interest)
        return payload


@dataclass
class FundingRateInfo:
    """Funding snapshot for one market. ``funding_rate`` is an annualized percentage."""

    funding_rate: float
    long_oi: float = 0.0
    short_oi: float = 0.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FundingRateInfo":
        return cls(
            funding_rate=float(data.get("fundingRate", 0) or 0),
            long_oi=float(data.get("longOI", 0) or 0),
            short_oi=float(data.get("shortOI", 0) or 0),
        )

    def to_dict(self) -> Dict[str, float]:
        return {"fundingRate": self.funding_rate, "longOI": self.long_oi, "shortOI": self.short_oi}


@dataclass
class PositionAsset:
    """One leg of a basket position."""

    denom: str
    long: bool
    percent: str
    exec_price: Optional[Decimal] = None
    collateral_percent: Optional[Decimal] = None

    @property
    def direction(self) -> str:
        return "long" if self.long else "short"

    @property
    def weight(self) -> float:
        return float(self.percent)

    def to_order(self) -> Dict[str, Any]:
        """Shape accepted by the open_position message."""
        return {"denom": self.denom, "long": self.long, "percent": self.percent}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PositionAsset":
        return cls(
            denom=data["denom"],
            long=bool(data.get("long")),
            percent=str(data.get("percent", "1.0")),
            exec_price=to_decimal(data.get("exec_price")),
            collateral_percent=to_decimal(data.get("collateral_percent")),
        )


@dataclass
class Position:
    """An open position as reported by the BullBear contract."""

    id: str
    assets: List[PositionAsset] = field(default_factory=list)
    leverage: Optional[Decimal] = None
    pnl_percent: Optional[float] = None
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_raw(cls, data: Dict[str, Any]) -> "Position":
        pnl = to_decimal(data.get("pnl_percent"))
        return cls(
            id=str(data.get("id") if data.get("id") is not None else data.get("position_id")),
            assets=[PositionAsset.from_dict(asset) for asset in data.get("assets") or []],
            leverage=to_decimal(data.get("leverage")),
            pnl_percent=float(pnl) if pnl is not None else None,
            raw=data,
        )

    @property
    def denoms(self) -> List[str]:
        return [asset.denom for asset in self.assets]


@dataclass
class TxResult:
    """Outcome of an executed contract message."""

    tx_hash: str
    position_id: Optional[str] = None
    height: Optional[int] = None
    gas_used: Optional[int] = None
    events: Any = None
    raw_log: Optional[str] = None
    dry_run: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def extract_position_id(events: Any) -> Optional[str]:
    """
    Find the ``position_id`` attribute in transaction events.

    Searches the serialized events first, then walks wasm attribute lists
    (``[{"type": "wasm", "attributes": [{"key": ..., "value": ...}]}]``).
    """
    if not events:
        return None

    serialized = json.dumps(events, default=str)
    match = POSITION_ID_PATTERN.search(serialized)
    if match:
        return match.group(1)

    if isinstance(events, list):
        for event in events:
            if not isinstance(event, dict) or event.get("type") != "wasm":
                continue
            for attribute in event.get("attributes") or []:
                if attribute.get("key") == "position_id":
                    return str(attribute.get("value"))
    return None
