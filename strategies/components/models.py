"""
Data models shared by the position strategies.

Tracked positions are persisted in the strategy state file with camelCase
keys so existing state files keep loading.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional

from exchange_clients.base_models import (
    FundingRateInfo,
    Market,
    Position,
    PositionAsset,
    to_decimal,
)


def now_ms() -> int:
    return int(time.time() * 1000)


MS_PER_HOUR = 60 * 60 * 1000


@dataclass
class TrackedPosition:
    """A position opened by this strategy and remembered across runs."""

    id: str
    created_at: int
    assets: List[PositionAsset]
    leverage: Optional[str] = None
    entry_prices: Dict[str, float] = field(default_factory=dict)
    entry_funding_rates: Dict[str, float] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict)

    _KNOWN_KEYS = ("createdAt", "openedAt", "entryTimestamp", "assets", "leverage", "entryPrices", "entryFundingRates")

    def hold_hours(self, at_ms: Optional[int] = None) -> float:
        return ((at_ms if at_ms is not None else now_ms()) - self.created_at) / MS_PER_HOUR

    @property
    def denoms(self) -> List[str]:
        return [asset.denom for asset in self.assets]

    @property
    def primary(self) -> PositionAsset:
        return self.assets[0]

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "createdAt": self.created_at,
            "assets": [asset.to_order() for asset in self.assets],
            "entryPrices": dict(self.entry_prices),
            "entryFundingRates": dict(self.entry_funding_rates),
        }
        if self.leverage is not None:
            payload["leverage"] = self.leverage
        payload.update(self.extra)
        return payload

    @classmethod
    def from_dict(cls, position_id: str, data: Dict[str, Any]) -> "TrackedPosition":
        created_at = data.get("createdAt") or data.get("openedAt") or data.get("entryTimestamp") or now_ms()
        return cls(
            id=str(position_id),
            created_at=int(created_at),
            assets=[PositionAsset.from_dict(asset) for asset in data.get("assets") or []],
            leverage=str(data["leverage"]) if data.get("leverage") is not None else None,
            entry_prices={k: float(v) for k, v in (data.get("entryPrices") or {}).items()},
            entry_funding_rates={k: float(v) for k, v in (data.get("entryFundingRates") or {}).items()},
            extra={k: v for k, v in data.items() if k not in cls._KNOWN_KEYS},
        )


@dataclass
class Opportunity:
    """A scored entry candidate."""

    denom: str
    direction: str  # 'long' or 'short'
    score: float
    funding_rate: Optional[float] = None
    leverage: Optional[Decimal] = None
    display: Optional[str] = None
    metrics: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_long(self) -> bool:
        return self.direction == "long"

    def leg(self, percent: str = "1.0", long: Optional[bool] = None) -> PositionAsset:
        return PositionAsset(
            denom=self.denom,
            long=self.is_long if long is None else long,
            percent=percent,
        )


@dataclass
class ExitDecision:
    """Result of evaluating one tracked position."""

    should_exit: bool
    reason: Optional[str] = None
    pnl: Optional[float] = None

    @classmethod
    def hold(cls, pnl: Optional[float] = None) -> "ExitDecision":
        return cls(False, None, pnl)

    @classmethod
    def exit(cls, reason: str, pnl: Optional[float] = None) -> "ExitDecision":
        return cls(True, reason, pnl)


@dataclass
class MarketSnapshot:
    """Everything fetched from the platform at the start of a cycle."""

    markets: List[Market]
    prices: Dict[str, Decimal]
    funding_rates: Dict[str, FundingRateInfo]
    max_leverages: Dict[str, Decimal]
    positions: List[Position]
    balance: Decimal
    timestamp: int = field(default_factory=now_ms)

    def price(self, denom: str) -> Optional[float]:
        value = self.prices.get(denom)
        return float(value) if value is not None else None

    def funding(self, denom: str) -> Optional[FundingRateInfo]:
        return self.funding_rates.get(denom)

    def funding_rate(self, denom: str) -> Optional[float]:
        info = self.funding_rates.get(denom)
        return info.funding_rate if info is not None else None

    def max_leverage(self, denom: str) -> Optional[Decimal]:
        return to_decimal(self.max_leverages.get(denom))

    def market(self, denom: str) -> Optional[Market]:
        for market in self.markets:
            if market.denom == denom:
                return market
        return None

    def position(self, position_id: str) -> Optional[Position]:
        for position in self.positions:
            if position.id == str(position_id):
                return position
        return None


@dataclass
class CycleSummary:
    """What one strategy cycle did."""

    opened: List[str] = field(default_factory=list)
    closed: List[str] = field(default_factory=list)
    skipped: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"opened": list(self.opened), "closed": list(self.closed), "skipped": self.skipped}
